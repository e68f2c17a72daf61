import io
import logging
from collections.abc import Iterable
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import Any, Protocol

from PIL import Image

from apngsplit.errors import DecodeError

# what Pillow raises for streams it cannot decode
DECODE_ERRORS = (OSError, SyntaxError, ValueError)


class ImageDecoder(Protocol):
    """Turns a standalone PNG stream into an image handle, raising on failure."""

    def __call__(self, stream: bytes) -> Any: ...


def decode_png(stream: bytes) -> Image.Image:
    im = Image.open(io.BytesIO(stream), formats=['PNG'])
    im.load()
    return im


def decode_all(
    streams: Iterable[bytes],
    decoder: ImageDecoder = decode_png,
    max_workers: int | None = None,
) -> list[Any]:
    """Decode every stream concurrently.

    Either all decodes succeed and their handles are returned in input order,
    or the first failure (by frame index) is raised as `DecodeError`. Exceptions
    outside of `DECODE_ERRORS` propagate unchanged.
    """
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures: dict[Future[Any], int] = {
            executor.submit(decoder, stream): idx
            for idx, stream in enumerate(streams)
        }
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        failed = sorted(
            (futures[future], future)
            for future in done
            if future.exception() is not None
        )
        if failed:
            for future in pending:
                future.cancel()
            idx, future = failed[0]
            logging.debug(
                'frame %d failed to decode, dropping %d pending', idx, len(pending)
            )
            exc = future.exception()
            if not isinstance(exc, DECODE_ERRORS):
                raise exc
            raise DecodeError(idx) from exc
        return [future.result() for future in sorted(futures, key=futures.__getitem__)]
