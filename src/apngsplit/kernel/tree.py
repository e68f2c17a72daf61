import io
import sys
from collections.abc import Iterable, Iterator
from typing import IO

from parse import parse  # type: ignore[import-untyped]

from apngsplit.kernel.chunk import Chunk

Located = tuple[int, Chunk]


def findall(tag: str, chunks: Iterable[Located]) -> Iterator[Located]:
    for offset, chunk in chunks:
        if parse(tag, chunk.tag, case_sensitive=True, evaluate_result=False):
            yield offset, chunk


def find(tag: str, chunks: Iterable[Located]) -> Located | None:
    return next(findall(tag, chunks), None)


def render(
    chunks: Iterable[Located],
    stream: IO[str] = sys.stdout,
) -> None:
    for offset, chunk in chunks:
        print(
            f'<{chunk.tag} offset="{offset}" size="{len(chunk)}" '
            f'crc="0x{chunk.crc:08x}" />',
            file=stream,
        )


def renders(chunks: Iterable[Located]) -> str:
    with io.StringIO() as stream:
        render(chunks, stream=stream)
        return stream.getvalue()
