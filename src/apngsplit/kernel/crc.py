import zlib

from numpy.typing import ArrayLike


def crc32(buffer: ArrayLike, offset: int = 0, length: int | None = None) -> int:
    """CRC-32 (IEEE 802.3 polynomial, as used by PNG chunks) of a byte range."""
    view = memoryview(buffer).cast('B')  # type: ignore[arg-type]
    end = len(view) if length is None else offset + length
    return zlib.crc32(view[offset:end]) & 0xFFFFFFFF
