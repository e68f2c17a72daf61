import logging
from abc import ABC
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from operator import attrgetter
from typing import (
    ClassVar,
    Generic,
    Literal,
    Protocol,
    Self,
    TypedDict,
    TypeVar,
    cast,
)

import numpy as np
from numpy.typing import NDArray

from apngsplit.errors import ChunkCRCError, MalformedInputError
from apngsplit.kernel.crc import crc32

ArrayBuffer = NDArray[np.uint8] | memoryview

TAG_SIZE = 4
CRC_SIZE = 4

CRCCheck = Literal['ignore', 'warn', 'strict']


class HeaderDType(Protocol):
    itemsize: ClassVar[int]
    names: ClassVar[tuple[str, str]]

    def tobytes(self) -> bytes: ...


T = TypeVar('T')


class ChunkHeaderDict(TypedDict):
    tag: bytes
    size: int


@dataclass(frozen=True, slots=True)
class ChunkHeaderData:
    tag: bytes
    size: int


class StructuredTuple(ABC, Generic[T]):
    __slots__ = ('_header',)
    dtype: ClassVar[type[HeaderDType]]

    def __init__(self, header: HeaderDType) -> None:
        self._header = header

    @classmethod
    def itemsize(cls) -> int:
        return cls.dtype.itemsize

    @classmethod
    def from_buffer(cls, buffer: ArrayBuffer) -> Self:
        if len(buffer) < cls.itemsize():
            raise MalformedInputError(
                f'expected {cls.itemsize()} bytes for {cls.__name__} '
                f'but got {len(buffer)}'
            )
        header = np.frombuffer(buffer, dtype=cls.dtype, count=1)[0]
        return cls(header)

    def __bytes__(self) -> bytes:
        return self._header.tobytes()

    def __getitem__(self, field: str) -> int:
        return int(cast(dict[str, int], self._header)[field])

    @classmethod
    def create(cls, data: T) -> Self:
        assert cls.dtype.names
        assert set(cls.dtype.names) == set(data.__class__.__annotations__)
        htuple = attrgetter(*cls.dtype.names)(data)
        header = np.array([htuple], dtype=cls.dtype)[0]
        return cls(header)


class ChunkHeader(StructuredTuple[ChunkHeaderData]):
    @property
    def tag(self) -> bytes:
        return cast(ChunkHeaderDict, self._header)['tag']

    @property
    def size(self) -> int:
        return int(cast(ChunkHeaderDict, self._header)['size'])


class PNGChunkHeader(ChunkHeader):
    dtype = cast(
        type[HeaderDType],
        np.dtype(
            [
                ('size', '>u4'),  # payload length, excludes tag and crc
                ('tag', 'S4'),
            ],
        ),
    )


@dataclass(frozen=True)
class ChunkSettings:
    header_dtype: type[ChunkHeader]
    signature: bytes
    terminator: str
    crc_check: CRCCheck = 'warn'


@dataclass(frozen=True, slots=True)
class Chunk:
    header: ChunkHeader
    data: ArrayBuffer
    crc: int

    @property
    def tag(self) -> str:
        return self.header.tag.decode('ascii')

    @property
    def span(self) -> int:
        """Number of bytes the chunk occupies in a stream."""
        return self.header.itemsize() + len(self) + CRC_SIZE

    def __len__(self) -> int:
        return len(self.data)

    def __bytes__(self) -> bytes:
        return (
            bytes(self.header)
            + memoryview(self.data).tobytes()
            + self.crc.to_bytes(CRC_SIZE, byteorder='big', signed=False)
        )

    def __repr__(self) -> str:
        return f'Chunk<{self.tag}>[{len(self)}]'


def nslice(buffer: ArrayBuffer, start: int, end: int) -> ArrayBuffer:
    res = buffer[start:end]
    if len(res) != end - start:
        raise MalformedInputError(
            f'chunk data size mismatch: {len(res)} != {end - start}'
        )
    return res


def check_signature(cfg: ChunkSettings, buffer: ArrayBuffer) -> int:
    head = bytes(buffer[: len(cfg.signature)])
    if head != cfg.signature:
        raise MalformedInputError(f'bad signature: {head!r}')
    return len(cfg.signature)


def read_chunk_header(
    cfg: ChunkSettings,
    buffer: ArrayBuffer,
    offset: int = 0,
) -> tuple[int, ChunkHeader]:
    header_data = buffer[offset : offset + cfg.header_dtype.itemsize()]
    chunk_header = cfg.header_dtype.from_buffer(header_data)
    # numpy drops trailing NULs, so short tags are caught here as well
    tag = chunk_header.tag
    if len(tag) != TAG_SIZE or not tag.isalpha():
        raise MalformedInputError(f'invalid chunk tag {tag!r} at offset {offset}')
    return offset + cfg.header_dtype.itemsize(), chunk_header


def untag(
    cfg: ChunkSettings,
    buffer: ArrayBuffer,
    offset: int = 0,
) -> tuple[int, Chunk]:
    offset, chunk_header = read_chunk_header(cfg, buffer, offset)
    end = offset + chunk_header.size
    chunk_data = nslice(buffer, offset, end)
    crc = int.from_bytes(bytes(nslice(buffer, end, end + CRC_SIZE)), byteorder='big')
    return end + CRC_SIZE, Chunk(chunk_header, chunk_data, crc)


def verify_crc(
    cfg: ChunkSettings,
    buffer: ArrayBuffer,
    offset: int,
    chunk: Chunk,
) -> None:
    if cfg.crc_check == 'ignore':
        return
    # crc covers the tag and payload, not the length field
    tag_offset = offset + cfg.header_dtype.itemsize() - TAG_SIZE
    actual = crc32(buffer, tag_offset, TAG_SIZE + len(chunk))
    if actual == chunk.crc:
        return
    exc = ChunkCRCError(chunk.tag, offset, chunk.crc, actual)
    if cfg.crc_check == 'strict':
        raise exc
    getattr(cfg, 'logger', logging).warning(exc)


def read_chunks(
    cfg: ChunkSettings,
    buffer: ArrayBuffer,
    offset: int | None = None,
) -> Iterator[tuple[int, Chunk]]:
    """Walk the chunk records of `buffer` in file order.

    Starts right after the signature unless `offset` is given. Stops after the
    terminator chunk or at the end of the buffer; the caller may stop earlier
    by leaving the loop.
    """
    if offset is None:
        offset = check_signature(cfg, buffer)
    while offset < len(buffer):
        noffset, chunk = untag(cfg, buffer, offset)
        verify_crc(cfg, buffer, offset, chunk)
        yield offset, chunk
        if chunk.tag == cfg.terminator:
            return
        offset = noffset


def raw_chunk(buffer: ArrayBuffer, offset: int, chunk: Chunk) -> ArrayBuffer:
    """Verbatim bytes of a chunk as it appears in `buffer`."""
    return nslice(buffer, offset, offset + chunk.span)


def mktag(
    cfg: ChunkSettings,
    tag: str,
    buffer: ArrayBuffer | bytes,
) -> Chunk:
    header = cfg.header_dtype.create(
        ChunkHeaderData(tag=tag.encode('ascii'), size=len(buffer)),
    )
    stream = bytearray(bytes(header))
    stream += memoryview(buffer).tobytes()
    skip = cfg.header_dtype.itemsize() - TAG_SIZE
    crc = crc32(stream, skip, len(stream) - skip)
    return Chunk(header, memoryview(buffer), crc)


def write_chunks(cfg: ChunkSettings, chunks: Iterable[Chunk]) -> bytes:
    stream = bytearray()
    for chunk in chunks:
        stream += bytes(chunk)
    return bytes(stream)
