from dataclasses import dataclass, replace
from typing import Any, Self

from apngsplit.kernel import tree
from apngsplit.kernel.chunk import (
    ChunkSettings,
    PNGChunkHeader,
    check_signature,
    mktag,
    raw_chunk,
    read_chunks,
    untag,
    write_chunks,
)

PNG_SIGNATURE = b'\x89PNG\r\n\x1a\n'


@dataclass(frozen=True)
class _DefaultOverride:
    def __call__(self, **kwargs: Any) -> Self:
        return replace(self, **kwargs)


@dataclass(frozen=True)
class Preset(ChunkSettings, _DefaultOverride):
    read_chunks = read_chunks
    write_chunks = write_chunks
    check_signature = check_signature
    mktag = mktag
    untag = untag

    # static pass through
    raw_chunk = staticmethod(raw_chunk)
    find = staticmethod(tree.find)
    findall = staticmethod(tree.findall)
    render = staticmethod(tree.render)
    renders = staticmethod(tree.renders)


png = Preset(
    header_dtype=PNGChunkHeader,
    signature=PNG_SIGNATURE,
    terminator='IEND',
    crc_check='warn',
)
