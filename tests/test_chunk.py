import logging
import struct
import zlib

import numpy as np
import pytest

from apngsplit.errors import ChunkCRCError, MalformedInputError
from apngsplit.kernel.crc import crc32
from apngsplit.kernel.preset import png
from pngdata import RED, SIGNATURE, chunk, iend, ihdr, make_png


def test_crc32_known_value():
    assert crc32(b'IEND') == 0xAE426082


def test_crc32_range():
    data = b'xxIHDRpayloadyy'
    assert crc32(data, 2, 11) == zlib.crc32(b'IHDRpayload')
    assert crc32(np.frombuffer(data, dtype=np.uint8), 2, 11) == crc32(data, 2, 11)


def test_visits_every_chunk_in_order():
    stream = make_png(3, 2, RED, extra=chunk(b'tEXt', b'Comment\x00hi'))
    visited = list(png.read_chunks(stream))

    assert [c.tag for _, c in visited] == ['IHDR', 'tEXt', 'IDAT', 'IEND']
    offsets = [offset for offset, _ in visited]
    assert offsets[0] == len(SIGNATURE)
    for (offset, c), nxt in zip(visited, offsets[1:] + [len(stream)]):
        assert offset + 12 + len(c) == nxt
    assert sum(c.span for _, c in visited) == len(stream) - len(SIGNATURE)


def test_raw_chunk_is_verbatim():
    stream = make_png(1, 1, RED)
    for offset, c in png.read_chunks(stream):
        assert bytes(png.raw_chunk(stream, offset, c)) == bytes(c)


def test_stops_after_terminator():
    stream = make_png(1, 1, RED) + b'trailing garbage'
    tags = [c.tag for _, c in png.read_chunks(stream)]
    assert tags[-1] == 'IEND'
    assert len(tags) == 3


def test_stops_at_end_of_buffer_without_terminator():
    stream = SIGNATURE + ihdr(1, 1)
    assert [c.tag for _, c in png.read_chunks(stream)] == ['IHDR']


def test_caller_stops_early():
    stream = make_png(1, 1, RED)
    walker = png.read_chunks(stream)
    _, first = next(walker)
    assert first.tag == 'IHDR'
    walker.close()


def test_bad_signature():
    with pytest.raises(MalformedInputError, match='signature'):
        list(png.read_chunks(b'GIF89a' + ihdr(1, 1)))


def test_short_signature():
    with pytest.raises(MalformedInputError):
        list(png.read_chunks(SIGNATURE[:4]))


def test_length_past_end_of_buffer():
    stream = SIGNATURE + struct.pack('>I', 1000) + b'IDAT' + b'\x00' * 10
    with pytest.raises(MalformedInputError, match='size mismatch'):
        list(png.read_chunks(stream))


def test_truncated_chunk_header():
    stream = SIGNATURE + ihdr(1, 1) + b'\x00\x00'
    with pytest.raises(MalformedInputError):
        list(png.read_chunks(stream))


def test_missing_crc():
    stream = SIGNATURE + iend()[:-2]
    with pytest.raises(MalformedInputError):
        list(png.read_chunks(stream))


def corrupt_crc(stream: bytes) -> bytes:
    # flip the last crc byte of IHDR
    pos = len(SIGNATURE) + 8 + 13 + 3
    return stream[:pos] + bytes([stream[pos] ^ 0xFF]) + stream[pos + 1 :]


def test_crc_mismatch_warns(caplog):
    stream = corrupt_crc(make_png(1, 1, RED))
    with caplog.at_level(logging.WARNING):
        tags = [c.tag for _, c in png.read_chunks(stream)]
    assert tags == ['IHDR', 'IDAT', 'IEND']
    assert 'crc mismatch in IHDR' in caplog.text


def test_crc_mismatch_strict():
    stream = corrupt_crc(make_png(1, 1, RED))
    with pytest.raises(ChunkCRCError) as excinfo:
        list(png(crc_check='strict').read_chunks(stream))
    assert excinfo.value.tag == 'IHDR'
    assert excinfo.value.offset == len(SIGNATURE)


def test_crc_mismatch_ignored(caplog):
    stream = corrupt_crc(make_png(1, 1, RED))
    with caplog.at_level(logging.WARNING):
        list(png(crc_check='ignore').read_chunks(stream))
    assert not caplog.records


def test_mktag_matches_reference_layout():
    payload = b'\x01\x02\x03'
    assert bytes(png.mktag('tEXt', payload)) == chunk(b'tEXt', payload)
    assert bytes(png.mktag('IEND', b'')) == iend()


def test_write_chunks_roundtrip():
    stream = make_png(2, 2, RED)
    chunks = [c for _, c in png.read_chunks(stream)]
    assert SIGNATURE + png.write_chunks(chunks) == stream


def test_findall_pattern():
    stream = make_png(1, 1, RED, extra=chunk(b'tEXt', b'a\x00b'))
    found = [c.tag for _, c in png.findall('{}T', png.read_chunks(stream))]
    assert found == ['IDAT']
    assert png.find('tE{}', png.read_chunks(stream))[1].tag == 'tEXt'
    assert png.find('acTL', png.read_chunks(stream)) is None


def test_renders_listing():
    listing = png.renders(png.read_chunks(make_png(1, 1, RED)))
    lines = listing.splitlines()
    assert lines[0].startswith('<IHDR offset="8" size="13"')
    assert lines[-1] == '<IEND offset="{}" size="0" crc="0xae426082" />'.format(
        len(make_png(1, 1, RED)) - 12
    )


def test_strict_walk_of_valid_stream():
    stream = make_png(2, 2, RED, extra=chunk(b'tEXt', b'a\x00b'))
    tags = [c.tag for _, c in png(crc_check='strict').read_chunks(stream)]
    assert tags == ['IHDR', 'tEXt', 'IDAT', 'IEND']


@pytest.mark.parametrize('tag', [b'ab\x00\x00', b'\x00\x00\x00\x00', b'IH D', b'1234'])
@pytest.mark.parametrize('crc_check', ['ignore', 'warn', 'strict'])
def test_invalid_tag(tag, crc_check):
    stream = SIGNATURE + ihdr(1, 1) + chunk(tag, b'x') + iend()
    with pytest.raises(MalformedInputError, match='invalid chunk tag') as excinfo:
        list(png(crc_check=crc_check).read_chunks(stream))
    assert not isinstance(excinfo.value, ChunkCRCError)
    assert excinfo.value.args[0].endswith('at offset 33')
