from collections.abc import Iterator

from apngsplit.apng import schema
from apngsplit.apng.builder import ExtractedAnimation, FrameSource
from apngsplit.apng.model import FrameControl
from apngsplit.kernel.chunk import ArrayBuffer
from apngsplit.kernel.preset import Preset


def frame_header(template: bytes, control: FrameControl) -> bytes:
    """Copy of the IHDR payload resized to the frame dimensions."""
    header = bytearray(template)
    size = schema.ImageHeader.create(
        schema.ImageHeaderData(width=control.width, height=control.height),
    )
    header[: schema.ImageHeader.itemsize()] = bytes(size)
    return bytes(header)


def compose_frame(
    cfg: Preset,
    header: bytes,
    prologue: tuple[ArrayBuffer, ...],
    epilogue: tuple[ArrayBuffer, ...],
    frame: FrameSource,
) -> bytes:
    """Standalone PNG stream holding a single frame."""
    stream = bytearray(cfg.signature)
    stream += bytes(cfg.mktag(schema.IHDR, frame_header(header, frame.control)))
    for raw in prologue:
        stream += memoryview(raw)
    stream += cfg.write_chunks(
        cfg.mktag(schema.IDAT, part) for part in frame.data_parts
    )
    for raw in epilogue:
        stream += memoryview(raw)
    return bytes(stream)


def compose_frames(cfg: Preset, anim: ExtractedAnimation) -> Iterator[bytes]:
    for frame in anim.frames:
        yield compose_frame(cfg, anim.header, anim.prologue, anim.epilogue, frame)
