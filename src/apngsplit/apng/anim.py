import logging
import os
from dataclasses import replace

from apngsplit.apng import schema
from apngsplit.apng.builder import AnimationBuilder, ExtractedAnimation
from apngsplit.apng.compose import compose_frames
from apngsplit.apng.decode import ImageDecoder, decode_all, decode_png
from apngsplit.apng.model import Animation, Frame
from apngsplit.apng.preset import DEFAULT_OPTIONS, ParseOptions
from apngsplit.errors import NotAnimatedError
from apngsplit.kernel.chunk import ArrayBuffer
from apngsplit.kernel.fileio import ResourceFile
from apngsplit.kernel.preset import Preset, png


def is_animated(resource: ArrayBuffer, cfg: Preset = png) -> bool:
    """Whether an acTL chunk shows up, without looking any further."""
    return any(chunk.tag == schema.ACTL for _, chunk in cfg.read_chunks(resource))


def apply_play_policy(
    anim: ExtractedAnimation,
    options: ParseOptions,
) -> ExtractedAnimation:
    if len(anim.frames) <= 1:
        if options.ignore_single:
            raise NotAnimatedError()
        return replace(anim, num_plays=1)
    if options.force_loop:
        return replace(anim, num_plays=0)
    return anim


def extract(
    resource: ArrayBuffer,
    options: ParseOptions = DEFAULT_OPTIONS,
) -> ExtractedAnimation:
    cfg = options.chunks
    if options.ignore_single and not is_animated(resource, cfg(crc_check='ignore')):
        raise NotAnimatedError()

    builder = AnimationBuilder(cfg, resource)
    for offset, chunk in cfg.read_chunks(resource):
        builder.visit(offset, chunk)
    return apply_play_policy(builder.finish(), options)


def split(
    resource: ArrayBuffer,
    options: ParseOptions = DEFAULT_OPTIONS,
) -> list[bytes]:
    """Standalone PNG stream of every frame, in display order."""
    return list(compose_frames(options.chunks, extract(resource, options)))


def parse(
    resource: ArrayBuffer,
    options: ParseOptions = DEFAULT_OPTIONS,
    decoder: ImageDecoder = decode_png,
) -> Animation:
    anim = extract(resource, options)
    images = decode_all(
        compose_frames(options.chunks, anim),
        decoder,
        max_workers=options.max_workers,
    )
    logging.debug('decoded %d frames', len(images))
    return Animation(
        width=anim.width,
        height=anim.height,
        num_plays=anim.num_plays,
        play_time=anim.play_time,
        frames=tuple(
            Frame(source.control, image)
            for source, image in zip(anim.frames, images, strict=True)
        ),
        declared_frames=anim.declared_frames,
    )


def from_path(
    path: str | os.PathLike[str],
    options: ParseOptions = DEFAULT_OPTIONS,
    decoder: ImageDecoder = decode_png,
) -> Animation:
    with ResourceFile.load(path) as res:
        return parse(res, options, decoder)
