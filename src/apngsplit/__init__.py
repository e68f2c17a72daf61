from apngsplit.apng.anim import extract, from_path, is_animated, parse, split
from apngsplit.apng.model import Animation, Frame, FrameControl
from apngsplit.apng.preset import DEFAULT_OPTIONS, ParseOptions
from apngsplit.errors import (
    APNGError,
    ChunkCRCError,
    DecodeError,
    MalformedInputError,
    NotAnimatedError,
)

__all__ = (
    'APNGError',
    'Animation',
    'ChunkCRCError',
    'DEFAULT_OPTIONS',
    'DecodeError',
    'Frame',
    'FrameControl',
    'MalformedInputError',
    'NotAnimatedError',
    'ParseOptions',
    'extract',
    'from_path',
    'is_animated',
    'parse',
    'split',
)
