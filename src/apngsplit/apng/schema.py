from dataclasses import dataclass
from typing import cast

import numpy as np

from apngsplit.kernel.chunk import HeaderDType, StructuredTuple

IHDR = 'IHDR'  # image header, always first
ACTL = 'acTL'  # animation control
FCTL = 'fcTL'  # frame control
FDAT = 'fdAT'  # frame data, sequence number + pixel data
IDAT = 'IDAT'  # primary image data
IEND = 'IEND'  # end of stream

SEQUENCE_SIZE = 4

DEFAULT_DELAY = 100.0
MIN_DELAY = 10.0
DEFAULT_DELAY_DEN = 100
DEFAULT_DISPOSE_OP = 1
DEFAULT_BLEND_OP = 1


@dataclass(frozen=True, slots=True)
class ImageHeaderData:
    width: int
    height: int


@dataclass(frozen=True, slots=True)
class AnimationControlData:
    num_frames: int
    num_plays: int


@dataclass(frozen=True, slots=True)
class FrameControlData:
    sequence: int
    width: int
    height: int
    left: int
    top: int
    delay_num: int
    delay_den: int
    dispose_op: int
    blend_op: int


class ImageHeader(StructuredTuple[ImageHeaderData]):
    # bit depth, color type, compression, filter and interlace follow,
    # they are carried over untouched
    dtype = cast(
        type[HeaderDType],
        np.dtype([('width', '>u4'), ('height', '>u4')]),
    )


class AnimationControl(StructuredTuple[AnimationControlData]):
    dtype = cast(
        type[HeaderDType],
        np.dtype([('num_frames', '>u4'), ('num_plays', '>u4')]),
    )


class FrameControlHeader(StructuredTuple[FrameControlData]):
    dtype = cast(
        type[HeaderDType],
        np.dtype(
            [
                ('sequence', '>u4'),
                ('width', '>u4'),
                ('height', '>u4'),
                ('left', '>u4'),
                ('top', '>u4'),
                ('delay_num', '>u2'),
                ('delay_den', '>u2'),
                ('dispose_op', 'u1'),
                ('blend_op', 'u1'),
            ],
        ),
    )
