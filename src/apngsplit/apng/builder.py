import logging
from dataclasses import dataclass, field

from apngsplit.apng import schema
from apngsplit.apng.model import FrameControl
from apngsplit.errors import MalformedInputError
from apngsplit.kernel.chunk import ArrayBuffer, Chunk, ChunkSettings, raw_chunk


@dataclass(frozen=True, slots=True)
class FrameSource:
    """A finalized frame together with the pixel data it was built from."""

    control: FrameControl
    data_parts: tuple[ArrayBuffer, ...]


@dataclass(frozen=True, slots=True)
class NoFrameInProgress:
    pass


@dataclass(frozen=True, slots=True)
class FrameInProgress:
    control: FrameControl
    data_parts: list[ArrayBuffer] = field(default_factory=list)

    def finish(self) -> FrameSource:
        return FrameSource(self.control, tuple(self.data_parts))


FrameState = NoFrameInProgress | FrameInProgress

NO_FRAME = NoFrameInProgress()


@dataclass(frozen=True, slots=True)
class ExtractedAnimation:
    header: bytes
    prologue: tuple[ArrayBuffer, ...]
    epilogue: tuple[ArrayBuffer, ...]
    frames: tuple[FrameSource, ...]
    width: int
    height: int
    num_plays: int
    play_time: float
    declared_frames: int = 0


def frame_delay(delay_num: int, delay_den: int) -> float:
    """Frame delay in milliseconds.

    A zero denominator means hundredths of a second. Delays of 10ms or less
    are played at the default speed, as browsers do.
    """
    if delay_den == 0:
        delay_den = schema.DEFAULT_DELAY_DEN
    delay = 1000 * delay_num / delay_den
    if delay <= schema.MIN_DELAY:
        delay = schema.DEFAULT_DELAY
    return delay


def read_frame_control(data: ArrayBuffer) -> FrameControl:
    fctl = schema.FrameControlHeader.from_buffer(data)
    return FrameControl(
        width=fctl['width'],
        height=fctl['height'],
        left=fctl['left'],
        top=fctl['top'],
        delay=frame_delay(fctl['delay_num'], fctl['delay_den']),
        dispose_op=fctl['dispose_op'],
        blend_op=fctl['blend_op'],
        sequence=fctl['sequence'],
    )


def finalize(state: FrameState, frames: list[FrameSource]) -> NoFrameInProgress:
    if isinstance(state, FrameInProgress):
        frames.append(state.finish())
    return NO_FRAME


def begin_frame(
    state: FrameState,
    control: FrameControl,
    frames: list[FrameSource],
) -> FrameInProgress:
    finalize(state, frames)
    return FrameInProgress(control)


class AnimationBuilder:
    """Collects frames and shared chunks while visiting chunks in file order."""

    def __init__(self, cfg: ChunkSettings, buffer: ArrayBuffer) -> None:
        self.cfg = cfg
        self.buffer = buffer
        self.header: bytes | None = None
        self.width = 0
        self.height = 0
        self.num_plays = 0
        self.declared_frames = 0
        self.play_time = 0.0
        self.prologue: list[ArrayBuffer] = []
        self.epilogue: list[ArrayBuffer] = []
        self.frames: list[FrameSource] = []
        self.state: FrameState = NO_FRAME

    def visit(self, offset: int, chunk: Chunk) -> None:
        match chunk.tag:
            case schema.IHDR:
                self._read_header(chunk)
            case schema.ACTL:
                actl = schema.AnimationControl.from_buffer(chunk.data)
                self.num_plays = actl['num_plays']
                self.declared_frames = actl['num_frames']
            case schema.FCTL:
                control = read_frame_control(chunk.data)
                self.play_time += control.delay
                self.state = begin_frame(self.state, control, self.frames)
            case schema.FDAT:
                if isinstance(self.state, NoFrameInProgress):
                    logging.debug(
                        'skipping fdAT chunk at offset %d outside of a frame', offset
                    )
                    return
                if len(chunk) < schema.SEQUENCE_SIZE:
                    raise MalformedInputError(
                        f'fdAT chunk at offset {offset} is too short: {len(chunk)}'
                    )
                self.state.data_parts.append(chunk.data[schema.SEQUENCE_SIZE :])
            case schema.IDAT:
                if isinstance(self.state, NoFrameInProgress):
                    self.state = self._begin_default_frame(offset)
                self.state.data_parts.append(chunk.data)
            case schema.IEND:
                self.epilogue.append(raw_chunk(self.buffer, offset, chunk))
            case _:
                self.prologue.append(raw_chunk(self.buffer, offset, chunk))

    def _read_header(self, chunk: Chunk) -> None:
        if self.header is not None:
            getattr(self.cfg, 'logger', logging).warning(
                'found extra IHDR chunk, keeping the first one'
            )
            return
        ihdr = schema.ImageHeader.from_buffer(chunk.data)
        if not (ihdr['width'] and ihdr['height']):
            raise MalformedInputError(
                f'invalid canvas size {ihdr["width"]}x{ihdr["height"]}'
            )
        self.header = bytes(chunk.data)
        self.width, self.height = ihdr['width'], ihdr['height']

    def _begin_default_frame(self, offset: int) -> FrameInProgress:
        if self.header is None:
            raise MalformedInputError(f'IDAT chunk at offset {offset} before IHDR')
        control = FrameControl(width=self.width, height=self.height)
        self.play_time += control.delay
        return FrameInProgress(control)

    def finish(self) -> ExtractedAnimation:
        self.state = finalize(self.state, self.frames)
        if self.header is None:
            raise MalformedInputError('missing IHDR chunk')
        logging.debug(
            'extracted %d frames, %d prologue chunks',
            len(self.frames),
            len(self.prologue),
        )
        return ExtractedAnimation(
            header=self.header,
            prologue=tuple(self.prologue),
            epilogue=tuple(self.epilogue),
            frames=tuple(self.frames),
            width=self.width,
            height=self.height,
            num_plays=self.num_plays,
            play_time=self.play_time,
            declared_frames=self.declared_frames,
        )
