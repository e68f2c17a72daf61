from dataclasses import dataclass
from typing import Any

from apngsplit.apng import schema


@dataclass(frozen=True, slots=True)
class FrameControl:
    """Placement, timing and compositing codes of one frame."""

    width: int
    height: int
    left: int = 0
    top: int = 0
    delay: float = schema.DEFAULT_DELAY
    dispose_op: int = schema.DEFAULT_DISPOSE_OP
    blend_op: int = schema.DEFAULT_BLEND_OP
    sequence: int | None = None


@dataclass(frozen=True, slots=True)
class Frame:
    control: FrameControl
    image: Any = None

    @property
    def width(self) -> int:
        return self.control.width

    @property
    def height(self) -> int:
        return self.control.height

    @property
    def left(self) -> int:
        return self.control.left

    @property
    def top(self) -> int:
        return self.control.top

    @property
    def delay(self) -> float:
        return self.control.delay

    @property
    def dispose_op(self) -> int:
        return self.control.dispose_op

    @property
    def blend_op(self) -> int:
        return self.control.blend_op


@dataclass(frozen=True, slots=True)
class Animation:
    width: int
    height: int
    num_plays: int
    play_time: float
    frames: tuple[Frame, ...]
    declared_frames: int = 0

    def __len__(self) -> int:
        return len(self.frames)
