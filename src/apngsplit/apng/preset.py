from dataclasses import dataclass

from apngsplit.kernel.chunk import CRCCheck
from apngsplit.kernel.preset import Preset, _DefaultOverride, png


@dataclass(frozen=True)
class ParseOptions(_DefaultOverride):
    ignore_single: bool = False  # reject anything but a multi-frame animation
    force_loop: bool = False  # loop forever whenever there is more than one frame
    crc_check: CRCCheck = 'warn'
    max_workers: int | None = None  # decode thread pool size

    @property
    def chunks(self) -> Preset:
        return png(crc_check=self.crc_check)


DEFAULT_OPTIONS = ParseOptions()
