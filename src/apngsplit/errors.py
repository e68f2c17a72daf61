NOT_ANIMATED = 'Not an animated PNG'
IMAGE_CREATION = 'Image creation error'


class APNGError(Exception):
    """Base error, the message is the failure reason reported to callers."""


class NotAnimatedError(APNGError):
    def __init__(self, reason: str = NOT_ANIMATED) -> None:
        super().__init__(reason)


class DecodeError(APNGError):
    def __init__(self, index: int, reason: str = IMAGE_CREATION) -> None:
        super().__init__(reason)
        self.index = index


class MalformedInputError(APNGError, ValueError):
    pass


class ChunkCRCError(MalformedInputError):
    def __init__(self, tag: str, offset: int, expected: int, actual: int) -> None:
        super().__init__(
            f'crc mismatch in {tag} chunk at offset {offset}: '
            f'stored 0x{expected:08x} != computed 0x{actual:08x}'
        )
        self.tag = tag
        self.offset = offset
        self.expected = expected
        self.actual = actual
