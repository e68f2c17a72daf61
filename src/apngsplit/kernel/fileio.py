import os
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from pathlib import Path
from types import TracebackType
from typing import cast, overload

import numpy as np
from numpy.typing import ArrayLike


class ResourceFile(AbstractContextManager[memoryview]):
    __slots__ = ('buffer', 'closed')

    def __init__(self, buffer: ArrayLike) -> None:
        self.buffer = memoryview(buffer)  # type: ignore[arg-type]
        self.closed = False

    def __len__(self) -> int:
        return len(self.buffer)

    def __buffer__(self, _flags: int) -> memoryview:
        return self.buffer

    def __exit__(
        self,
        __exc_type: type[BaseException] | None,
        __exc_value: BaseException | None,
        __traceback: TracebackType | None,
    ) -> bool | None:
        self.close()
        return None

    @overload
    def __getitem__(self, index: slice) -> ArrayLike: ...
    @overload
    def __getitem__(self, index: int) -> int: ...
    def __getitem__(self, index: slice | int) -> ArrayLike | int:
        if not self.closed:
            return self.buffer[index]
        raise OSError('I/O operation on closed file')  # noqa: TRY003

    @classmethod
    @contextmanager
    def load(cls, file_path: str | os.PathLike[str]) -> Iterator[memoryview]:
        if not os.path.getsize(file_path):
            # empty files cannot be memory mapped
            with cls(b'') as res:
                yield cast(memoryview, res)
            return
        data = np.memmap(file_path, dtype='u1', mode='r')
        with cls(data) as res:
            yield cast(memoryview, res)

    def close(self) -> None:
        self.closed = True


def write_file(file_path: str | os.PathLike[str], data: bytes) -> int:
    with Path(file_path).open('wb') as res:
        return res.write(data)
