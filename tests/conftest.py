import io

import pytest
from PIL import Image

from pngdata import BLUE, RED, FrameSpec, make_apng


@pytest.fixture
def two_frames() -> bytes:
    return make_apng(
        4,
        4,
        [
            FrameSpec(4, 4, RED),
            FrameSpec(2, 2, BLUE, left=1, top=2, delay_num=1, delay_den=2),
        ],
        num_plays=2,
    )


@pytest.fixture
def pillow_apng() -> bytes:
    frames = [Image.new('RGB', (8, 6), color) for color in ('red', 'lime', 'blue')]
    with io.BytesIO() as stream:
        frames[0].save(
            stream,
            format='PNG',
            save_all=True,
            append_images=frames[1:],
            duration=200,
            loop=3,
        )
        return stream.getvalue()
