import os

import numpy as np
import pytest

# pygame is imported by the app tests; never open a real window
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

from mandelscope.generator import ParallelGenerator
from mandelscope.image import ImageBuffer


@pytest.fixture
def generator():
    gen = ParallelGenerator(workers=4)
    yield gen
    gen.close()


@pytest.fixture
def make_image():
    """ImageBuffer pre-filled with the given raw iteration counts."""
    def make(values, max_iterations):
        values = np.asarray(values, dtype=np.uint32)
        height, width = values.shape
        image = ImageBuffer(width, height, max_iterations)
        image.set_rows(range(0, height), values)
        return image
    return make
