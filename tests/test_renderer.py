import threading

import numpy as np
import pytest

from mandelscope.errors import GenerationError
from mandelscope.generator import ParallelGenerator
from mandelscope.histogram import equalize
from mandelscope.image import ImageBuffer
from mandelscope.renderer import MandelbrotRenderer
from mandelscope.transform import CoordinateTransform


class BlockingGenerator:
    """Records requests; the first generate call waits until released."""

    def __init__(self):
        self.calls = []
        self.started = threading.Event()
        self.release = threading.Event()

    def generate(self, transform, max_iterations, image):
        self.calls.append(transform.zoom_factor())
        if len(self.calls) == 1:
            self.started.set()
            self.release.wait(5)
        image.set_rows(range(0, image.height), np.full(image.shape, max_iterations))

    def close(self):
        pass


class BrokenPoolGenerator:

    def generate(self, transform, max_iterations, image):
        raise RuntimeError("pool gone")

    def close(self):
        pass


class FailingGenerator:

    def generate(self, transform, max_iterations, image):
        raise GenerationError(range(0, image.height))

    def close(self):
        pass


def test_render_generates_and_equalizes(generator):
    transform = CoordinateTransform((40, 30))
    renderer = MandelbrotRenderer(generator=generator)

    result = renderer.render(transform, 50)

    expected = ImageBuffer(40, 30, 50)
    generator.generate(transform, 50, expected)
    equalize(expected)
    assert result.error is None
    assert np.array_equal(result.image.iterations, expected.iterations)
    assert np.array_equal(result.image.iterations_equalized, expected.iterations_equalized)


def test_compute_async_publishes_once():
    transform = CoordinateTransform((32, 24))
    renderer = MandelbrotRenderer(workers=2)
    try:
        renderer.compute_async(transform, 30)
        renderer.wait()

        result = renderer.get_result()
        assert result is not None
        assert result.image.shape == (24, 32)
        assert result.image.max_iterations == 30
        assert renderer.get_result() is None
    finally:
        renderer.close()


def test_newer_requests_supersede_older_ones():
    gen = BlockingGenerator()
    renderer = MandelbrotRenderer(generator=gen)
    transform = CoordinateTransform((8, 6))

    renderer.compute_async(transform, 10)
    assert gen.started.wait(5)

    transform.zoom(2.0)
    renderer.compute_async(transform, 10)
    transform.zoom(2.0)
    last = renderer.compute_async(transform, 20)
    transform.zoom(2.0)     # after the request, must not leak into it

    gen.release.set()
    renderer.wait()

    assert last == 3
    assert gen.calls == [1.0, 4.0]
    result = renderer.get_result()
    assert result.transform.zoom_factor() == 4.0
    assert result.image.max_iterations == 20


def test_generation_failure_is_reported():
    renderer = MandelbrotRenderer(generator=FailingGenerator())
    renderer.compute_async(CoordinateTransform((8, 6)), 10)
    renderer.wait()

    result = renderer.get_result()
    assert result.image is None
    assert isinstance(result.error, GenerationError)
    assert result.error.rows == range(0, 6)


def test_renderer_recovers_after_failure():
    renderer = MandelbrotRenderer(generator=FailingGenerator())
    renderer.compute_async(CoordinateTransform((8, 6)), 10)
    renderer.wait()
    renderer.get_result()

    renderer.generator = BlockingGenerator()
    renderer.generator.release.set()
    renderer.compute_async(CoordinateTransform((8, 6)), 10)
    renderer.wait()

    assert renderer.get_result().error is None


def test_rejects_invalid_budget():
    renderer = MandelbrotRenderer(generator=FailingGenerator())
    with pytest.raises(ValueError):
        renderer.compute_async(CoordinateTransform((8, 6)), 0)


def test_close_keeps_borrowed_generator_open(generator):
    renderer = MandelbrotRenderer(generator=generator)
    renderer.close()
    image = ImageBuffer(4, 4, 5)
    generator.generate(CoordinateTransform((4, 4)), 5, image)
    assert isinstance(renderer.generator, ParallelGenerator)


def test_unexpected_failure_is_reported_as_generation_error():
    renderer = MandelbrotRenderer(generator=BrokenPoolGenerator())
    renderer.compute_async(CoordinateTransform((8, 6)), 10)
    renderer.wait()

    result = renderer.get_result()
    assert result is not None
    assert result.image is None
    assert isinstance(result.error, GenerationError)
    assert result.error.rows == range(0, 6)
    assert isinstance(result.error.__cause__, RuntimeError)
    assert not renderer.computing


def test_each_published_frame_owns_its_buffer(generator):
    transform = CoordinateTransform((16, 12))
    renderer = MandelbrotRenderer(generator=generator)

    first = renderer.render(transform, 30).image
    kept = first.iterations.copy()
    transform.zoom(4.0)
    second = renderer.render(transform, 30).image

    assert second is not first
    assert not np.shares_memory(first.iterations, second.iterations)
    # the frame handed out earlier is not touched by the next one
    assert np.array_equal(first.iterations, kept)
