"""
Asynchronous Mandelbrot renderer.

The MandelbrotRenderer class keeps the UI responsive while frames are
being generated:
- Background computation so the event loop never blocks on a frame
- Only the newest request is rendered; requests that arrive while a
  frame is computing supersede older pending ones
- Results of a request that was superseded mid-computation are dropped
- Generation failures are reported as results instead of crashing
"""

import logging
import threading
from collections import namedtuple

from .errors import GenerationError
from .generator import ParallelGenerator
from .histogram import equalize
from .image import ImageBuffer

logger = logging.getLogger(__name__)


RenderResult = namedtuple("RenderResult", ["image", "transform", "error"])
RenderResult.__doc__ = """
Outcome of one background render.

Exactly one of `image` (a fully generated and equalized ImageBuffer now
owned by the caller) and `error` (the GenerationError) is set.
`transform` is the snapshot the frame was requested with.
"""


class MandelbrotRenderer:
    """
    Handles async Mandelbrot rendering with superseding requests.

    Usage:
        renderer = MandelbrotRenderer(workers=8)
        renderer.compute_async(transform, max_iterations=150)

        # In your game loop:
        result = renderer.get_result()
        if result is not None:
            if result.error is None:
                display(result.image)
            else:
                report(result.error)

    Attributes:
        generator: ParallelGenerator used for every frame
    """

    def __init__(self, workers=None, generator=None):
        """
        Initialize the renderer.

        Args:
            workers: Worker count for a new ParallelGenerator
            generator: Existing generator to use instead (not closed by us)
        """
        self._owns_generator = generator is None
        self.generator = generator if generator is not None else ParallelGenerator(workers)

        # Async computation state
        self.computing = False
        self.pending = None         # (request_id, transform, max_iterations)
        self.latest_request = 0
        self.result = None
        self.lock = threading.Lock()
        self._thread = None

    def compute_async(self, transform, max_iterations):
        """
        Request a frame for the given view.

        The transform is snapshotted immediately, so the caller may keep
        mutating its own instance.

        Returns:
            The request id
        """
        if max_iterations <= 0:
            raise ValueError(f"max_iterations must be positive, got {max_iterations}")
        snapshot = transform.snapshot()
        with self.lock:
            self.latest_request += 1
            request_id = self.latest_request
            self.pending = (request_id, snapshot, max_iterations)
            if not self.computing:
                self.computing = True
                self._thread = threading.Thread(target=self._compute_thread, daemon=True)
                self._thread.start()
        return request_id

    def _compute_thread(self):
        """Background thread: render pending requests until none is left."""
        while True:
            with self.lock:
                request = self.pending
                self.pending = None
                if request is None:
                    self.computing = False
                    break

            request_id, transform, max_iterations = request
            try:
                result = self.render(transform, max_iterations)
            except BaseException:
                with self.lock:
                    self.computing = False
                raise

            with self.lock:
                if request_id == self.latest_request:
                    self.result = result
                else:
                    logger.debug("Dropping superseded frame %d", request_id)

    def render(self, transform, max_iterations):
        """
        Generate and equalize one frame synchronously.

        Returns:
            RenderResult with either the new image or the error
        """
        image = ImageBuffer(transform.width, transform.height, max_iterations)
        try:
            self.generator.generate(transform, max_iterations, image)
        except Exception as e:
            error = e
            if not isinstance(error, GenerationError):
                error = GenerationError(range(0, image.height), f"frame generation failed: {e!r}")
                error.__cause__ = e
            logger.error("Frame generation failed: %s", error)
            return RenderResult(None, transform, error)
        equalize(image)
        return RenderResult(image, transform, None)

    def get_result(self):
        """
        Take the latest finished result, if any.

        Returns:
            RenderResult, or None if nothing new has finished
        """
        with self.lock:
            result = self.result
            self.result = None
        return result

    def wait(self):
        """Block until the background thread has no more work."""
        while True:
            with self.lock:
                if not self.computing:
                    return
                thread = self._thread
            thread.join()

    def close(self):
        """Wait for outstanding work and release the worker pool."""
        self.wait()
        if self._owns_generator:
            self.generator.close()
