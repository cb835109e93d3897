"""
Parallel image generation.

The image rows are split into contiguous ranges, one per worker. Workers
compute their rows into private arrays with the nogil Numba kernel; the
calling thread waits for all of them and then copies the arrays into the
image buffer. Workers never touch the buffer themselves.
"""

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor

from .compute import compute_rows
from .errors import GenerationError

logger = logging.getLogger(__name__)


def partition_rows(height, workers):
    """
    Split rows 0..height into `workers` contiguous ranges.

    Every range holds height // workers rows except the last one, which
    also absorbs the remainder. Together they cover each row exactly once.
    """
    if workers <= 0:
        raise ValueError(f"workers must be positive, got {workers}")
    rows_per_worker = height // workers
    ranges = []
    for w in range(workers):
        start = rows_per_worker * w
        stop = rows_per_worker * (w + 1) if w < workers - 1 else height
        ranges.append(range(start, stop))
    return ranges


class ParallelGenerator:
    """
    Fills ImageBuffers using a persistent pool of worker threads.

    Usage:
        with ParallelGenerator(workers=8) as generator:
            generator.generate(transform, image.max_iterations, image)

    Attributes:
        workers: Number of row ranges (and threads) per frame
    """

    def __init__(self, workers=None):
        """
        Args:
            workers: Worker count (default: number of CPUs)
        """
        if workers is None:
            workers = os.cpu_count() or 1
        if workers <= 0:
            raise ValueError(f"workers must be positive, got {workers}")
        self.workers = workers
        self._pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="mandel-worker")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        """Shut down the worker pool."""
        self._pool.shutdown(wait=True)

    def generate(self, transform, max_iterations, image):
        """
        Compute raw iteration counts for every pixel of `image`.

        Blocks until every row range is done. Only `image.iterations` is
        written; the equalized counts keep their previous values until the
        equalizer runs.

        Args:
            transform: CoordinateTransform (its current state is snapshotted)
            max_iterations: Escape budget, must match image.max_iterations
            image: ImageBuffer to fill

        Raises:
            GenerationError: a worker failed; the image is left untouched
        """
        if max_iterations <= 0:
            raise ValueError(f"max_iterations must be positive, got {max_iterations}")
        if max_iterations != image.max_iterations:
            raise ValueError(
                f"max_iterations {max_iterations} does not match image budget {image.max_iterations}"
            )

        start = time.perf_counter()

        # Plain floats: each task gets its own immutable copy of the view
        offset_x = float(transform.offset_x)
        offset_y = float(transform.offset_y)
        scale = float(transform.scale)
        width = image.width
        max_iter = int(max_iterations)

        # Scatter
        tasks = []
        for rows in partition_rows(image.height, self.workers):
            if len(rows) == 0:
                continue
            try:
                future = self._pool.submit(
                    compute_rows, offset_x, offset_y, scale, width, rows.start, rows.stop, max_iter
                )
            except Exception as e:
                for _, pending in tasks:
                    pending.cancel()
                raise GenerationError(rows) from e
            tasks.append((rows, future))

        # Gather
        results = []
        for rows, future in tasks:
            try:
                values = future.result()
            except Exception as e:
                for _, pending in tasks:
                    pending.cancel()
                raise GenerationError(rows) from e
            if values.shape != (len(rows), width):
                raise GenerationError(
                    rows, f"rows {rows.start}..{rows.stop - 1} returned shape {values.shape}"
                )
            logger.debug("Got rows %s..%s", rows.start, rows.stop - 1)
            results.append((rows, values))

        for rows, values in results:
            image.set_rows(rows, values)

        logger.debug(
            "Generated image with %d workers and max iterations %d in %.3fs",
            self.workers, max_iter, time.perf_counter() - start,
        )
