"""
Histogram equalization of iteration counts.

Raw escape counts bunch up at the low end, so a linear palette spends most
of its colors on a few pixels. Remapping the counts through their
cumulative distribution spreads the colors over visually balanced areas.
Pixels in the set (count == max_iterations) are left out of the
distribution and keep their value.
"""

import logging
import time

import numpy as np

logger = logging.getLogger(__name__)


def equalization_table(iterations, max_iterations):
    """
    Build the equalized value of every possible iteration count.

    Args:
        iterations: Array of raw counts in [0, max_iterations]
        max_iterations: Escape budget

    Returns:
        uint32 array of length max_iterations + 1; entry n is the
        equalized value of raw count n.
    """
    counts = np.bincount(np.ravel(iterations), minlength=max_iterations + 1)

    # The in-set bucket is not part of the distribution
    cdf = np.cumsum(counts[:max_iterations])
    total = int(counts[:max_iterations].sum())
    nominator = total - int(cdf[0])

    table = np.empty(max_iterations + 1, dtype=np.uint32)
    if nominator == 0:
        # Every pixel is in the set, or every escaping pixel has count 0
        logger.debug("Histogram has no spread, using identity mapping")
        table[:] = np.arange(max_iterations + 1)
        return table

    scaled = (cdf - cdf[0]) / nominator * (max_iterations - 1)
    # Round half away from zero; all values are non-negative
    table[:max_iterations] = np.floor(scaled + 0.5)
    table[max_iterations] = max_iterations
    return table


def equalize(image):
    """
    Write the equalized count of every pixel of `image`.

    Reads image.iterations, writes image.iterations_equalized.
    """
    start = time.perf_counter()
    iterations = image.iterations
    table = equalization_table(iterations, image.max_iterations)
    image.set_equalized(table[iterations])
    logger.debug("Equalized image in %.3fs", time.perf_counter() - start)
