"""
Mandelbrot computation kernels using Numba JIT compilation.

This module contains the performance-critical functions of the explorer.
They are compiled with ``nogil=True`` so that the worker threads of the
ParallelGenerator can run them truly in parallel:
- Screen pixel to complex plane mapping
- Closed-form membership test for the main cardioid and period-2 bulb
- Escape-time iteration for a single point
- Escape-time iteration for a contiguous range of image rows
"""

import numpy as np
from numba import jit


ESCAPE_RADIUS_SQUARED = 4.0  # |z| >= 2 means the orbit escapes


@jit(nopython=True, nogil=True, cache=True)
def pixel_to_plane(x, y, offset_x, offset_y, scale):
    """
    Map a screen pixel to the complex plane.

    The y axis points down on screen and is not flipped, so larger pixel
    rows map to larger imaginary parts.

    Returns:
        (re, im) tuple of floats
    """
    return (x - offset_x) / scale, (y - offset_y) / scale


@jit(nopython=True, nogil=True, cache=True)
def in_main_bulbs(re, im):
    """
    Check if a point lies in the main cardioid or the period-2 bulb.

    Both regions have closed-form membership tests, so points inside them
    can skip the iteration entirely. Points in the smaller bulbs are not
    detected here and still reach the budget by plain iteration.
    """
    p = np.sqrt((re - 0.25) ** 2 + im * im)
    if re <= p - 2.0 * p * p + 0.25:
        return True
    return (re + 1.0) ** 2 + im * im <= 0.0625


@jit(nopython=True, nogil=True, cache=True)
def escape_time(re, im, max_iterations):
    """
    Count iterations of z -> z² + c until |z| >= 2.

    Args:
        re, im: Real and imaginary parts of c
        max_iterations: Iteration budget

    Returns:
        Number of steps before escape, or max_iterations if the orbit
        stays bounded (or c is a known interior point).
    """
    if in_main_bulbs(re, im):
        return max_iterations

    zr = 0.0
    zi = 0.0
    iteration = 0
    while zr * zr + zi * zi < ESCAPE_RADIUS_SQUARED and iteration < max_iterations:
        zr, zi = zr * zr - zi * zi + re, 2.0 * zr * zi + im
        iteration += 1
    return iteration


@jit(nopython=True, nogil=True, cache=True)
def mandel(c, max_iterations):
    """Escape-time iteration count for the complex point c."""
    return escape_time(c.real, c.imag, max_iterations)


@jit(nopython=True, nogil=True, cache=True)
def compute_rows(offset_x, offset_y, scale, width, row_start, row_stop, max_iterations):
    """
    Compute iteration counts for the image rows [row_start, row_stop).

    Every pixel goes through pixel_to_plane and escape_time, exactly as
    the single-point API does, so any split of the rows between workers
    produces the same values.

    Args:
        offset_x, offset_y, scale: Snapshot of the coordinate transform
        width: Number of columns in the image
        row_start, row_stop: Row range to compute
        max_iterations: Iteration budget

    Returns:
        2D uint32 array of shape (row_stop - row_start, width)
    """
    result = np.empty((row_stop - row_start, width), dtype=np.uint32)
    for py in range(row_start, row_stop):
        for px in range(width):
            re, im = pixel_to_plane(px, py, offset_x, offset_y, scale)
            result[py - row_start, px] = escape_time(re, im, max_iterations)
    return result


def warmup_jit():
    """
    Warm up JIT compilation with a tiny image.

    Call this once at startup to pre-compile the Numba functions,
    avoiding a delay on the first real frame.
    """
    compute_rows(5.0, 5.0, 2.8, 10, 0, 10, 10)
    mandel(complex(0.0, 0.0), 10)
