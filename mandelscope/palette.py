"""
Color schemes for the Mandelbrot visualization.

Each scheme maps an iteration count n in [0, max] to an RGB tuple. Points
in the set (n == max) are drawn black. Coloring a whole frame goes
through a lookup table with one entry per possible count, so the per-pixel
work is a single numpy indexing operation.

To add a new scheme:
1. Define a color_xxx(n, max_iter) function returning an (r, g, b) tuple
2. Add a member to ColorScheme and an entry to _SCHEME_FUNCTIONS
"""

import enum
import math

import numpy as np


BLACK = (0, 0, 0)


class ColorScheme(enum.Enum):
    """Available color schemes, in keyboard order (keys 1-4)."""

    GREEN = "green"
    RAINBOW = "rainbow"
    REDISH = "redish"
    BLUE = "blue"


def hsv(h, s, v):
    """
    Convert an HSV color to RGB.

    Args:
        h: Hue in degrees (wraps at 360)
        s: Saturation in [0, 1]
        v: Value in [0, 1]

    Returns:
        (r, g, b) tuple of ints in [0, 255]
    """
    def rgb(r, g, b):
        return int(r * 255.0), int(g * 255.0), int(b * 255.0)

    if s <= 0.0:
        return rgb(v, v, v)

    hh = (h % 360.0) / 60.0
    region = int(hh)
    ff = hh - region

    p = v * (1.0 - s)
    q = v * (1.0 - s * ff)
    t = v * (1.0 - s * (1.0 - ff))

    if region == 0:
        return rgb(v, t, p)
    elif region == 1:
        return rgb(q, v, p)
    elif region == 2:
        return rgb(p, v, t)
    elif region == 3:
        return rgb(p, q, v)
    elif region == 4:
        return rgb(t, p, v)
    return rgb(v, p, q)


def color_green(n, max_iter):
    """
    Green: black -> green -> white.

    The square root stretches the dark end; past the midpoint red and
    blue are mixed in to wash out towards white.
    """
    if n >= max_iter:
        return BLACK
    ratio = n / (max_iter - 1) if max_iter > 1 else 0.0
    level = int(math.sqrt(ratio) * 255.0)
    rb = int((ratio - 0.5) / 0.5 * 180.0) if ratio > 0.5 else 0
    return rb, level, rb


def color_rainbow(n, max_iter):
    """Rainbow: hue sweeps red -> magenta over the iteration range."""
    v = 0.0 if n >= max_iter else 1.0
    return hsv(300.0 * (n / max_iter), 1.0, v)


def _ramp_then_hue(n, max_iter, limit, channel, hue_start, hue_span):
    # Dark single-channel ramp up to `limit`, then a hue sweep
    if n < limit:
        level = int(math.sqrt(n / limit) * 255.0)
        color = [0, 0, 0]
        color[channel] = level
        return tuple(color)
    if n >= max_iter:
        return BLACK
    ratio = (n - limit) / (max_iter - limit)
    return hsv(hue_start + hue_span * ratio, 1.0, 1.0)


def color_redish(n, max_iter):
    """Redish: dark red ramp for the first half, then red -> yellow."""
    return _ramp_then_hue(n, max_iter, max_iter // 2, 0, 0.0, 60.0)


def color_blue(n, max_iter):
    """Blue: dark blue ramp for the first third, then blue -> magenta."""
    return _ramp_then_hue(n, max_iter, max_iter // 3, 2, 240.0, 60.0)


_SCHEME_FUNCTIONS = {
    ColorScheme.GREEN: color_green,
    ColorScheme.RAINBOW: color_rainbow,
    ColorScheme.REDISH: color_redish,
    ColorScheme.BLUE: color_blue,
}


def color(scheme, n, max_iter):
    """
    Color of iteration count n under the given scheme.

    Args:
        scheme: ColorScheme member
        n: Iteration count in [0, max_iter]
        max_iter: Escape budget (n == max_iter means "in set")

    Returns:
        (r, g, b) tuple of ints in [0, 255]
    """
    return _SCHEME_FUNCTIONS[scheme](n, max_iter)


def color_table(scheme, max_iter):
    """Lookup table of shape (max_iter + 1, 3), uint8, indexed by count."""
    table = np.zeros((max_iter + 1, 3), dtype=np.uint8)
    for n in range(max_iter + 1):
        table[n] = color(scheme, n, max_iter)
    return table


def colorize(scheme, values, max_iter):
    """
    Color a whole frame.

    Args:
        scheme: ColorScheme member
        values: (height, width) array of counts in [0, max_iter]
        max_iter: Escape budget

    Returns:
        (height, width, 3) uint8 RGB array
    """
    return color_table(scheme, max_iter)[values]


def palette_preview(width, height):
    """
    RGB image with one horizontal bar per scheme, in ColorScheme order.

    Each bar shows the scheme over [0, width) with max = width.
    """
    bars = list(ColorScheme)
    image = np.zeros((height, width, 3), dtype=np.uint8)
    bar_height = max(1, height // len(bars))
    for i, scheme in enumerate(bars):
        row = color_table(scheme, width)[:width]
        top = i * bar_height
        bottom = height if i == len(bars) - 1 else top + bar_height
        image[top:bottom] = row
    return image
