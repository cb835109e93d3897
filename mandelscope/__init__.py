"""
Mandelbrot Set Explorer Package

An interactive Mandelbrot set explorer using Pygame for display and
Numba-compiled kernels run on a pool of worker threads.

Quick Start:
    from mandelscope import run
    run()

Or from command line:
    python -m mandelscope

Using the engine without a window:
    transform = CoordinateTransform((800, 600))
    image = ImageBuffer(800, 600, max_iterations=150)
    with ParallelGenerator() as generator:
        generator.generate(transform, image.max_iterations, image)
    equalize(image)

Package Structure:
    - compute.py: JIT-compiled escape-time kernels
    - transform.py: Screen <-> complex plane coordinate transform
    - image.py: Per-frame iteration result buffer
    - generator.py: Parallel (scatter/gather) image generation
    - histogram.py: Histogram equalization of iteration counts
    - palette.py: Color schemes
    - renderer.py: Async rendering that supersedes stale frames
    - config.py: Defaults, settings.json and command line flags
    - app.py: Main application and event loop

Controls:
    - +/-: Zoom in/out
    - Left click: Center on point
    - Right click: Show point info in the log
    - Space: Reset view
    - PageUp/PageDown: Change iteration budget
    - 1-4: Color scheme, H: histogram coloring, C: palette preview
    - ESC: Quit
"""

from .compute import mandel
from .errors import ConfigError, GenerationError, MandelscopeError
from .generator import ParallelGenerator, partition_rows
from .histogram import equalization_table, equalize
from .image import ImageBuffer, PixelResult
from .palette import ColorScheme, color, colorize
from .renderer import MandelbrotRenderer, RenderResult
from .transform import CoordinateTransform

__version__ = "1.0.0"
__all__ = [
    "mandel",
    "ConfigError",
    "GenerationError",
    "MandelscopeError",
    "ParallelGenerator",
    "partition_rows",
    "equalization_table",
    "equalize",
    "ImageBuffer",
    "PixelResult",
    "ColorScheme",
    "color",
    "colorize",
    "MandelbrotRenderer",
    "RenderResult",
    "CoordinateTransform",
    "run",
]


def run(config=None):
    """Run the pygame explorer (imports pygame on first use)."""
    from .app import run as _run
    _run(config)
