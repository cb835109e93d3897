"""
Screen <-> complex plane coordinate transform.

The transform owns the pan/zoom state of the view. Screen rows grow
downwards and are mapped without a vertical flip, so the imaginary part
grows towards the bottom of the window. The same convention is used by
every method here and by the compute kernels.
"""

import copy
import logging

from .compute import pixel_to_plane

logger = logging.getLogger(__name__)


class CoordinateTransform:
    """
    Affine map between pixel coordinates and complex numbers.

    Usage:
        transform = CoordinateTransform((800, 600))
        z = transform.screen_to_complex(400, 300)
        transform.zoom(2.0)
        transform.center_at(z)

    Attributes:
        offset_x, offset_y: Pixel position of the complex origin
        scale: Pixels per plane unit (always > 0)
        viewport: (width, height) of the screen in pixels
    """

    DEFAULT_SCALE = 0.28     # times viewport width
    DEFAULT_OFFSET_X = 0.7   # times viewport width
    DEFAULT_OFFSET_Y = 0.5   # times viewport height

    def __init__(self, viewport):
        """
        Create a transform showing the whole set.

        Args:
            viewport: (width, height) in pixels, both positive
        """
        width, height = viewport
        if width <= 0 or height <= 0:
            raise ValueError(f"viewport must be positive, got {viewport!r}")
        self.viewport = (int(width), int(height))
        self.offset_x = 0.0
        self.offset_y = 0.0
        self.scale = 1.0
        self.reset()

    def __repr__(self):
        return (f"CoordinateTransform(viewport={self.viewport}, offset=({self.offset_x}, "
                f"{self.offset_y}), scale={self.scale})")

    @property
    def width(self):
        return self.viewport[0]

    @property
    def height(self):
        return self.viewport[1]

    def reset(self):
        """Restore the default view for the current viewport size."""
        self.scale = self.width * self.DEFAULT_SCALE
        self.offset_x = self.width * self.DEFAULT_OFFSET_X
        self.offset_y = self.height * self.DEFAULT_OFFSET_Y

    def snapshot(self):
        """Independent copy, safe to hand to another thread."""
        return copy.copy(self)

    def screen_to_complex(self, x, y):
        """Complex number under the pixel (x, y)."""
        re, im = pixel_to_plane(x, y, self.offset_x, self.offset_y, self.scale)
        return complex(re, im)

    def complex_to_screen(self, z):
        """
        Pixel showing the complex number z.

        Exact inverse of screen_to_complex, truncated to integer pixels,
        so a round trip may land one pixel off.
        """
        return (int(z.real * self.scale + self.offset_x),
                int(z.imag * self.scale + self.offset_y))

    def _center(self):
        return self.width / 2.0, self.height / 2.0

    def zoom(self, factor):
        """
        Multiply the scale by factor, keeping the viewport center fixed.

        Args:
            factor: > 1 zooms in, < 1 zooms out
        """
        if factor <= 0:
            raise ValueError(f"zoom factor must be positive, got {factor!r}")
        cx, cy = self._center()
        z_center = self.screen_to_complex(cx, cy)
        self.scale *= factor
        self.center_at(z_center)
        logger.debug("Zoom: %s", self.zoom_factor())

    def center_at(self, z):
        """Pan so that z is shown at the viewport center."""
        cx, cy = self._center()
        self.offset_x = cx - z.real * self.scale
        self.offset_y = cy - z.imag * self.scale

    def zoom_factor(self):
        """Magnification relative to the default view."""
        return self.scale / (self.width * self.DEFAULT_SCALE)
