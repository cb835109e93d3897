"""
Per-frame iteration results.

ImageBuffer keeps a row-major grid with the raw iteration count and the
histogram-equalized count of every pixel. Storage is numpy, but callers
go through the accessors so index arithmetic lives in one place.
"""

from collections import namedtuple

import numpy as np


PixelResult = namedtuple("PixelResult", ["iterations", "iterations_equalized"])


class ImageBuffer:
    """
    Iteration results for one generated frame.

    Attributes:
        width, height: Image dimensions in pixels
        max_iterations: Escape budget the frame was generated with
    """

    def __init__(self, width, height, max_iterations):
        if width <= 0 or height <= 0:
            raise ValueError(f"image size must be positive, got {width}x{height}")
        if max_iterations <= 0:
            raise ValueError(f"max_iterations must be positive, got {max_iterations}")
        self.width = int(width)
        self.height = int(height)
        self.max_iterations = int(max_iterations)
        self._iterations = np.zeros((self.height, self.width), dtype=np.uint32)
        self._equalized = np.zeros((self.height, self.width), dtype=np.uint32)

    def __len__(self):
        return self.width * self.height

    def __repr__(self):
        return f"ImageBuffer({self.width}x{self.height}, max_iterations={self.max_iterations})"

    @property
    def shape(self):
        """(height, width), matching the numpy arrays."""
        return self.height, self.width

    @property
    def iterations(self):
        """Read-only (height, width) view of the raw iteration counts."""
        view = self._iterations.view()
        view.flags.writeable = False
        return view

    @property
    def iterations_equalized(self):
        """Read-only (height, width) view of the equalized iteration counts."""
        view = self._equalized.view()
        view.flags.writeable = False
        return view

    def index(self, x, y):
        """Row-major cell index of pixel (x, y)."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} image")
        return x + y * self.width

    def cell_at(self, x, y):
        """PixelResult for pixel (x, y)."""
        self.index(x, y)
        return PixelResult(int(self._iterations[y, x]), int(self._equalized[y, x]))

    def iter_cells(self):
        """Yield (x, y, PixelResult) in row-major order."""
        for y in range(self.height):
            row = self._iterations[y]
            row_eq = self._equalized[y]
            for x in range(self.width):
                yield x, y, PixelResult(int(row[x]), int(row_eq[x]))

    def set_rows(self, rows, values):
        """
        Overwrite the raw iteration counts of a contiguous row range.

        Args:
            rows: range of rows (step 1)
            values: array of shape (len(rows), width)
        """
        self._iterations[rows.start:rows.stop] = values

    def set_equalized(self, values):
        """Overwrite every equalized count; values has shape (height, width)."""
        self._equalized[:] = values
