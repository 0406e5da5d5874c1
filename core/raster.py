"""
core/raster.py

In-memory raster types.

Pixels are kept exactly as they sit on disk: a (pixel_count, 3) uint8 array
whose columns are blue, green, red. `height` keeps its sign (positive means the
first stored row is the bottom row).
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .errors import AllocationError, FormatError

# column index of each component inside a stored pixel triple
BLUE = 0
GREEN = 1
RED = 2

CHANNEL_ORDER = ("red", "green", "blue")
CHANNEL_COMPONENT = {"red": RED, "green": GREEN, "blue": BLUE}

BYTES_PER_PIXEL = 3


def pixel_count(width: int, height: int) -> int:
    """Number of pixel records for the given dimensions (height sign ignored)."""
    return int(width) * abs(int(height))


def allocate_pixels(count: int) -> np.ndarray:
    """Return a zeroed (count, 3) uint8 pixel buffer."""
    if count < 0:
        raise FormatError(f"Cannot allocate a negative number of pixels ({count}).")
    try:
        return np.zeros((count, BYTES_PER_PIXEL), dtype=np.uint8)
    except (MemoryError, ValueError) as exc:
        # numpy raises ValueError for sizes beyond the address space
        raise AllocationError(f"Could not allocate {count} pixels.") from exc


@dataclass
class RasterImage:
    width: int
    height: int
    pixels: np.ndarray

    def __post_init__(self):
        self.width = int(self.width)
        self.height = int(self.height)
        if self.width < 0:
            raise FormatError(f"Width must be non-negative, got {self.width}.")
        pixels = np.asarray(self.pixels, dtype=np.uint8)
        expected = pixel_count(self.width, self.height)
        if pixels.ndim != 2 or pixels.shape[1] != BYTES_PER_PIXEL or pixels.shape[0] != expected:
            raise FormatError(
                f"Pixel buffer of shape {pixels.shape} does not match "
                f"{self.width}x{self.height} ({expected} pixels)."
            )
        self.pixels = pixels

    @property
    def size(self) -> int:
        return self.pixels.shape[0]

    @property
    def is_bottom_up(self) -> bool:
        return self.height > 0

    @property
    def red(self) -> np.ndarray:
        return self.pixels[:, RED]

    @property
    def green(self) -> np.ndarray:
        return self.pixels[:, GREEN]

    @property
    def blue(self) -> np.ndarray:
        return self.pixels[:, BLUE]


@dataclass
class ChannelImage(RasterImage):
    """A raster where only one component (named by `channel`) may be non-zero."""
    channel: Optional[str] = None

    def __post_init__(self):
        super().__post_init__()
        if self.channel not in CHANNEL_COMPONENT:
            raise ValueError(f"Unknown channel {self.channel!r}; expected one of {CHANNEL_ORDER}.")

    @property
    def component(self) -> int:
        return CHANNEL_COMPONENT[self.channel]
