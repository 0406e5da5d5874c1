"""
core/color_processing.py

Per-channel decomposition of a 24-bit raster.

  1) split the interleaved blue/green/red triples into three channel images,
     each keeping one component and zeroing the other two
  2) turn a channel image into the transform input: one component of every
     pixel as the real part, zero imaginary part

API:
- split_channels(image) -> (red, green, blue) ChannelImages
- extract_channel(image, channel) -> ChannelImage
- channel_samples(channel_image, component=None) -> complex128 array
"""

from typing import Optional, Tuple
import numpy as np

from .errors import AllocationError
from .raster import (
    CHANNEL_COMPONENT,
    CHANNEL_ORDER,
    ChannelImage,
    RasterImage,
    allocate_pixels,
)


def extract_channel(image: RasterImage, channel: str) -> ChannelImage:
    """
    Copy one component of every pixel into a fresh buffer, other two zeroed.
    The source image is not modified.
    """
    if channel not in CHANNEL_COMPONENT:
        raise ValueError(f"Unknown channel {channel!r}; expected one of {CHANNEL_ORDER}.")
    comp = CHANNEL_COMPONENT[channel]
    buf = allocate_pixels(image.size)
    buf[:, comp] = image.pixels[:, comp]
    return ChannelImage(image.width, image.height, buf, channel=channel)


def split_channels(image: RasterImage) -> Tuple[ChannelImage, ChannelImage, ChannelImage]:
    """Split `image` into (red, green, blue) channel images of the same dimensions."""
    red, green, blue = (extract_channel(image, ch) for ch in CHANNEL_ORDER)
    return red, green, blue


def channel_samples(channel_image: ChannelImage, component: Optional[int] = None) -> np.ndarray:
    """
    Build the complex transform input for one channel image.

    component defaults to the channel's own component; pass raster.RED to
    sample the red byte of every channel (always zero for green/blue images).
    """
    if component is None:
        component = channel_image.component
    try:
        samples = np.zeros(channel_image.size, dtype=np.complex128)
    except (MemoryError, ValueError) as exc:
        raise AllocationError(f"Could not allocate {channel_image.size} samples.") from exc
    samples.real = channel_image.pixels[:, component]
    return samples
