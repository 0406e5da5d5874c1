# io_utils/image_handler.py
"""
Bitmap read/write helpers.

The two headers are packed explicitly with `struct` (little-endian, no
alignment padding), followed by width*|height| raw blue/green/red triples.
Rows are not padded to a 4-byte stride.

Functions:
- read_bitmap(path) -> RasterImage
- write_bitmap(path, image) -> path
- raster_to_rgb_array(image) -> numpy array (H x W x 3), top row first, RGB
- raster_from_rgb_array(array, bottom_up=True) -> RasterImage
"""

import logging
import os
import struct
from typing import Tuple

import numpy as np

from core.errors import AllocationError, FormatError, ImageIOError
from core.raster import BLUE, BYTES_PER_PIXEL, GREEN, RED, RasterImage, pixel_count
from .file_utils import atomic_output

logger = logging.getLogger(__name__)

BITMAP_TYPE = 0x4D42  # "BM"

# type, file size, reserved1, reserved2, pixel offset
FILE_HEADER = struct.Struct("<HIHHI")
# header size, width, height, planes, bit count, compression, image size,
# x/y pixels per meter, palette colors used, palette colors important
INFO_HEADER = struct.Struct("<IiiHHIIiiII")

HEADERS_SIZE = FILE_HEADER.size + INFO_HEADER.size


def _read_exact(f, size: int, what: str) -> bytes:
    data = f.read(size)
    if len(data) != size:
        raise FormatError(f"Short read of {what}: expected {size} bytes, got {len(data)}.")
    return data


def read_header(path: str) -> Tuple[tuple, tuple]:
    """Return the unpacked (file_header, info_header) tuples of a bitmap."""
    try:
        f = open(path, "rb")
    except OSError as exc:
        raise ImageIOError(f"Cannot open bitmap {path!r}: {exc}") from exc
    with f:
        file_header = FILE_HEADER.unpack(_read_exact(f, FILE_HEADER.size, "file header"))
        info_header = INFO_HEADER.unpack(_read_exact(f, INFO_HEADER.size, "info header"))
    return file_header, info_header


def read_bitmap(path: str) -> RasterImage:
    """
    Read a 24-bit uncompressed bitmap.

    Pixel data is taken to start right after the info header. Bit depth and
    compression are not enforced; unexpected values are only logged.
    """
    try:
        f = open(path, "rb")
    except OSError as exc:
        raise ImageIOError(f"Cannot open bitmap {path!r}: {exc}") from exc

    with f:
        bf_type, _bf_size, _r1, _r2, _off_bits = FILE_HEADER.unpack(
            _read_exact(f, FILE_HEADER.size, "file header")
        )
        (_bi_size, width, height, _planes, bit_count, compression,
         _size_image, _xppm, _yppm, _clr_used, _clr_important) = INFO_HEADER.unpack(
            _read_exact(f, INFO_HEADER.size, "info header")
        )

        if bf_type != BITMAP_TYPE:
            logger.warning("%s: unexpected file type 0x%04X", path, bf_type)
        if bit_count != 24 or compression != 0:
            logger.warning(
                "%s: bit count %d / compression %d is not plain 24-bit, reading as 24-bit anyway",
                path, bit_count, compression,
            )
        if width < 0:
            raise FormatError(f"{path}: negative width {width}.")

        count = pixel_count(width, height)
        needed = count * BYTES_PER_PIXEL
        # compare against what is on disk before sizing any buffer from the header
        available = os.fstat(f.fileno()).st_size - f.tell()
        if available < needed:
            raise FormatError(
                f"Short read of pixel data: {width}x{height} needs {needed} bytes, "
                f"{max(available, 0)} left in {path}."
            )
        try:
            raw = bytearray(needed)
        except (MemoryError, OverflowError) as exc:
            raise AllocationError(f"Could not allocate {count} pixels.") from exc
        got = f.readinto(raw)
        if got != needed:
            raise FormatError(f"Short read of pixel data: expected {needed} bytes, got {got}.")

    pixels = np.frombuffer(raw, dtype=np.uint8).reshape(count, BYTES_PER_PIXEL)
    logger.debug("Read %s: %dx%d (%d pixels)", path, width, height, count)
    return RasterImage(width, height, pixels)


def pack_headers(width: int, height: int) -> bytes:
    """The 54 header bytes written in front of a width x height pixel array."""
    data_size = pixel_count(width, height) * BYTES_PER_PIXEL
    file_header = FILE_HEADER.pack(BITMAP_TYPE, HEADERS_SIZE + data_size, 0, 0, HEADERS_SIZE)
    info_header = INFO_HEADER.pack(INFO_HEADER.size, width, height, 1, 24, 0, 0, 0, 0, 0, 0)
    return file_header + info_header


def write_bitmap(path: str, image: RasterImage) -> str:
    """
    Write `image` as file header + info header + pixel array.
    Nothing is left at `path` if the write fails part way.
    """
    with atomic_output(path, "wb") as f:
        f.write(pack_headers(image.width, image.height))
        f.write(np.ascontiguousarray(image.pixels, dtype=np.uint8).tobytes())
    logger.debug("Wrote %s: %dx%d", path, image.width, image.height)
    return path


def raster_to_rgb_array(image: RasterImage) -> np.ndarray:
    """
    H x W x 3 RGB view of a raster, top row first.
    Bottom-up rasters (positive height) are flipped vertically.
    """
    rows = abs(image.height)
    bgr = image.pixels.reshape(rows, image.width, BYTES_PER_PIXEL)
    rgb = bgr[..., [RED, GREEN, BLUE]]
    if image.is_bottom_up:
        rgb = rgb[::-1]
    return np.ascontiguousarray(rgb)


def raster_from_rgb_array(array: np.ndarray, bottom_up: bool = True) -> RasterImage:
    """
    Build a raster from an H x W x 3 RGB array (top row first).
    With bottom_up=True the rows are stored bottom first and height is positive.
    """
    if array.ndim != 3 or array.shape[2] != 3:
        raise ValueError("raster_from_rgb_array expects an HxWx3 RGB array.")
    h, w = array.shape[0], array.shape[1]
    arr = np.asarray(array)
    if np.issubdtype(arr.dtype, np.floating):
        arr = np.clip(arr, 0.0, 255.0)
    arr = arr.astype(np.uint8)
    if bottom_up:
        arr = arr[::-1]
    bgr = arr[..., [2, 1, 0]].reshape(h * w, BYTES_PER_PIXEL)
    return RasterImage(w, h if bottom_up else -h, np.ascontiguousarray(bgr))
