# io_utils/__init__.py
"""
I/O helpers package for the bitmap channel Fourier project.
"""
from .image_handler import read_bitmap, write_bitmap, raster_to_rgb_array, raster_from_rgb_array
from .spectrum_io import write_spectrum_binary, write_spectrum_text, read_spectrum_binary, read_spectrum_text
from .file_utils import make_result_filename, ensure_output_dirs, list_bitmap_files

__all__ = [
    "read_bitmap",
    "write_bitmap",
    "raster_to_rgb_array",
    "raster_from_rgb_array",
    "write_spectrum_binary",
    "write_spectrum_text",
    "read_spectrum_binary",
    "read_spectrum_text",
    "make_result_filename",
    "ensure_output_dirs",
    "list_bitmap_files",
]
