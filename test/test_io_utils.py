import os
import struct
import numpy as np
import pytest
from core.errors import FormatError, ImageIOError
from core.raster import RasterImage
from io_utils.image_handler import (
    read_bitmap, write_bitmap, read_header, pack_headers,
    raster_to_rgb_array, raster_from_rgb_array,
)
from io_utils.file_utils import make_result_filename, ensure_output_dirs, list_bitmap_files

def _image(width, height, seed=0):
    rng = np.random.default_rng(seed)
    return RasterImage(width, height, rng.integers(0, 256, (width * abs(height), 3), dtype=np.uint8))

def test_save_and_read_roundtrip(tmp_path):
    img = _image(5, 3)
    p = tmp_path / "test.bmp"
    write_bitmap(str(p), img)
    out = read_bitmap(str(p))
    assert (out.width, out.height) == (5, 3)
    assert np.array_equal(out.pixels, img.pixels)

def test_top_down_height_roundtrip(tmp_path):
    img = _image(2, -2)
    p = tmp_path / "topdown.bmp"
    write_bitmap(str(p), img)
    out = read_bitmap(str(p))
    assert out.height == -2
    assert np.array_equal(out.pixels, img.pixels)

def test_header_layout_is_packed(tmp_path):
    img = _image(2, 2)
    p = tmp_path / "hdr.bmp"
    write_bitmap(str(p), img)
    raw = p.read_bytes()
    assert len(raw) == 14 + 40 + 2 * 2 * 3
    assert raw[:2] == b"BM"
    assert struct.unpack_from("<I", raw, 2)[0] == len(raw)
    assert struct.unpack_from("<I", raw, 10)[0] == 54
    # info header starts right at byte 14, pixels right at byte 54
    assert struct.unpack_from("<IiiHHI", raw, 14) == (40, 2, 2, 1, 24, 0)
    assert raw[54:] == img.pixels.tobytes()
    file_header, info_header = read_header(str(p))
    assert file_header == (0x4D42, 66, 0, 0, 54)
    assert info_header[:6] == (40, 2, 2, 1, 24, 0)
    assert info_header[6:] == (0, 0, 0, 0, 0)
    assert pack_headers(2, 2) == raw[:54]

def test_standard_decoder_reads_written_bitmap(tmp_path):
    from PIL import Image
    # width 4 -> 12-byte rows, already 4-byte aligned
    img = _image(4, 2)
    p = tmp_path / "pil.bmp"
    write_bitmap(str(p), img)
    with Image.open(p) as pil:
        arr = np.asarray(pil.convert("RGB"))
    assert arr.shape == (2, 4, 3)
    assert np.array_equal(arr, raster_to_rgb_array(img))
    # bottom-up: first stored pixel is bottom-left
    b, g, r = img.pixels[0]
    assert tuple(arr[1, 0]) == (r, g, b)

def test_rgb_array_roundtrip():
    arr = np.arange(2 * 3 * 3, dtype=np.uint8).reshape(2, 3, 3)
    for bottom_up in (True, False):
        img = raster_from_rgb_array(arr, bottom_up=bottom_up)
        assert img.width == 3
        assert img.height == (2 if bottom_up else -2)
        assert np.array_equal(raster_to_rgb_array(img), arr)

def test_missing_file_raises_ioerror(tmp_path):
    with pytest.raises(ImageIOError):
        read_bitmap(str(tmp_path / "nope.bmp"))
    with pytest.raises(OSError):
        read_bitmap(str(tmp_path / "nope.bmp"))

def test_short_headers_raise_format_error(tmp_path):
    p = tmp_path / "short.bmp"
    p.write_bytes(b"BM" + b"\x00" * 10)
    with pytest.raises(FormatError):
        read_bitmap(str(p))
    p.write_bytes(pack_headers(2, 2)[:30])
    with pytest.raises(FormatError):
        read_bitmap(str(p))

def test_truncated_pixels_raise_format_error(tmp_path):
    p = tmp_path / "trunc.bmp"
    p.write_bytes(pack_headers(2, 2) + b"\x01" * 5)
    with pytest.raises(FormatError):
        read_bitmap(str(p))

def test_write_to_missing_dir_leaves_nothing(tmp_path):
    target = tmp_path / "missing" / "out.bmp"
    with pytest.raises(ImageIOError):
        write_bitmap(str(target), _image(2, 2))
    assert not target.exists()

def test_raster_dimension_mismatch():
    with pytest.raises(FormatError):
        RasterImage(2, 2, np.zeros((3, 3), dtype=np.uint8))

def test_make_result_filename():
    assert make_result_filename("output_channels", "red", 1, "preview") == os.path.join("output_channels", "red_channel_01.bmp")
    assert make_result_filename("output_fft_DAT", "green", 12, "fft_dat") == os.path.join("output_fft_DAT", "green_channel_fft_12.dat")
    assert make_result_filename("output_fft_TXT", "blue", 3, "fft_txt") == os.path.join("output_fft_TXT", "blue_channel_fft_03.txt")
    with pytest.raises(ValueError):
        make_result_filename(".", "red", 1, "png")

def test_list_bitmap_files(tmp_path):
    (tmp_path / "b.bmp").write_bytes(b"")
    (tmp_path / "a.bmp").write_bytes(b"")
    (tmp_path / "notes.txt").write_bytes(b"")
    (tmp_path / "dir.bmp").mkdir()
    found = list_bitmap_files(str(tmp_path))
    assert [os.path.basename(p) for p in found] == ["a.bmp", "b.bmp"]
    with pytest.raises(ImageIOError):
        list_bitmap_files(str(tmp_path / "absent"))

def test_ensure_output_dirs(tmp_path):
    dirs = [str(tmp_path / "x"), str(tmp_path / "y")]
    assert ensure_output_dirs(dirs) == dirs
    assert all(os.path.isdir(d) for d in dirs)
    assert ensure_output_dirs(dirs) == []
