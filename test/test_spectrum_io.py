import numpy as np
import pytest
from core.errors import FormatError, ImageIOError
from io_utils.file_utils import atomic_output
from io_utils.spectrum_io import (
    write_spectrum_binary, write_spectrum_text, read_spectrum_binary, read_spectrum_text
)

def _spectrum():
    return np.array([1020.0 + 0j, -1.25 + 3.5j, 0.123456 - 7.0j, 1e5 + 1e-3j])

def test_binary_layout(tmp_path):
    spectrum = _spectrum()
    p = tmp_path / "s.dat"
    write_spectrum_binary(str(p), spectrum)
    raw = p.read_bytes()
    assert len(raw) == 16 * spectrum.shape[0]
    pairs = np.frombuffer(raw, dtype=np.float64).reshape(-1, 2)
    assert np.array_equal(pairs[:, 0], spectrum.real)
    assert np.array_equal(pairs[:, 1], spectrum.imag)
    assert np.array_equal(read_spectrum_binary(str(p)), spectrum)

def test_text_format(tmp_path):
    p = tmp_path / "s.txt"
    write_spectrum_text(str(p), _spectrum())
    lines = p.read_text().splitlines()
    assert lines[0] == "1020.000000 0.000000"
    assert lines[1] == "-1.250000 3.500000"
    assert len(lines) == 4
    assert p.read_text().endswith("\n")

def test_text_parse_back(tmp_path):
    rng = np.random.default_rng(7)
    spectrum = (rng.random(64) - 0.5) * 1000 + 1j * (rng.random(64) - 0.5) * 1000
    p = tmp_path / "r.txt"
    write_spectrum_text(str(p), spectrum)
    assert np.allclose(read_spectrum_text(str(p)), spectrum, rtol=0, atol=5e-7)

def test_unopenable_destination(tmp_path):
    with pytest.raises(ImageIOError):
        write_spectrum_binary(str(tmp_path / "no" / "s.dat"), _spectrum())
    with pytest.raises(ImageIOError):
        write_spectrum_text(str(tmp_path / "no" / "s.txt"), _spectrum())

def test_failed_write_leaves_no_file(tmp_path):
    p = tmp_path / "bad.dat"
    with pytest.raises(RuntimeError):
        with atomic_output(str(p), "wb") as f:
            f.write(b"\x00" * 16)
            raise RuntimeError("disk full")
    assert list(tmp_path.iterdir()) == []

def test_failed_rewrite_keeps_previous_artifact(tmp_path):
    p = tmp_path / "s.dat"
    write_spectrum_binary(str(p), _spectrum())
    before = p.read_bytes()
    with pytest.raises(RuntimeError):
        with atomic_output(str(p), "wb") as f:
            f.write(b"partial")
            raise RuntimeError("interrupted")
    assert p.read_bytes() == before
    assert [x.name for x in tmp_path.iterdir()] == ["s.dat"]

def test_readers_reject_malformed(tmp_path):
    p = tmp_path / "odd.dat"
    p.write_bytes(b"\x00" * 17)
    with pytest.raises(FormatError):
        read_spectrum_binary(str(p))
    t = tmp_path / "odd.txt"
    t.write_text("1.0 2.0 3.0\n")
    with pytest.raises(FormatError):
        read_spectrum_text(str(t))
