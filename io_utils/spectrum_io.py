# io_utils/spectrum_io.py
"""
Spectrum writers (and matching readers).

Binary: bare array of (real, imag) float64 pairs in native byte order,
16 bytes per sample, no header.
Text: one "<real> <imag>" line per sample, six decimals each.
"""

import logging

import numpy as np

from core.errors import FormatError, ImageIOError
from .file_utils import atomic_output

logger = logging.getLogger(__name__)

SAMPLE_BYTES = np.dtype(np.complex128).itemsize


def _as_spectrum(spectrum) -> np.ndarray:
    return np.ascontiguousarray(np.asarray(spectrum, dtype=np.complex128).ravel())


def write_spectrum_binary(path: str, spectrum) -> str:
    """Write packed complex pairs to `path`; returns the path."""
    data = _as_spectrum(spectrum)
    with atomic_output(path, "wb") as f:
        f.write(data.tobytes())
    logger.debug("Wrote %d samples to %s", data.shape[0], path)
    return path


def write_spectrum_text(path: str, spectrum) -> str:
    """Write one "real imag" line per sample to `path`; returns the path."""
    data = _as_spectrum(spectrum)
    with atomic_output(path, "w", encoding="ascii") as f:
        f.writelines(f"{z.real:f} {z.imag:f}\n" for z in data.tolist())
    logger.debug("Wrote %d samples to %s", data.shape[0], path)
    return path


def read_spectrum_binary(path: str) -> np.ndarray:
    try:
        with open(path, "rb") as f:
            raw = f.read()
    except OSError as exc:
        raise ImageIOError(f"Cannot open spectrum {path!r}: {exc}") from exc
    if len(raw) % SAMPLE_BYTES:
        raise FormatError(f"{path}: size {len(raw)} is not a multiple of {SAMPLE_BYTES} bytes.")
    return np.frombuffer(raw, dtype=np.complex128).copy()


def read_spectrum_text(path: str) -> np.ndarray:
    try:
        with open(path, "r", encoding="ascii") as f:
            lines = f.read().splitlines()
    except OSError as exc:
        raise ImageIOError(f"Cannot open spectrum {path!r}: {exc}") from exc

    out = np.empty(len(lines), dtype=np.complex128)
    for i, line in enumerate(lines):
        parts = line.split()
        if len(parts) != 2:
            raise FormatError(f"{path}:{i + 1}: expected 2 values, got {len(parts)}.")
        try:
            out[i] = complex(float(parts[0]), float(parts[1]))
        except ValueError as exc:
            raise FormatError(f"{path}:{i + 1}: {exc}") from exc
    return out
