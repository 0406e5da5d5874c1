# io_utils/file_utils.py
"""
File naming, output-directory and atomic-write helpers.
"""

import os
import logging
import tempfile
from contextlib import contextmanager
from typing import Iterable, List

from core.errors import ImageIOError

logger = logging.getLogger(__name__)

BITMAP_MARKER = ".bmp"

# kind -> (filename stem suffix, extension)
_KINDS = {
    "preview": ("", "bmp"),
    "fft_dat": ("_fft", "dat"),
    "fft_txt": ("_fft", "txt"),
}


def make_result_filename(outdir: str, channel: str, index: int, kind: str) -> str:
    """
    Output path for one artifact, keyed by image index and channel name,
    e.g. output_fft_TXT/red_channel_fft_01.txt
    """
    if kind not in _KINDS:
        raise ValueError(f"Unknown artifact kind {kind!r}; expected one of {tuple(_KINDS)}.")
    suffix, ext = _KINDS[kind]
    fname = f"{channel}_channel{suffix}_{int(index):02d}.{ext}"
    return os.path.join(outdir, fname)


def ensure_output_dirs(dirs: Iterable[str]) -> List[str]:
    created = []
    for d in dirs:
        if not os.path.isdir(d):
            os.makedirs(d, exist_ok=True)
            created.append(d)
            logger.debug("Created output directory %s", d)
    return created


def list_bitmap_files(directory: str) -> List[str]:
    """
    Regular files in `directory` whose name contains ".bmp", sorted by name.
    Raises ImageIOError if the directory cannot be read.
    """
    try:
        entries = sorted(os.scandir(directory), key=lambda e: e.name)
    except OSError as exc:
        raise ImageIOError(f"Cannot open source directory {directory!r}: {exc}") from exc

    found = []
    for entry in entries:
        if entry.is_file() and BITMAP_MARKER in entry.name:
            found.append(os.path.join(directory, entry.name))
        else:
            logger.info("Ignoring %s", entry.name)
    return found


@contextmanager
def atomic_output(path: str, mode: str = "wb", encoding=None):
    """
    Open a temporary file next to `path` and move it into place on success.
    On any failure the temporary file is removed, so `path` is either the
    complete new artifact or untouched.
    """
    directory = os.path.dirname(os.path.abspath(path))
    try:
        fd, tmp_path = tempfile.mkstemp(
            prefix=f".{os.path.basename(path)}.", suffix=".tmp", dir=directory
        )
    except OSError as exc:
        raise ImageIOError(f"Cannot open {path!r} for writing: {exc}") from exc

    try:
        with os.fdopen(fd, mode, encoding=encoding) as f:
            yield f
        try:
            # mkstemp creates 0600 files
            os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, path)
        except OSError as exc:
            raise ImageIOError(f"Cannot write {path!r}: {exc}") from exc
    except BaseException:
        try:
            os.unlink(tmp_path)
        except FileNotFoundError:
            pass
        raise
