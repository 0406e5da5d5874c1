"""
core/pipeline.py

Per-file pipeline and batch fold:

  read bitmap -> split channels -> for red, green, blue:
      write channel preview -> FFT of the flattened channel -> write .dat / .txt

The image index is passed in explicitly and only advanced by
process_directory() once a file's whole pipeline has succeeded, so output
names never collide within one run.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .color_processing import channel_samples, split_channels
from .errors import FourierPipelineError, PreconditionError
from .fft_engine import is_power_of_two, transform
from .raster import CHANNEL_ORDER

from io_utils.file_utils import ensure_output_dirs, list_bitmap_files, make_result_filename
from io_utils.image_handler import read_bitmap, write_bitmap
from io_utils.spectrum_io import write_spectrum_binary, write_spectrum_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutputDirs:
    channels: str = "output_channels"
    fft_dat: str = "output_fft_DAT"
    fft_txt: str = "output_fft_TXT"

    def all(self) -> Tuple[str, str, str]:
        return (self.channels, self.fft_dat, self.fft_txt)


@dataclass
class ProcessedImage:
    input_path: str
    index: int
    width: int
    height: int
    # channel -> {"preview": path, "fft_dat": path, "fft_txt": path}
    outputs: Dict[str, Dict[str, str]] = field(default_factory=dict)


@dataclass
class BatchResult:
    processed: List[ProcessedImage] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)
    next_index: int = 1


def process_bitmap(
    path: str,
    index: int,
    dirs: Optional[OutputDirs] = None,
    *,
    method: str = "iterative",
) -> ProcessedImage:
    """
    Run the full pipeline for one bitmap and write its nine artifacts.

    The transform length (width*|height|) is checked before anything is
    written, so a PreconditionError leaves no output behind. If a later step
    fails, the artifacts already written for this file are removed.
    """
    dirs = dirs or OutputDirs()
    image = read_bitmap(path)
    n = image.size
    if n > 1 and not is_power_of_two(n):
        raise PreconditionError(
            f"{path}: {image.width}x{abs(image.height)} = {n} pixels is not a power of two."
        )

    logger.info("Extracting color channels from %s", path)
    channels = split_channels(image)
    del image

    record = ProcessedImage(path, index, channels[0].width, channels[0].height)
    written: List[str] = []
    try:
        for name, channel_image in zip(CHANNEL_ORDER, channels):
            preview_path = make_result_filename(dirs.channels, name, index, "preview")
            dat_path = make_result_filename(dirs.fft_dat, name, index, "fft_dat")
            txt_path = make_result_filename(dirs.fft_txt, name, index, "fft_txt")

            written.append(write_bitmap(preview_path, channel_image))
            spectrum = transform(channel_samples(channel_image), n, method=method)
            written.append(write_spectrum_binary(dat_path, spectrum))
            written.append(write_spectrum_text(txt_path, spectrum))
            logger.debug("%s channel of %s -> %s, %s, %s", name, path, preview_path, dat_path, txt_path)

            record.outputs[name] = {"preview": preview_path, "fft_dat": dat_path, "fft_txt": txt_path}
    except BaseException:
        _remove_outputs(written)
        raise
    return record


def _remove_outputs(paths: List[str]) -> None:
    """Delete the artifacts already written for a file that failed part way."""
    for p in paths:
        try:
            os.unlink(p)
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Could not remove partial output %s: %s", p, exc)
        else:
            logger.debug("Removed partial output %s", p)


def process_directory(
    source_dir: str,
    dirs: Optional[OutputDirs] = None,
    *,
    start_index: int = 1,
    method: str = "iterative",
) -> BatchResult:
    """
    Process every bitmap in `source_dir`, one after another.

    A failure on one file is logged and recorded, and the batch moves on;
    only an unreadable source directory aborts the run (ImageIOError).
    """
    dirs = dirs or OutputDirs()
    ensure_output_dirs(dirs.all())
    paths = list_bitmap_files(source_dir)

    result = BatchResult(next_index=start_index)
    for path in paths:
        logger.info("Processing %s", path)
        try:
            record = process_bitmap(path, result.next_index, dirs, method=method)
        except FourierPipelineError as exc:
            logger.error("Skipping %s: %s", path, exc)
            result.failed.append((path, str(exc)))
            continue
        result.processed.append(record)
        result.next_index += 1
    return result
