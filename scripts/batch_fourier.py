"""
Batch-run the channel Fourier pipeline over a directory of bitmaps.

For every file in SOURCE_DIR whose name contains ".bmp", writes per channel:
- a preview bitmap to output_channels/
- the packed binary spectrum to output_fft_DAT/
- the text spectrum to output_fft_TXT/

Usage (from project root):
python -m scripts.batch_fourier
"""

import logging
import sys

from core.errors import ImageIOError
from core.pipeline import OutputDirs, process_directory

# CONFIG: fixed for this tool, edit here if needed
SOURCE_DIR = "img"
OUTPUT_DIRS = OutputDirs(
    channels="output_channels",
    fft_dat="output_fft_DAT",
    fft_txt="output_fft_TXT",
)
START_INDEX = 1
# "iterative" (in-place) or "recursive" (reference); both give the same spectrum
FFT_METHOD = "iterative"


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)-22s - %(levelname)-8s - %(message)s",
        datefmt="%H:%M:%S",
    )
    try:
        result = process_directory(
            SOURCE_DIR, OUTPUT_DIRS, start_index=START_INDEX, method=FFT_METHOD
        )
    except ImageIOError as exc:
        logging.getLogger(__name__).error("%s", exc)
        return 1

    print(
        f"Batch done. {len(result.processed)} processed, {len(result.failed)} failed. "
        f"Results in: {', '.join(OUTPUT_DIRS.all())}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
