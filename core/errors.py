"""
core/errors.py

Exception taxonomy shared by the codec, the transform and the batch pipeline.

Each error also derives from the closest builtin so callers that only know
about OSError / ValueError / MemoryError still catch them.
"""


class FourierPipelineError(Exception):
    """Base class for every error raised while processing one bitmap."""


class ImageIOError(FourierPipelineError, OSError):
    """A path could not be opened for the requested mode."""


class FormatError(FourierPipelineError, ValueError):
    """Header read short, truncated pixel data or inconsistent dimensions."""


class AllocationError(FourierPipelineError, MemoryError):
    """A pixel or sample buffer could not be acquired."""


class PreconditionError(FourierPipelineError, ValueError):
    """Transform length is not a power of two (or does not match the samples)."""
