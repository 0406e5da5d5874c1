'''
FFT engine.

Forward radix-2 decimation-in-time transform over a 1-D complex sequence.
No normalization is applied (no 1/N scaling) and no inverse is provided.

Functions:
- transform: validated entry point (length must be a power of two)
- fft_recursive: reference recursion, allocates even/odd halves at each level
- fft_iterative: in-place bit-reversal variant working on one buffer
- is_power_of_two / next_power_of_two / pad_to_power_of_two / bit_reverse_indices
'''

import numpy as np
from typing import Optional

from .errors import AllocationError, PreconditionError

METHODS = ("recursive", "iterative")


def is_power_of_two(n: int) -> bool:
    n = int(n)
    return n > 0 and (n & (n - 1)) == 0


def next_power_of_two(n: int) -> int:
    """Smallest power of two >= n (1 for n <= 1)."""
    n = int(n)
    if n <= 1:
        return 1
    return 1 << (n - 1).bit_length()


def pad_to_power_of_two(samples) -> np.ndarray:
    """
    Zero-pad `samples` up to the next power of two.
    Only for callers that explicitly accept the changed bin spacing.
    """
    x = np.asarray(samples, dtype=np.complex128)
    if x.ndim != 1:
        raise ValueError("pad_to_power_of_two expects a 1D sequence.")
    n = next_power_of_two(x.shape[0])
    if n == x.shape[0]:
        return x.copy()
    out = np.zeros(n, dtype=np.complex128)
    out[: x.shape[0]] = x
    return out


def _twiddles(n: int) -> np.ndarray:
    """W_k = cos(-2*pi*k/n) + i*sin(-2*pi*k/n) for k in [0, n/2)."""
    t = -2.0 * np.pi * np.arange(n // 2) / n
    return np.cos(t) + 1j * np.sin(t)


def fft_recursive(x: np.ndarray) -> np.ndarray:
    """
    Recursive radix-2 DIT FFT. Returns a new array; `x` is left untouched.
    len(x) must be a power of two (or <= 1).
    """
    n = x.shape[0]
    if n <= 1:
        return x.copy()

    even = fft_recursive(x[0::2])
    odd = fft_recursive(x[1::2])

    t = _twiddles(n) * odd
    out = np.empty(n, dtype=np.complex128)
    half = n // 2
    out[:half] = even + t
    out[half:] = even - t
    return out


def bit_reverse_indices(n: int) -> np.ndarray:
    """Permutation that puts index i at position reverse_bits(i) for a power-of-two n."""
    if n <= 1:
        return np.arange(n)
    bits = n.bit_length() - 1
    idx = np.arange(n)
    rev = np.zeros(n, dtype=np.int64)
    for _ in range(bits):
        rev = (rev << 1) | (idx & 1)
        idx >>= 1
    return rev


def fft_iterative(x: np.ndarray, out: Optional[np.ndarray] = None) -> np.ndarray:
    """
    In-place iterative radix-2 DIT FFT.

    If `out` is given it must be a complex128 buffer of the same length; the
    transform is written into it (it may be `x` itself). Otherwise a new buffer
    is allocated. Output ordering and values match fft_recursive().
    """
    n = x.shape[0]
    if out is None:
        out = np.array(x, dtype=np.complex128, copy=True)
    elif out is not x:
        if out.shape != x.shape or out.dtype != np.complex128:
            raise ValueError("out must be a complex128 buffer with the same shape as x.")
        out[:] = x
    if n <= 1:
        return out

    out[:] = out[bit_reverse_indices(n)]

    m = 2
    while m <= n:
        half = m // 2
        w = _twiddles(m)
        # each row is one butterfly group of size m
        groups = out.reshape(n // m, m)
        even = groups[:, :half].copy()
        t = w * groups[:, half:]
        groups[:, :half] = even + t
        groups[:, half:] = even - t
        m *= 2
    return out


def transform(samples, n: Optional[int] = None, *, method: str = "recursive") -> np.ndarray:
    """
    Forward DFT of `samples` via radix-2 decimation-in-time.

    n defaults to len(samples). Raises PreconditionError if n differs from the
    number of samples or is not a power of two. For n <= 1 the input is
    returned unchanged (as a new complex128 array).
    """
    if method not in METHODS:
        raise ValueError(f"Unknown FFT method {method!r}; expected one of {METHODS}.")
    try:
        x = np.asarray(samples, dtype=np.complex128)
    except MemoryError as exc:
        raise AllocationError("Could not allocate the sample buffer.") from exc
    if x.ndim != 1:
        raise ValueError("transform expects a 1D sequence of complex samples.")

    if n is None:
        n = x.shape[0]
    n = int(n)
    if n != x.shape[0]:
        raise PreconditionError(f"Transform length {n} does not match {x.shape[0]} samples.")
    if n <= 1:
        return x.copy()
    if not is_power_of_two(n):
        raise PreconditionError(
            f"Transform length {n} is not a power of two "
            f"(next power of two is {next_power_of_two(n)})."
        )

    if method == "iterative":
        return fft_iterative(x)
    return fft_recursive(x)
