"""
Vector math helpers for single- and double-precision 3-vectors.

All functions are pure. Randomness always comes from an explicit
numpy Generator so callers (and tests) control the seed.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Sequence, Union

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt

VectorLike = Union[Sequence[float], "npt.NDArray[np.floating]"]


def _gen_3(low: float, high: float, rng: np.random.Generator, dtype: type) -> npt.NDArray:
    if low > high:
        raise ValueError(f"Empty range: low={low} > high={high}.")
    # uniform() samples [low, high); nextafter makes the upper bound reachable
    upper = np.nextafter(high, np.inf) if high > low else high
    return rng.uniform(low, upper, size=3).clip(low, high).astype(dtype)


def gen_f32_3(low: float, high: float, rng: np.random.Generator) -> npt.NDArray[np.float32]:
    """
    Random single-precision 3-vector, each component independently drawn from [low, high].

    Args:
        low: Lower bound (inclusive).
        high: Upper bound (inclusive).
        rng: Source of randomness.

    Returns:
        Array of shape (3,) and dtype float32.
    """
    return _gen_3(low, high, rng, np.float32)


def gen_f64_3(low: float, high: float, rng: np.random.Generator) -> npt.NDArray[np.float64]:
    """Double-precision counterpart of gen_f32_3."""
    return _gen_3(low, high, rng, np.float64)


def normalize(v: VectorLike) -> npt.NDArray[np.floating]:
    """
    Scale a vector to unit length.

    A zero-length (or non-finite) vector has no direction; the zero vector of the
    same dtype is returned instead of dividing by zero.
    """
    arr = np.asarray(v)
    if not np.issubdtype(arr.dtype, np.floating):
        arr = arr.astype(np.float64)
    mag = float(np.linalg.norm(arr.astype(np.float64)))
    if mag == 0.0 or not np.isfinite(mag):
        return np.zeros_like(arr)
    return (arr / mag).astype(arr.dtype)


def scale(v: VectorLike, s: float) -> npt.NDArray[np.floating]:
    """Multiply a vector by a scalar, keeping its dtype."""
    arr = np.asarray(v)
    if not np.issubdtype(arr.dtype, np.floating):
        arr = arr.astype(np.float64)
    return (arr * s).astype(arr.dtype)


def is_finite_3(v: VectorLike) -> bool:
    """True for a 3-vector whose components are all finite numbers."""
    try:
        arr = np.asarray(v, dtype=np.float64)
    except (TypeError, ValueError):
        return False
    return arr.shape == (3,) and bool(np.all(np.isfinite(arr)))
