"""
Fixed-Point Element Types
=========================

Element types for distributional arrays and random index tables, plus
the saturating accumulation used by the encoder.

Defaults follow the classic layout:
- Data elements: int16 (must be signed)
- Index elements: uint16 (sign not needed)

All arithmetic is done in int64 and clamped back into the element range.
"""

from __future__ import annotations

from typing import Tuple, Union
import numpy as np

from .errors import PreconditionError


DATA_DTYPE = np.dtype(np.int16)
INDEX_DTYPE = np.dtype(np.uint16)


# =============================================================================
# Type Checks
# =============================================================================

def check_data_dtype(dtype) -> np.dtype:
    """Resolve and validate a distributional array element type."""
    dt = np.dtype(dtype)
    if not np.issubdtype(dt, np.signedinteger):
        raise PreconditionError(f"Data element type must be a signed integer, got {dt}")
    return dt


def check_index_dtype(dtype) -> np.dtype:
    """Resolve and validate a random index element type."""
    dt = np.dtype(dtype)
    if not np.issubdtype(dt, np.unsignedinteger):
        raise PreconditionError(f"Index element type must be an unsigned integer, got {dt}")
    return dt


def dtype_limits(dtype) -> Tuple[int, int]:
    """Return (min, max) representable by an integer dtype."""
    info = np.iinfo(np.dtype(dtype))
    return int(info.min), int(info.max)


# =============================================================================
# Saturating Arithmetic
# =============================================================================

def saturating_add(
    current: Union[int, np.ndarray],
    delta: Union[int, np.ndarray],
    dtype=DATA_DTYPE,
) -> Tuple[Union[int, np.ndarray], int]:
    """
    Add with clamping to the range of ``dtype``.

    Sums that leave the representable range are pinned at the dtype's
    minimum or maximum. Works element-wise for arrays.

    Args:
        current: Existing value(s)
        delta: Value(s) to add
        dtype: Integer element type defining the range

    Returns:
        (result, clamped) where result has dtype ``dtype`` (a plain int for
        scalar inputs) and clamped is the number of clamped elements
    """
    lo, hi = dtype_limits(dtype)
    raw = np.asarray(current, dtype=np.int64) + np.asarray(delta, dtype=np.int64)
    clamped = int(np.count_nonzero((raw < lo) | (raw > hi)))
    result = np.clip(raw, lo, hi).astype(dtype)

    if result.ndim == 0:
        return int(result), clamped
    return result, clamped


def fits(value: int, dtype=DATA_DTYPE) -> bool:
    """True if an integer value is representable in ``dtype``."""
    lo, hi = dtype_limits(dtype)
    return lo <= value <= hi


__all__ = [
    'DATA_DTYPE',
    'INDEX_DTYPE',
    'check_data_dtype',
    'check_index_dtype',
    'dtype_limits',
    'saturating_add',
    'fits',
]
