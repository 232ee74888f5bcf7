"""
Coordinates and Row-Major Flattening
====================================

Each dimension of a coordinate is either a concrete explicit index or the
``AVERAGE`` directive, which asks ``cosa`` to marginalize that dimension.

All offset arithmetic for encode, decode and cosa goes through ``flatten``
so the three code paths cannot disagree about memory layout.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Union
import numpy as np

from .errors import PreconditionError


# =============================================================================
# Tagged Coordinate Variants
# =============================================================================

@dataclass(frozen=True)
class Concrete:
    """A specific explicit index in one dimension."""
    index: int

    def __post_init__(self):
        if isinstance(self.index, bool) or not isinstance(self.index, (int, np.integer)):
            raise PreconditionError(f"Index must be an integer, got {self.index!r}")
        if self.index < 0:
            raise PreconditionError(f"Index must be non-negative, got {self.index}")
        object.__setattr__(self, "index", int(self.index))


class Marginalize:
    """Average over the whole dimension (singleton, use ``AVERAGE``)."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "AVERAGE"

    def __reduce__(self):
        return (Marginalize, ())


AVERAGE = Marginalize()

Axis = Union[Concrete, Marginalize]
AxisLike = Union[int, np.integer, Concrete, Marginalize]


def as_axis(value: AxisLike) -> Axis:
    """Coerce an int (or variant) into a coordinate variant."""
    if isinstance(value, (Concrete, Marginalize)):
        return value
    return Concrete(value)


def normalize_coord(
    coord: Sequence[AxisLike],
    dims: int,
    allow_average: bool = False,
) -> List[Axis]:
    """
    Validate a coordinate and convert it to variants.

    Args:
        coord: One entry per dimension
        dims: Expected number of dimensions
        allow_average: Whether ``AVERAGE`` entries are accepted

    Returns:
        List of Concrete / Marginalize entries
    """
    if len(coord) != dims:
        raise PreconditionError(f"Coordinate has {len(coord)} entries, expected {dims}")

    axes = [as_axis(v) for v in coord]
    if not allow_average and any(isinstance(a, Marginalize) for a in axes):
        raise PreconditionError("AVERAGE is only valid for cosa()")
    return axes


# =============================================================================
# Mixed-Radix Index Math
# =============================================================================

def strides(radices: Sequence[int]) -> List[int]:
    """
    Row-major multipliers: product of all radices strictly to the right.

    strides([8, 4, 2]) == [8, 2, 1]
    """
    out = [1] * len(radices)
    for i in range(len(radices) - 2, -1, -1):
        out[i] = out[i + 1] * int(radices[i + 1])
    return out


def decompose(flat: np.ndarray, unroll: Sequence[int], radices: Sequence[int]) -> np.ndarray:
    """
    Split flat term numbers into per-dimension digits.

    Args:
        flat: Term numbers, shape (n,)
        unroll: Row-major multipliers from ``strides(radices)``
        radices: Size of each digit

    Returns:
        Digits, shape (n, len(radices))
    """
    flat = np.asarray(flat, dtype=np.int64)
    digits = np.empty((flat.shape[0], len(radices)), dtype=np.int64)
    for d, (u, r) in enumerate(zip(unroll, radices)):
        digits[:, d] = (flat // u) % r
    return digits


def flatten(indices: Sequence[np.ndarray], ranges: Sequence[int]) -> np.ndarray:
    """
    Row-major offsets into an array shaped by ``ranges``.

    The per-dimension index arrays are broadcast against each other, so
    ``flatten(np.ix_(a, b), ranges)`` yields the full outer grid.
    """
    return np.ravel_multi_index(
        tuple(np.asarray(i, dtype=np.intp) for i in indices),
        tuple(int(r) for r in ranges),
    )


__all__ = [
    'Concrete',
    'Marginalize',
    'AVERAGE',
    'as_axis',
    'normalize_coord',
    'strides',
    'decompose',
    'flatten',
]
