"""
Random Indexing Engine - N-Dimensional Encode / Decode / Cosine
===============================================================

Random indexing of n-dimensional arrays.

A sparse, multi-way array with explicit index ranges of arbitrary size
(e.g. term x co-occurrence x context) is superposed into a fixed-size
dense distributional array. Every explicit index in dimension d is mapped
to ``index_count[d]`` random positions in ``[0, data_range[d])``, half of
them carrying positive and half negative sign. An encode touches the full
outer product of those positions (``dist_numel`` cells); a decode reads the
same cells back, undoes the signs and averages. Cross-talk from other
encoded coordinates cancels in expectation.

The engine owns the random index tables only. Distributional arrays are
numpy buffers owned by the caller and passed in per call.

Usage:
    from rindex import RandomIndex, AVERAGE

    ri = RandomIndex(data_ranges=[2048, 32], index_counts=[8, 4])
    ri.set_range(0, 10000)
    ri.set_range(1, 1000)

    terms = ri.allocate(count=1024)
    ri.encode(terms[7], (3, 12), 5)
    ri.decode(terms[7], (3, 12))          # ~5.0

    ri.cosa(terms[0], (AVERAGE, AVERAGE), terms[1], (AVERAGE, AVERAGE))
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple
import logging
import math
import numpy as np

from .coords import (
    AxisLike,
    Concrete,
    Marginalize,
    decompose,
    flatten,
    normalize_coord,
    strides,
)
from .errors import PreconditionError, ZeroNormError
from .fixed import (
    DATA_DTYPE,
    INDEX_DTYPE,
    check_data_dtype,
    fits,
    saturating_add,
)
from .rng import DEFAULT_SEED, RandomSource, UniformSource
from .table import DEFAULT_MAX_DRAWS, IndexTable

logger = logging.getLogger(__name__)


class RandomIndex:
    """
    Random indexing coordinator for one distributional array layout.

    Args:
        data_ranges: Size of the distributional array in each dimension
        index_counts: Random indices per explicit index, per dimension
        source: Uniform random source (default: RandomSource(seed))
        seed: Seed used when no source is given
        data_dtype: Signed fixed-point element type of distributional arrays
        index_dtype: Unsigned element type of the random index tables
        max_draws: Rejection sampling cap per table cell
    """

    def __init__(
        self,
        data_ranges: Sequence[int],
        index_counts: Sequence[int],
        source: Optional[UniformSource] = None,
        seed: int = DEFAULT_SEED,
        data_dtype=DATA_DTYPE,
        index_dtype=INDEX_DTYPE,
        max_draws: int = DEFAULT_MAX_DRAWS,
    ):
        if len(data_ranges) == 0:
            raise PreconditionError("At least one dimension is required")
        if len(data_ranges) != len(index_counts):
            raise PreconditionError(
                f"{len(data_ranges)} data ranges but {len(index_counts)} index counts"
            )

        self.data_dtype = check_data_dtype(data_dtype)
        self.source = source if source is not None else RandomSource(seed)

        tables = [
            IndexTable(dr, nr, self.source, dtype=index_dtype, max_draws=max_draws)
            for dr, nr in zip(data_ranges, index_counts)
        ]
        self._tables: Tuple[IndexTable, ...] = tuple(tables)

        self._data_ranges = tuple(t.data_range for t in tables)
        self._index_counts = tuple(t.index_count for t in tables)
        self._unroll = tuple(strides(self._index_counts))
        self._data_numel = math.prod(self._data_ranges)
        self._dist_numel = math.prod(self._index_counts)
        self._saturation = 0

        # Term enumeration is the same for every call: precompute columns and signs
        self._cols = decompose(
            np.arange(self._dist_numel), self._unroll, self._index_counts
        )
        negative = np.zeros(self._dist_numel, dtype=bool)
        for d, t in enumerate(tables):
            negative ^= self._cols[:, d] >= t.num_positive
        self._signs = np.where(negative, -1, 1).astype(np.int64)

        logger.info(
            f"RandomIndex: dims={self.dims}, data_ranges={self._data_ranges}, "
            f"index_counts={self._index_counts}, {self.data_size()} data bytes"
        )

    # =========================================================================
    # Layout
    # =========================================================================

    @property
    def dims(self) -> int:
        return len(self._tables)

    @property
    def data_ranges(self) -> Tuple[int, ...]:
        return self._data_ranges

    @property
    def index_counts(self) -> Tuple[int, ...]:
        return self._index_counts

    @property
    def unroll(self) -> Tuple[int, ...]:
        """Row-major multipliers over the index counts."""
        return self._unroll

    @property
    def data_numel(self) -> int:
        """Elements in one distributional array."""
        return self._data_numel

    @property
    def dist_numel(self) -> int:
        """Cells touched by one encode / decode."""
        return self._dist_numel

    def table(self, dim: int) -> IndexTable:
        if not 0 <= dim < self.dims:
            raise PreconditionError(f"Dimension {dim} out of range [0, {self.dims})")
        return self._tables[dim]

    def range(self, dim: int) -> int:
        """Explicit indices covered so far in ``dim``."""
        return self.table(dim).rows

    def set_range(self, dim: int, n: int) -> int:
        """Grow ``dim`` to cover explicit indices [0, n); never shrinks."""
        return self.table(dim).grow(n)

    def numrind(self, dim: int) -> int:
        return self.table(dim).index_count

    def datarange(self, dim: int) -> int:
        return self.table(dim).data_range

    def data_size(self) -> int:
        """Bytes in one distributional array."""
        return self._data_numel * self.data_dtype.itemsize

    def index_size(self) -> int:
        """Bytes held by all random index tables."""
        return sum(t.nbytes for t in self._tables)

    def saturation(self) -> int:
        """Number of clamped cells since construction."""
        return self._saturation

    def allocate(self, count: Optional[int] = None) -> np.ndarray:
        """
        Zeroed distributional array(s) in the agreed layout.

        Args:
            count: If given, a stack of ``count`` arrays (shape (count, data_numel))
        """
        shape = self._data_numel if count is None else (count, self._data_numel)
        return np.zeros(shape, dtype=self.data_dtype)

    # =========================================================================
    # Encode / Decode
    # =========================================================================

    def encode(self, data: np.ndarray, ind: Sequence[AxisLike], weight: int) -> None:
        """
        Superpose ``weight`` at explicit coordinate ``ind`` into ``data``.

        Additions saturate at the element type's limits; every clamped
        cell increments the saturation counter.
        """
        flat = self._flat(data, writeable=True)
        axes = normalize_coord(ind, self.dims)
        if isinstance(weight, bool) or not isinstance(weight, (int, np.integer)):
            raise PreconditionError(f"Weight must be an integer, got {weight!r}")
        if not fits(int(weight), self.data_dtype):
            raise PreconditionError(f"Weight {weight} does not fit {self.data_dtype}")
        offsets = self._offsets(axes)

        if weight == 0:
            return

        result, clamped = saturating_add(
            flat[offsets], self._signs * int(weight), self.data_dtype
        )
        flat[offsets] = result
        self._saturation += clamped

    def decode(self, data: np.ndarray, ind: Sequence[AxisLike]) -> float:
        """Estimate the weight stored at explicit coordinate ``ind``."""
        flat = self._flat(data)
        offsets = self._offsets(normalize_coord(ind, self.dims))
        total = np.dot(self._signs, flat[offsets].astype(np.int64))
        return float(total) / self._dist_numel

    def _offsets(self, axes: Sequence[Concrete]) -> np.ndarray:
        positions = [
            t.row(a.index)[self._cols[:, d]]
            for d, (t, a) in enumerate(zip(self._tables, axes))
        ]
        return flatten(positions, self._data_ranges)

    # =========================================================================
    # Cosine Similarity
    # =========================================================================

    def cosa(
        self,
        d1: np.ndarray,
        i1: Sequence[AxisLike],
        d2: np.ndarray,
        i2: Sequence[AxisLike],
        zero_norm: Optional[float] = None,
    ) -> float:
        """
        Approximate cos(angle) between two slices of distributional arrays.

        Concrete dimensions compare the random positions of the given
        explicit indices; ``AVERAGE`` dimensions compare the full data range,
        marginalizing that dimension exactly. A dimension must be AVERAGE in
        both operands or in neither.

        Args:
            d1, d2: Distributional arrays (may be the same buffer)
            i1, i2: Coordinates, entries are ints or AVERAGE
            zero_norm: Value to return when either norm is zero; raise
                ZeroNormError if None

        Returns:
            dot / sqrt(norm1 * norm2)
        """
        flat1 = self._flat(d1)
        flat2 = self._flat(d2)
        axes1 = normalize_coord(i1, self.dims, allow_average=True)
        axes2 = normalize_coord(i2, self.dims, allow_average=True)

        for d, (a, b) in enumerate(zip(axes1, axes2)):
            if isinstance(a, Marginalize) != isinstance(b, Marginalize):
                raise PreconditionError(
                    f"Dimension {d}: AVERAGE must be set on both operands or neither"
                )

        v1 = flat1[self._slice_offsets(axes1)].astype(np.float64)
        v2 = flat2[self._slice_offsets(axes2)].astype(np.float64)

        # Random index signs are identical on both sides and cancel
        dot = float(np.dot(v1, v2))
        norm1 = float(np.dot(v1, v1))
        norm2 = float(np.dot(v2, v2))

        if norm1 == 0.0 or norm2 == 0.0:
            if zero_norm is None:
                raise ZeroNormError(
                    f"cosa undefined: norm1={norm1}, norm2={norm2}"
                )
            return float(zero_norm)

        return dot / math.sqrt(norm1 * norm2)

    def _slice_offsets(self, axes: Sequence) -> np.ndarray:
        positions: List[np.ndarray] = []
        for t, a in zip(self._tables, axes):
            if isinstance(a, Marginalize):
                positions.append(np.arange(t.data_range))
            else:
                positions.append(t.row(a.index))
        return flatten(np.ix_(*positions), self._data_ranges).ravel()

    # =========================================================================
    # Buffers
    # =========================================================================

    def _flat(self, data: np.ndarray, writeable: bool = False) -> np.ndarray:
        if not isinstance(data, np.ndarray):
            raise PreconditionError(f"Expected a numpy array, got {type(data).__name__}")
        if data.dtype != self.data_dtype:
            raise PreconditionError(f"Expected dtype {self.data_dtype}, got {data.dtype}")
        if data.size != self._data_numel:
            raise PreconditionError(
                f"Expected {self._data_numel} elements, got {data.size}"
            )
        if not data.flags.c_contiguous:
            raise PreconditionError("Distributional array must be C-contiguous")
        if writeable and not data.flags.writeable:
            raise PreconditionError("Distributional array is read-only")
        return data.reshape(-1)

    def __repr__(self) -> str:
        return (
            f"RandomIndex(data_ranges={self._data_ranges}, "
            f"index_counts={self._index_counts}, "
            f"ranges={tuple(t.rows for t in self._tables)})"
        )


__all__ = ['RandomIndex']
