"""
Random Index Table - One Dimension of Random Indexing
=====================================================

Each explicit index value (a table row) is assigned ``index_count``
distinct pseudo-random positions in ``[0, data_range)``. The first half of
a row carries positive sign, the second half negative sign, so every row
is sign-balanced.

Rows are generated lazily: ``grow(n)`` appends rows until the table covers
explicit indices ``[0, n)``. Growth never shrinks a table or rewrites an
existing row.
"""

from __future__ import annotations

from typing import Optional
import logging
import numpy as np

from .errors import PreconditionError, TableGenerationError
from .fixed import INDEX_DTYPE, check_index_dtype, dtype_limits
from .rng import UniformSource

logger = logging.getLogger(__name__)

DEFAULT_MAX_DRAWS = 1 << 20  # Per cell, before giving up on a unique index


class IndexTable:
    """
    Growable table of per-row unique random indices.

    Args:
        data_range: Size of the distributional array in this dimension
        index_count: Random indices per row (even, < data_range)
        source: Uniform random source shared with the owning engine
        dtype: Unsigned index element type
        max_draws: Rejection sampling cap per cell
    """

    def __init__(
        self,
        data_range: int,
        index_count: int,
        source: UniformSource,
        dtype=INDEX_DTYPE,
        max_draws: int = DEFAULT_MAX_DRAWS,
    ):
        dtype = check_index_dtype(dtype)
        _, hi = dtype_limits(dtype)

        if data_range < 1 or data_range > hi:
            raise PreconditionError(
                f"data_range must be in [1, {hi}] for {dtype}, got {data_range}"
            )
        if index_count < 2 or index_count % 2:
            raise PreconditionError(f"index_count must be even and >= 2, got {index_count}")
        if index_count >= data_range:
            raise PreconditionError(
                f"index_count ({index_count}) must be less than data_range ({data_range})"
            )
        if max_draws < 1:
            raise PreconditionError(f"max_draws must be positive, got {max_draws}")

        self.data_range = int(data_range)
        self.index_count = int(index_count)
        self.dtype = dtype
        self.max_draws = max_draws
        self._source = source
        self._table = np.empty((0, self.index_count), dtype=dtype)

    # -------------------------------------------------------------------------
    # Shape
    # -------------------------------------------------------------------------

    @property
    def rows(self) -> int:
        return self._table.shape[0]

    @property
    def cols(self) -> int:
        return self.index_count

    @property
    def num_positive(self) -> int:
        """Leading columns that carry positive sign."""
        return self.index_count >> 1

    def size(self) -> int:
        """Number of table cells (rows * index_count)."""
        return self._table.size

    @property
    def nbytes(self) -> int:
        return self._table.nbytes

    # -------------------------------------------------------------------------
    # Growth
    # -------------------------------------------------------------------------

    def grow(self, target_rows: int) -> int:
        """
        Ensure the table has at least ``target_rows`` rows.

        New rows are filled by rejection sampling: draw a position, scan the
        positions already placed in the row, redraw on collision.

        Returns:
            Number of rows after the call (never less than before)
        """
        if target_rows <= self.rows:
            return self.rows

        new = np.empty((target_rows - self.rows, self.index_count), dtype=self.dtype)
        for r in range(new.shape[0]):
            row = new[r]
            for j in range(self.index_count):
                row[j] = self._draw_unique(row, j)

        # Only publish once every new row is complete
        self._table = np.concatenate([self._table, new], axis=0)
        logger.debug(
            f"IndexTable(range={self.data_range}, cols={self.index_count}) "
            f"grown to {self.rows} rows"
        )
        return self.rows

    def _draw_unique(self, row: np.ndarray, filled: int) -> int:
        taken = row[:filled].tolist()
        for _ in range(self.max_draws):
            rnd = self._source.next_uniform_u32(self.data_range)
            if rnd not in taken:
                return rnd
        raise TableGenerationError(
            f"No unique index after {self.max_draws} draws "
            f"(data_range={self.data_range}, index_count={self.index_count})"
        )

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def item(self, row: int, col: int) -> int:
        """Random index stored at (row, col)."""
        if not 0 <= row < self.rows:
            raise PreconditionError(
                f"Row {row} not generated (table has {self.rows} rows)"
            )
        if not 0 <= col < self.index_count:
            raise PreconditionError(f"Column {col} out of range [0, {self.index_count})")
        return int(self._table[row, col])

    def row(self, row: int) -> np.ndarray:
        """Read-only view of one row."""
        if not 0 <= row < self.rows:
            raise PreconditionError(
                f"Row {row} not generated (table has {self.rows} rows)"
            )
        view = self._table[row]
        view.flags.writeable = False
        return view

    def to_array(self, rows: Optional[int] = None) -> np.ndarray:
        """Copy of the first ``rows`` rows (all by default)."""
        return self._table[:rows].copy()

    def __repr__(self) -> str:
        return (
            f"IndexTable(data_range={self.data_range}, "
            f"index_count={self.index_count}, rows={self.rows})"
        )


__all__ = [
    'DEFAULT_MAX_DRAWS',
    'IndexTable',
]
