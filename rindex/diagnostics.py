"""
Random Index Diagnostics - Capacity & Saturation Reporting
==========================================================

Introspection for a running engine:
- Memory footprint of distributional arrays and index tables
- Saturation events (clamped accumulator cells)
- Fraction of a buffer pinned at the element type's limits

Usage:
    from rindex.diagnostics import capacity_report, log_capacity

    report = capacity_report(ri, data=terms)
    log_capacity(report)
    if not report.is_healthy:
        ...  # rescale weights or widen the element type
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import json
import logging

import numpy as np

from .engine import RandomIndex
from .fixed import dtype_limits

logger = logging.getLogger(__name__)


@dataclass
class CapacityReport:
    """Snapshot of engine sizes and saturation."""
    dims: int
    data_ranges: List[int]
    index_counts: List[int]
    ranges: List[int]              # Rows generated per dimension
    data_bytes: int                # One distributional array
    index_bytes: int               # All random index tables
    dist_numel: int
    saturation: int
    saturated_fraction: Optional[float] = None

    violations: List[str] = field(default_factory=list)

    @property
    def is_healthy(self) -> bool:
        return not self.violations

    @property
    def summary(self) -> str:
        parts = [
            f"dims={self.dims}",
            f"data={self.data_bytes}B",
            f"index={self.index_bytes}B",
            f"saturation={self.saturation}",
        ]
        if self.saturated_fraction is not None:
            parts.append(f"pinned={self.saturated_fraction:.4%}")
        return ", ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dims": self.dims,
            "data_ranges": self.data_ranges,
            "index_counts": self.index_counts,
            "ranges": self.ranges,
            "data_bytes": self.data_bytes,
            "index_bytes": self.index_bytes,
            "dist_numel": self.dist_numel,
            "saturation": self.saturation,
            "saturated_fraction": self.saturated_fraction,
            "is_healthy": self.is_healthy,
            "violations": self.violations,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


def saturated_fraction(data: np.ndarray) -> float:
    """Fraction of cells sitting exactly at the dtype's min or max."""
    if data.size == 0:
        return 0.0
    lo, hi = dtype_limits(data.dtype)
    return float(np.count_nonzero((data == lo) | (data == hi))) / data.size


def capacity_report(ri: RandomIndex, data: Optional[np.ndarray] = None) -> CapacityReport:
    """Build a capacity report, optionally inspecting a buffer (or stack)."""
    report = CapacityReport(
        dims=ri.dims,
        data_ranges=list(ri.data_ranges),
        index_counts=list(ri.index_counts),
        ranges=[ri.range(d) for d in range(ri.dims)],
        data_bytes=ri.data_size(),
        index_bytes=ri.index_size(),
        dist_numel=ri.dist_numel,
        saturation=ri.saturation(),
    )

    if data is not None:
        report.saturated_fraction = saturated_fraction(data)

    if report.saturation > 0:
        report.violations.append(f"{report.saturation} saturation events")

    return report


def log_capacity(report: CapacityReport, logger: logging.Logger = logger) -> None:
    """Log a capacity report for monitoring."""
    if report.is_healthy:
        logger.info(f"Random index capacity: OK - {report.summary}")
    else:
        logger.warning(f"Random index capacity: SATURATED - {report.summary}")

    for d in range(report.dims):
        logger.debug(
            f"  dim {d}: data_range={report.data_ranges[d]}, "
            f"index_count={report.index_counts[d]}, range={report.ranges[d]}"
        )


__all__ = [
    'CapacityReport',
    'saturated_fraction',
    'capacity_report',
    'log_capacity',
]
