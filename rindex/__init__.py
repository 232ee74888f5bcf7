"""
rindex - Random Indexing of N-Dimensional Arrays
================================================

Encodes sparse, high-dimensional, multi-way distributional data (e.g.
term x co-occurrence x context counts) into fixed-size dense arrays by
pseudo-random superposition, and recovers entries or cosine similarities
without materializing the sparse tensor.

This package provides:
- Lazily grown, per-row unique random index tables
- Saturating fixed-point encode and averaging decode
- Cosine estimation with exact marginalization of chosen dimensions
- YAML/pydantic configuration and capacity diagnostics

Canonical layout:
- Data elements: int16, saturating
- Index elements: uint16
- Default seed: 0x12345 (repeatable experiments)

References:
- Kanerva, Kristoferson, Holst (2000): Random indexing of text samples
- Sandin, Emruli, Sahlgren (2017): Random indexing of multidimensional data

Usage:
    from rindex import RandomIndex, AVERAGE

    ri = RandomIndex([2048, 32], [8, 4])
    ri.set_range(0, 10000)
    ri.set_range(1, 1000)

    data = ri.allocate()
    ri.encode(data, (3, 7), 5)
    ri.decode(data, (3, 7))                         # 5.0
    ri.cosa(data, (AVERAGE, 7), data, (AVERAGE, 7))  # 1.0
"""

__version__ = "1.0.0"

from .errors import (
    RandomIndexError,
    PreconditionError,
    TableGenerationError,
    ZeroNormError,
)

from .fixed import (
    DATA_DTYPE,
    INDEX_DTYPE,
    dtype_limits,
    saturating_add,
)

from .rng import DEFAULT_SEED, UniformSource, RandomSource

from .coords import AVERAGE, Concrete, Marginalize, flatten

from .table import IndexTable

from .engine import RandomIndex

from .config import DimensionConfig, EngineConfig, load_config, build_engine

from .diagnostics import CapacityReport, capacity_report, log_capacity

__all__ = [
    '__version__',
    # Errors
    'RandomIndexError',
    'PreconditionError',
    'TableGenerationError',
    'ZeroNormError',
    # Element types
    'DATA_DTYPE',
    'INDEX_DTYPE',
    'dtype_limits',
    'saturating_add',
    # Random source
    'DEFAULT_SEED',
    'UniformSource',
    'RandomSource',
    # Coordinates
    'AVERAGE',
    'Concrete',
    'Marginalize',
    'flatten',
    # Engine
    'IndexTable',
    'RandomIndex',
    # Config
    'DimensionConfig',
    'EngineConfig',
    'load_config',
    'build_engine',
    # Diagnostics
    'CapacityReport',
    'capacity_report',
    'log_capacity',
]
