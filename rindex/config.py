"""
Random Index Configuration
==========================

Declarative engine layout, loadable from YAML.

Example (rindex.yaml):
    seed: 74565
    data_dtype: int16
    index_dtype: uint16
    dimensions:
      - {data_range: 2048, index_count: 8, range: 10000}   # co-occurrence
      - {data_range: 32, index_count: 4, range: 1000}      # context

Usage:
    from rindex.config import load_config, build_engine

    config = load_config("rindex.yaml")
    ri = build_engine(config)
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Union
import logging

import numpy as np
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .engine import RandomIndex
from .fixed import check_data_dtype, check_index_dtype, dtype_limits
from .rng import DEFAULT_SEED, UniformSource
from .table import DEFAULT_MAX_DRAWS

logger = logging.getLogger(__name__)


class DimensionConfig(BaseModel):
    """One dimension of the distributional array."""

    data_range: int = Field(..., ge=1)    # Size of the dense array in this dimension
    index_count: int = Field(..., ge=2)   # Random indices per explicit index
    range: int = Field(0, ge=0)           # Explicit indices to pre-generate

    @field_validator("index_count")
    @classmethod
    def _even(cls, v: int) -> int:
        if v % 2:
            raise ValueError(f"index_count must be even, got {v}")
        return v

    @model_validator(mode="after")
    def _fewer_indices_than_range(self) -> "DimensionConfig":
        if self.index_count >= self.data_range:
            raise ValueError(
                f"index_count ({self.index_count}) must be less than "
                f"data_range ({self.data_range})"
            )
        return self


class EngineConfig(BaseModel):
    """Full engine layout and random source settings."""

    dimensions: List[DimensionConfig] = Field(..., min_length=1)
    seed: int = DEFAULT_SEED
    data_dtype: str = "int16"
    index_dtype: str = "uint16"
    max_draws: int = Field(DEFAULT_MAX_DRAWS, ge=1)

    @field_validator("data_dtype")
    @classmethod
    def _signed(cls, v: str) -> str:
        try:
            check_data_dtype(v)
        except TypeError as e:
            raise ValueError(f"Unknown dtype {v!r}") from e
        return v

    @field_validator("index_dtype")
    @classmethod
    def _unsigned(cls, v: str) -> str:
        try:
            check_index_dtype(v)
        except TypeError as e:
            raise ValueError(f"Unknown dtype {v!r}") from e
        return v

    @model_validator(mode="after")
    def _ranges_fit_index_type(self) -> "EngineConfig":
        _, hi = dtype_limits(np.dtype(self.index_dtype))
        for i, dim in enumerate(self.dimensions):
            if dim.data_range > hi:
                raise ValueError(
                    f"dimensions[{i}].data_range={dim.data_range} exceeds "
                    f"{self.index_dtype} maximum {hi}"
                )
        return self

    @property
    def data_ranges(self) -> List[int]:
        return [d.data_range for d in self.dimensions]

    @property
    def index_counts(self) -> List[int]:
        return [d.index_count for d in self.dimensions]


def load_config(path: Union[str, Path]) -> EngineConfig:
    """Load and validate an engine config from a YAML file."""
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    config = EngineConfig.model_validate(raw)
    logger.debug(f"Loaded engine config from {path}: {len(config.dimensions)} dims")
    return config


def build_engine(
    config: EngineConfig,
    source: Optional[UniformSource] = None,
) -> RandomIndex:
    """Construct a RandomIndex and grow every dimension to its configured range."""
    ri = RandomIndex(
        config.data_ranges,
        config.index_counts,
        source=source,
        seed=config.seed,
        data_dtype=config.data_dtype,
        index_dtype=config.index_dtype,
        max_draws=config.max_draws,
    )
    for dim, d in enumerate(config.dimensions):
        if d.range:
            ri.set_range(dim, d.range)
    return ri


__all__ = [
    'DimensionConfig',
    'EngineConfig',
    'load_config',
    'build_engine',
]
