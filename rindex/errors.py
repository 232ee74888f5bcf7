"""
Random Index Errors
===================

Exception hierarchy for the random indexing engine.

Saturation of the fixed-point accumulator is not an error; it is counted
by the engine and reported through ``RandomIndex.saturation()``.
"""


class RandomIndexError(Exception):
    """Base class for all random indexing failures."""


class PreconditionError(RandomIndexError, ValueError):
    """Malformed arguments: bad ranges, odd index counts, out-of-range
    coordinates, tables not grown far enough, mismatched Average flags."""


class TableGenerationError(RandomIndexError, RuntimeError):
    """Rejection sampling gave up before finding a unique random index."""


class ZeroNormError(RandomIndexError, ArithmeticError):
    """Cosine similarity requested where one operand has zero norm."""


__all__ = [
    'RandomIndexError',
    'PreconditionError',
    'TableGenerationError',
    'ZeroNormError',
]
