"""
Random Index Engine Tests - Encode / Decode Invariants
======================================================

Tests that the engine satisfies:
- Layout bookkeeping (unroll, data_numel, dist_numel, byte sizes)
- Single writes decode exactly; superposed writes decode with bounded interference
- Saturation clamps at the element limits and is counted per cell
- Preconditions fail before any mutation
- Same seed + same call sequence -> identical tables and outputs
"""

import pytest
import numpy as np

from rindex import AVERAGE, RandomIndex, RandomSource
from rindex.errors import PreconditionError


class CountingSource:
    """Draws 0, 1, 2, ... modulo the requested bound."""

    def __init__(self):
        self.n = 0

    def next_uniform_u32(self, upper_bound: int) -> int:
        value = self.n % upper_bound
        self.n += 1
        return value


@pytest.fixture
def ri() -> RandomIndex:
    engine = RandomIndex([64, 16], [8, 4], seed=7)
    engine.set_range(0, 20)
    engine.set_range(1, 10)
    return engine


# =============================================================================
# Tests: Construction and Layout
# =============================================================================

class TestLayout:

    def test_three_dim_layout(self):
        ri = RandomIndex([2048, 32, 10], [8, 4, 2])
        assert ri.dims == 3
        assert ri.unroll == (8, 2, 1)
        assert ri.data_numel == 2048 * 32 * 10
        assert ri.dist_numel == 64
        assert ri.data_size() == 2048 * 32 * 10 * 2

    def test_tables_start_empty(self):
        ri = RandomIndex([2048, 32], [8, 4])
        assert ri.range(0) == 0
        assert ri.range(1) == 0
        assert ri.index_size() == 0
        assert ri.saturation() == 0

    def test_accessors(self, ri):
        assert ri.numrind(0) == 8
        assert ri.numrind(1) == 4
        assert ri.datarange(0) == 64
        assert ri.datarange(1) == 16
        assert ri.index_size() == (20 * 8 + 10 * 4) * 2

    @pytest.mark.parametrize("data_ranges,index_counts", [
        ([], []),
        ([64, 16], [8]),
        ([64], [7]),
        ([8], [8]),
    ])
    def test_rejects_bad_construction(self, data_ranges, index_counts):
        with pytest.raises(PreconditionError):
            RandomIndex(data_ranges, index_counts)

    def test_rejects_unsigned_data_type(self):
        with pytest.raises(PreconditionError):
            RandomIndex([64], [8], data_dtype=np.uint16)

    def test_allocate(self, ri):
        single = ri.allocate()
        stack = ri.allocate(count=3)
        assert single.shape == (64 * 16,)
        assert stack.shape == (3, 64 * 16)
        assert single.dtype == np.int16
        assert not stack.any()


class TestSetRange:

    def test_returns_rows(self, ri):
        assert ri.set_range(0, 30) == 30
        assert ri.range(0) == 30

    def test_never_shrinks(self, ri):
        before = ri.table(0).to_array()
        assert ri.set_range(0, 5) == 20
        assert np.array_equal(ri.table(0).to_array(), before)

    def test_bad_dimension(self, ri):
        with pytest.raises(PreconditionError):
            ri.set_range(2, 10)
        with pytest.raises(PreconditionError):
            ri.range(-1)

    def test_shared_stream_order(self):
        ri = RandomIndex([64, 16], [8, 4], source=CountingSource())
        ri.set_range(0, 2)
        ri.set_range(1, 1)
        assert ri.table(0).row(0).tolist() == list(range(8))
        assert ri.table(0).row(1).tolist() == list(range(8, 16))
        assert ri.table(1).row(0).tolist() == [0, 1, 2, 3]


# =============================================================================
# Tests: Encode / Decode
# =============================================================================

class TestEncodeDecode:

    def test_single_write_decodes_exactly(self, ri):
        data = ri.allocate()
        ri.encode(data, (3, 7), 5)
        assert ri.decode(data, (3, 7)) == 5.0

    def test_touches_dist_numel_sign_balanced_cells(self, ri):
        data = ri.allocate()
        ri.encode(data, (3, 7), 5)
        assert np.count_nonzero(data) == ri.dist_numel
        assert np.all(np.abs(data[data != 0]) == 5)
        assert int(data.astype(np.int64).sum()) == 0

    def test_negative_weight(self, ri):
        data = ri.allocate()
        ri.encode(data, (0, 0), -9)
        assert ri.decode(data, (0, 0)) == -9.0

    def test_repeated_writes_accumulate(self, ri):
        data = ri.allocate()
        for _ in range(4):
            ri.encode(data, (2, 2), 3)
        assert ri.decode(data, (2, 2)) == 12.0

    def test_zero_weight_is_noop(self, ri):
        data = ri.allocate()
        ri.encode(data, (2, 2), 0)
        assert not data.any()
        assert ri.saturation() == 0

    def test_superposition_interference_is_bounded(self, ri):
        data = ri.allocate()
        ri.encode(data, (1, 4), 7)
        ri.encode(data, (2, 5), 100)
        assert abs(ri.decode(data, (1, 4)) - 7) <= 100
        assert abs(ri.decode(data, (2, 5)) - 100) <= 7

    def test_interference_shrinks_with_larger_range(self):
        ri = RandomIndex([4096, 512], [8, 4], seed=3)
        ri.set_range(0, 200)
        ri.set_range(1, 50)
        data = ri.allocate()
        rng = np.random.default_rng(0)
        for _ in range(50):
            ri.encode(data, (int(rng.integers(1, 200)), int(rng.integers(1, 50))), 10)
        ri.encode(data, (0, 0), 10)
        assert abs(ri.decode(data, (0, 0)) - 10) < 2.0

    def test_unwritten_coordinate_decodes_to_zero(self, ri):
        data = ri.allocate()
        assert ri.decode(data, (5, 5)) == 0.0

    def test_shaped_buffer(self, ri):
        data = ri.allocate().reshape(ri.data_ranges)
        ri.encode(data, (3, 7), 5)
        assert ri.decode(data, (3, 7)) == 5.0

    def test_stacked_buffers_are_independent(self, ri):
        terms = ri.allocate(count=2)
        ri.encode(terms[1], (3, 7), 5)
        assert not terms[0].any()
        assert ri.decode(terms[1], (3, 7)) == 5.0


class TestConcreteScenario:

    def test_two_dim_scenario(self):
        ri = RandomIndex([10000, 1000], [8, 4])
        ri.set_range(0, 10)
        ri.set_range(1, 10)
        data = ri.allocate()

        ri.encode(data, (3, 7), 5)
        first = ri.decode(data, (3, 7))

        assert first > 0
        assert first == pytest.approx(5.0)
        assert ri.decode(data, (3, 7)) == first


# =============================================================================
# Tests: Saturation
# =============================================================================

class TestSaturation:

    def test_overflow_clamps_and_counts(self, ri):
        data = ri.allocate()
        ri.encode(data, (3, 7), 30000)
        assert ri.saturation() == 0

        ri.encode(data, (3, 7), 30000)
        assert ri.saturation() == ri.dist_numel

        touched = data[data != 0]
        assert touched.size == ri.dist_numel
        assert np.all((touched == 32767) | (touched == -32768))

    def test_saturated_decode_int8(self):
        ri = RandomIndex([64, 16], [8, 4], data_dtype=np.int8)
        ri.set_range(0, 5)
        ri.set_range(1, 5)
        data = ri.allocate()

        ri.encode(data, (1, 1), 100)
        ri.encode(data, (1, 1), 100)

        assert ri.saturation() == ri.dist_numel
        assert ri.decode(data, (1, 1)) == 127.5

    def test_counter_is_cumulative_across_buffers(self, ri):
        a, b = ri.allocate(), ri.allocate()
        for data in (a, b):
            ri.encode(data, (0, 0), 20000)
            ri.encode(data, (0, 0), 20000)
        assert ri.saturation() == 2 * ri.dist_numel


# =============================================================================
# Tests: Preconditions
# =============================================================================

class TestPreconditions:

    def test_ungrown_row_fails_without_mutation(self, ri):
        data = ri.allocate()
        with pytest.raises(PreconditionError):
            ri.encode(data, (20, 0), 5)
        assert not data.any()

    def test_unset_range_fails(self):
        ri = RandomIndex([64, 16], [8, 4])
        ri.set_range(0, 10)
        with pytest.raises(PreconditionError):
            ri.encode(ri.allocate(), (0, 0), 1)

    def test_average_not_allowed_in_encode(self, ri):
        with pytest.raises(PreconditionError):
            ri.encode(ri.allocate(), (AVERAGE, 0), 1)
        with pytest.raises(PreconditionError):
            ri.decode(ri.allocate(), (0, AVERAGE))

    @pytest.mark.parametrize("weight", [40000, -40000, 1.5, True])
    def test_bad_weight(self, ri, weight):
        data = ri.allocate()
        with pytest.raises(PreconditionError):
            ri.encode(data, (0, 0), weight)
        assert not data.any()

    def test_wrong_dtype(self, ri):
        with pytest.raises(PreconditionError):
            ri.encode(np.zeros(ri.data_numel, dtype=np.int32), (0, 0), 1)

    def test_wrong_size(self, ri):
        with pytest.raises(PreconditionError):
            ri.decode(np.zeros(ri.data_numel - 1, dtype=np.int16), (0, 0))

    def test_non_contiguous(self, ri):
        strided = np.zeros(2 * ri.data_numel, dtype=np.int16)[::2]
        with pytest.raises(PreconditionError):
            ri.encode(strided, (0, 0), 1)

    def test_read_only_buffer(self, ri):
        data = ri.allocate()
        data.flags.writeable = False
        with pytest.raises(PreconditionError):
            ri.encode(data, (0, 0), 1)
        assert ri.decode(data, (0, 0)) == 0.0

    def test_not_an_array(self, ri):
        with pytest.raises(PreconditionError):
            ri.decode([0] * ri.data_numel, (0, 0))


# =============================================================================
# Tests: Determinism
# =============================================================================

class TestDeterminism:

    @staticmethod
    def _drive(ri: RandomIndex):
        ri.set_range(0, 30)
        ri.set_range(1, 12)
        data = ri.allocate()
        for i in range(30):
            ri.encode(data, (i, i % 12), i - 15)
        return data

    def test_same_seed_identical_everything(self):
        a = RandomIndex([128, 32], [8, 4], source=RandomSource(99))
        b = RandomIndex([128, 32], [8, 4], source=RandomSource(99))
        da, db = self._drive(a), self._drive(b)

        for d in range(2):
            assert np.array_equal(a.table(d).to_array(), b.table(d).to_array())
        assert np.array_equal(da, db)
        assert a.decode(da, (4, 4)) == b.decode(db, (4, 4))
        assert a.cosa(da, (4, AVERAGE), da, (5, AVERAGE)) == \
            b.cosa(db, (4, AVERAGE), db, (5, AVERAGE))

    def test_seed_argument_matches_explicit_source(self):
        a = RandomIndex([128, 32], [8, 4], seed=5)
        b = RandomIndex([128, 32], [8, 4], source=RandomSource(5))
        a.set_range(0, 10)
        b.set_range(0, 10)
        assert np.array_equal(a.table(0).to_array(), b.table(0).to_array())
