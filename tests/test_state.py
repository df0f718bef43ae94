"""Tests for ReservoirState creation, export and restore."""

from __future__ import annotations

import numpy as np
import pytest

from reservoir_sampler.exceptions import (
    ConfigurationError,
    InternalConsistencyFault,
    ShapeMismatchError,
)
from reservoir_sampler.index import UNASSIGNED
from reservoir_sampler.ingest import BatchIngest
from reservoir_sampler.rng.numpy_source import NumpyRandomSource
from reservoir_sampler.rng.scripted import ScriptedRandomSource
from reservoir_sampler.state import ReservoirState


class TestEmpty:
    def test_fresh_state(self) -> None:
        state = ReservoirState.empty(3)
        assert state.reservoir is None
        assert state.occupied == 0
        assert state.visit_count == 0
        assert state.key_tracking is False
        assert state.position_map is None
        assert state.slot_owners is None

    def test_fresh_keyed_state_has_unassigned_owners(self) -> None:
        state = ReservoirState.empty(3, key_tracking=True)
        assert state.key_tracking is True
        assert state.position_map == {}
        assert state.slot_owners.tolist() == [UNASSIGNED] * 3

    @pytest.mark.parametrize("capacity", [0, -5])
    def test_non_positive_capacity_raises(self, capacity: int) -> None:
        with pytest.raises(ConfigurationError):
            ReservoirState.empty(capacity)

    def test_reservoir_view_is_read_only(self) -> None:
        state = ReservoirState.empty(2)
        BatchIngest(2).process(state, np.ones((2, 2)), ScriptedRandomSource([]))
        with pytest.raises(ValueError):
            state.reservoir[0, 0] = 5.0


class TestRoundTrip:
    """to_arrays() output restores an equivalent state."""

    def test_keyed_round_trip_continues_identically(self) -> None:
        rows = np.arange(20, dtype=np.int32).reshape(10, 2)
        ids = list(range(100, 110))

        original = ReservoirState.empty(4, key_tracking=True)
        ingest = BatchIngest(4, key_tracking=True)
        ingest.process(original, rows[:6], NumpyRandomSource(seed=3), object_ids=ids[:6])

        restored = ReservoirState.from_arrays(**original.to_arrays())
        np.testing.assert_array_equal(restored.reservoir, original.reservoir)
        assert restored.visit_count == original.visit_count
        assert restored.position_map == original.position_map

        ingest.process(original, rows[6:], NumpyRandomSource(seed=4), object_ids=ids[6:])
        ingest.process(restored, rows[6:], NumpyRandomSource(seed=4), object_ids=ids[6:])
        np.testing.assert_array_equal(restored.reservoir, original.reservoir)
        assert restored.position_map == original.position_map

    def test_unkeyed_round_trip(self) -> None:
        original = ReservoirState.empty(3)
        BatchIngest(3).process(original, np.ones((2, 5)), ScriptedRandomSource([]))
        arrays = original.to_arrays()

        assert arrays["slot_owners"] is None
        assert arrays["visit_count"].shape == ()
        restored = ReservoirState.from_arrays(**arrays)
        assert restored.occupied == 2
        assert restored.key_tracking is False

    def test_never_fed_state_round_trips(self) -> None:
        restored = ReservoirState.from_arrays(**ReservoirState.empty(2).to_arrays())
        assert restored.reservoir is None
        assert restored.visit_count == 0

    def test_adopted_shape_round_trips(self) -> None:
        original = ReservoirState.empty(2)
        BatchIngest(2).process(original, np.empty((0, 3), dtype=np.uint8), ScriptedRandomSource([]))
        restored = ReservoirState.from_arrays(**original.to_arrays())
        assert restored.reservoir.shape == (0, 3)
        assert restored.reservoir.dtype == np.uint8

    def test_exported_arrays_are_copies(self) -> None:
        state = ReservoirState.empty(2, key_tracking=True)
        BatchIngest(2, key_tracking=True).process(
            state, np.zeros((1, 2)), ScriptedRandomSource([]), object_ids=[7]
        )
        arrays = state.to_arrays()
        arrays["reservoir"][0, 0] = 9.0
        arrays["slot_owners"][0] = 8
        assert state.reservoir[0, 0] == 0.0
        assert state.position_map == {7: 0}


class TestFromArraysValidation:
    def test_too_many_rows(self) -> None:
        with pytest.raises(ConfigurationError):
            ReservoirState.from_arrays(2, reservoir=np.zeros((3, 1)), visit_count=3)

    def test_rows_must_match_visit_count(self) -> None:
        with pytest.raises(ConfigurationError):
            ReservoirState.from_arrays(4, reservoir=np.zeros((2, 1)), visit_count=3)

    def test_full_reservoir_with_large_visit_count(self) -> None:
        state = ReservoirState.from_arrays(2, reservoir=np.zeros((2, 1)), visit_count=50)
        assert state.visit_count == 50
        assert state.occupied == 2

    def test_scalar_reservoir_raises(self) -> None:
        with pytest.raises(ShapeMismatchError):
            ReservoirState.from_arrays(2, reservoir=np.float64(1.0), visit_count=1)

    def test_vector_visit_count_raises(self) -> None:
        with pytest.raises(ShapeMismatchError):
            ReservoirState.from_arrays(2, reservoir=np.zeros((1, 1)), visit_count=np.array([1]))

    def test_negative_visit_count_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            ReservoirState.from_arrays(2, visit_count=-1)

    def test_owner_shape_must_match_capacity(self) -> None:
        with pytest.raises(ConfigurationError):
            ReservoirState.from_arrays(
                3, reservoir=np.zeros((1, 1)), visit_count=1, slot_owners=[5, UNASSIGNED]
            )

    def test_unoccupied_slot_with_owner_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            ReservoirState.from_arrays(
                3, reservoir=np.zeros((1, 1)), visit_count=1, slot_owners=[5, 6, UNASSIGNED]
            )

    def test_duplicate_owner_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            ReservoirState.from_arrays(
                2, reservoir=np.zeros((2, 1)), visit_count=2, slot_owners=[5, 5]
            )

    def test_position_map_must_invert_owners(self) -> None:
        with pytest.raises(InternalConsistencyFault):
            ReservoirState.from_arrays(
                2,
                reservoir=np.zeros((2, 1)),
                visit_count=2,
                slot_owners=[5, 6],
                position_map={5: 1, 6: 0},
            )

    def test_position_map_without_owners_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            ReservoirState.from_arrays(2, position_map={})

    def test_owners_rebuild_position_map(self) -> None:
        state = ReservoirState.from_arrays(
            3, reservoir=np.zeros((2, 1)), visit_count=2, slot_owners=[11, 12, UNASSIGNED]
        )
        assert state.position_map == {11: 0, 12: 1}
