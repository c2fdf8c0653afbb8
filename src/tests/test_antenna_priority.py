"""
===============================================================================
MISSION TELEMETRY REPLAY - Antenna Priority Test Suite
===============================================================================
Tests for the antenna hysteresis filter: stable feeds, single-sample glitches,
sustained switches, the every-other-row look-ahead cadence, look-ahead
clamping at the end of the table, and malformed or out-of-range input.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest

from core.exceptions import MalformedRowError, TelemetryIndexError
from guidance.antenna_priority import AntennaPrioritySelector


def make_table(names):
    """Build antenna availability rows (time, antenna) from a name sequence."""
    return tuple((str(i * 60), name) for i, name in enumerate(names))


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def selector():
    """Return a selector with the standard 20-row, step-2 look-ahead."""
    return AntennaPrioritySelector()


# =============================================================================
# Test: Stable and history-free cases
# =============================================================================

class TestNoSwitch:
    """Indices where no switch is in progress."""

    def test_index_zero_returns_raw_value(self, selector):
        table = make_table(["X"] + ["Y"] * 40)
        assert selector.select(table, 0) == "X"

    def test_index_zero_ignores_future_rows(self, selector):
        table = make_table(["X", "Y", "Z", "Y"])
        assert selector.select(table, 0) == "X"

    def test_stable_feed(self, selector):
        table = make_table(["A"] * 50)
        for index in range(50):
            assert selector.select(table, index) == "A"

    def test_unchanged_from_previous_returns_previous(self, selector):
        # Row 10 repeats row 9 even though a switch is coming
        table = make_table(["A"] * 9 + ["B"] * 2 + ["C"] * 30)
        assert selector.select(table, 10) == "B"

    def test_single_row_table(self, selector):
        assert selector.select(make_table(["A"]), 0) == "A"


# =============================================================================
# Test: Switch handling
# =============================================================================

class TestSwitch:
    """Indices where the raw antenna differs from the previous sample."""

    def test_single_sample_glitch_suppressed(self, selector):
        table = make_table(["A", "A", "A", "B"] + ["A"] * 40)
        assert selector.select(table, 3) == "A"

    def test_sustained_switch_accepted(self, selector):
        table = make_table(["A", "A", "A"] + ["B"] * 40)
        assert selector.select(table, 3) == "B"

    def test_switch_exactly_at_horizon_accepted(self, selector):
        # B persists through offset 19, the last inspected offset
        table = make_table(["A", "A", "A"] + ["B"] * 20 + ["C"] * 10)
        assert selector.select(table, 3) == "B"

    def test_difference_at_last_inspected_offset_rejects(self, selector):
        names = ["A", "A", "A"] + ["B"] * 40
        names[3 + 19] = "C"
        assert selector.select(make_table(names), 3) == "A"

    def test_difference_beyond_horizon_ignored(self, selector):
        names = ["A", "A", "A"] + ["B"] * 40
        names[3 + 21] = "C"
        assert selector.select(make_table(names), 3) == "B"

    def test_even_offsets_are_not_inspected(self, selector):
        # A second glitch at offset 2 falls between sampled rows
        names = ["A", "A", "A"] + ["B"] * 40
        names[3 + 2] = "A"
        assert selector.select(make_table(names), 3) == "B"

    def test_odd_offset_glitch_is_seen(self, selector):
        names = ["A", "A", "A"] + ["B"] * 40
        names[3 + 5] = "A"
        assert selector.select(make_table(names), 3) == "A"

    def test_rejected_switch_returns_previous_not_future(self, selector):
        table = make_table(["A", "A", "B", "C"] + ["C"] * 30)
        assert selector.select(table, 2) == "A"

    def test_compares_against_raw_previous_sample(self, selector):
        # Recovery from a glitch shortly before a real hand-over looks like a
        # transient switch, so the glitch value is returned
        table = make_table(["A"] * 5 + ["B"] + ["A"] * 10 + ["C"] * 30)
        assert selector.select(table, 6) == "B"

    def test_step_one_inspects_every_row(self):
        selector = AntennaPrioritySelector(look_ahead_step=1)
        names = ["A", "A", "A"] + ["B"] * 40
        names[3 + 2] = "A"
        assert selector.select(make_table(names), 3) == "A"

    def test_zero_look_ahead_accepts_every_switch(self):
        selector = AntennaPrioritySelector(look_ahead=0)
        table = make_table(["A", "A", "A", "B"] + ["A"] * 10)
        assert selector.select(table, 3) == "B"


# =============================================================================
# Test: End of table
# =============================================================================

class TestLookAheadClamp:
    """Look-ahead window near the last row."""

    def test_switch_on_last_row_accepted(self, selector):
        table = make_table(["A", "A", "B"])
        assert selector.select(table, 2) == "B"

    def test_available_rows_still_inspected(self, selector):
        table = make_table(["A", "A", "B", "A"])
        assert selector.select(table, 2) == "A"

    def test_missing_rows_not_read(self, selector):
        # Offsets 1 and 3 exist; 5..19 are past the end
        table = make_table(["A", "A", "B", "B", "C", "B"])
        assert selector.select(table, 2) == "B"


# =============================================================================
# Test: Invalid input
# =============================================================================

class TestInvalidInput:
    """Out-of-range indices, malformed rows and bad parameters."""

    def test_index_past_end(self, selector):
        with pytest.raises(TelemetryIndexError):
            selector.select(make_table(["A", "A"]), 2)

    def test_negative_index(self, selector):
        with pytest.raises(TelemetryIndexError):
            selector.select(make_table(["A", "A"]), -1)

    def test_empty_table(self, selector):
        with pytest.raises(TelemetryIndexError):
            selector.select((), 0)

    def test_index_error_is_builtin_index_error(self, selector):
        with pytest.raises(IndexError):
            selector.select((), 0)

    def test_row_missing_name_column(self, selector):
        table = (("0", "A"), ("60",))
        with pytest.raises(MalformedRowError) as excinfo:
            selector.select(table, 1)
        assert excinfo.value.row_index == 1
        assert excinfo.value.column == 1

    def test_malformed_previous_row(self, selector):
        table = (("0",), ("60", "A"))
        with pytest.raises(MalformedRowError):
            selector.select(table, 1)

    def test_custom_name_column(self):
        selector = AntennaPrioritySelector(name_column=2)
        table = (("0", "ignored", "A"), ("60", "ignored", "A"))
        assert selector.select(table, 1) == "A"

    @pytest.mark.parametrize("kwargs", [
        {"look_ahead": -1},
        {"look_ahead_step": 0},
        {"name_column": -1},
    ])
    def test_invalid_parameters(self, kwargs):
        with pytest.raises(ValueError):
            AntennaPrioritySelector(**kwargs)
