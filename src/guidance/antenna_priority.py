"""
===============================================================================
MISSION TELEMETRY REPLAY - Antenna Priority Selection
===============================================================================
Chooses which ground antenna should be treated as active at a simulation
index, given the antenna-availability time series.

The raw feed occasionally flips to another antenna for a sample or two
(momentary dropout or hand-over noise).  Following it literally makes the
displayed link flicker, so a switch is only accepted once the new antenna is
seen to persist:

    1. No history at index 0: take the raw value.
    2. Raw value unchanged from the previous sample: keep it.
    3. Raw value changed: sample the next ``look_ahead`` rows every
       ``look_ahead_step`` rows (offsets 1, 3, 5, ... 19 by default).  If any
       sampled row names a different antenna, the switch is noise and the
       previous antenna is kept; otherwise the switch is accepted.

Because only every other row is sampled, a second glitch falling on an even
offset is not seen.  This is a best-effort noise filter, not a guarantee.

Near the end of the table the look-ahead window is clamped to the rows that
exist; with no rows left to sample, the switch is accepted.
===============================================================================
"""

import logging
from typing import Sequence

from core.exceptions import MalformedRowError, TelemetryIndexError

logger = logging.getLogger(__name__)

DEFAULT_LOOK_AHEAD = 20
DEFAULT_LOOK_AHEAD_STEP = 2
DEFAULT_NAME_COLUMN = 1


class AntennaPrioritySelector:
    """
    Hysteresis filter over the antenna-availability table.

    Args:
        look_ahead:      Furthest future offset inspected when a switch occurs.
        look_ahead_step: Stride between inspected offsets, starting at 1.
        name_column:     Column holding the antenna identifier.
    """

    def __init__(
        self,
        look_ahead: int = DEFAULT_LOOK_AHEAD,
        look_ahead_step: int = DEFAULT_LOOK_AHEAD_STEP,
        name_column: int = DEFAULT_NAME_COLUMN,
    ) -> None:
        if look_ahead < 0:
            raise ValueError(f"look_ahead must be non-negative, got {look_ahead}")
        if look_ahead_step < 1:
            raise ValueError(f"look_ahead_step must be at least 1, got {look_ahead_step}")
        if name_column < 0:
            raise ValueError(f"name_column must be non-negative, got {name_column}")
        self.look_ahead = look_ahead
        self.look_ahead_step = look_ahead_step
        self.name_column = name_column

    def select(self, table: Sequence[Sequence[str]], index: int) -> str:
        """
        Return the antenna to prioritize at ``index``.

        Args:
            table: Antenna-availability rows, one per simulation index.
            index: Current simulation index.

        Returns:
            The antenna identifier.

        Raises:
            TelemetryIndexError: If ``index`` has no row in ``table``.
            MalformedRowError:   If an inspected row lacks the name column.
        """
        if index < 0 or index >= len(table):
            raise TelemetryIndexError(
                f"Index {index} outside antenna availability table of {len(table)} rows"
            )

        current = self._antenna_at(table, index)
        if index <= 0:
            return current

        previous = self._antenna_at(table, index - 1)
        if previous == current:
            return previous

        last_row = len(table) - 1
        for offset in range(1, self.look_ahead + 1, self.look_ahead_step):
            future_index = index + offset
            if future_index > last_row:
                break
            future = self._antenna_at(table, future_index)
            if future != current:
                logger.debug(
                    "Index %d: switch %s -> %s rejected, %s seen at +%d",
                    index, previous, current, future, offset,
                )
                return previous

        logger.debug("Index %d: switch %s -> %s accepted", index, previous, current)
        return current

    def _antenna_at(self, table: Sequence[Sequence[str]], row_index: int) -> str:
        row = table[row_index]
        if len(row) <= self.name_column:
            raise MalformedRowError(
                f"Antenna row {row_index} has {len(row)} field(s); "
                f"column {self.name_column} is required",
                row_index=row_index,
                column=self.name_column,
            )
        return row[self.name_column]

    def __repr__(self) -> str:
        return (
            f"AntennaPrioritySelector(look_ahead={self.look_ahead}, "
            f"step={self.look_ahead_step}, column={self.name_column})"
        )
