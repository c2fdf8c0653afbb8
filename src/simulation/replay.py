"""
===============================================================================
MISSION TELEMETRY REPLAY - Replay Driver
===============================================================================
Feeds a non-decreasing simulation index sequence into a TelemetryCoordinator
and records the derived state at every tick into a pandas DataFrame for
post-run inspection or export.  Stands in for the interactive simulation
clock when replaying from the command line.
===============================================================================
"""

import logging
import time
from typing import Any, Dict, List, Optional

import pandas as pd

from simulation.telemetry_coordinator import StageUpdated, TelemetryCoordinator, TelemetryFault

logger = logging.getLogger(__name__)

TELEMETRY_COLUMNS = ['index', 'stage', 'stage_start_index', 'antenna']


class ReplayDriver:
    """
    Sequential index source for a started TelemetryCoordinator.

    Parameters
    ----------
    coordinator : TelemetryCoordinator
        Coordinator to drive.  Must already be started.
    start : int
        First index replayed.
    stop : int, optional
        Index at which the replay stops (exclusive).  Defaults to the number
        of rows in the antenna availability table.
    step : int
        Index increment per tick.

    Attributes
    ----------
    telemetry : list of dict
        One record per tick of the most recent :meth:`run`.
    transitions : list of dict
        Stage changes observed through StageUpdated events.
    faults : list of TelemetryFault
        Diagnostics published while replaying.
    """

    def __init__(self, coordinator: TelemetryCoordinator, start: int = 0,
                 stop: Optional[int] = None, step: int = 1) -> None:
        if step < 1:
            raise ValueError(f"step must be at least 1, got {step}")
        if start < 0:
            raise ValueError(f"start must be non-negative, got {start}")
        self.coordinator = coordinator
        self.start = start
        self.stop = stop
        self.step = step

        self.telemetry: List[Dict[str, Any]] = []
        self.transitions: List[Dict[str, Any]] = []
        self.faults: List[TelemetryFault] = []
        self._current_index: Optional[int] = None

    def run(self) -> pd.DataFrame:
        """
        Replay the index range and return the per-tick telemetry frame.
        Records from a previous call are discarded.

        Returns:
            DataFrame with columns index, stage, stage_start_index, antenna.
        """
        self.telemetry = []
        self.transitions = []
        self.faults = []
        coordinator = self.coordinator
        stop = self.stop if self.stop is not None else len(coordinator.antenna_availability_table)

        bus = coordinator.event_bus
        unsubscribe_stage = bus.subscribe(StageUpdated, self._on_stage_updated)
        unsubscribe_fault = bus.subscribe(TelemetryFault, self.faults.append)

        logger.info("Replaying indices %d..%d (step %d)", self.start, stop, self.step)
        wall_start = time.perf_counter()
        try:
            for index in range(self.start, stop, self.step):
                self._current_index = index
                coordinator.on_simulation_index_updated(index)
                stage = coordinator.current_mission_stage
                self.telemetry.append({
                    'index': index,
                    'stage': stage.name,
                    'stage_start_index': stage.start_index,
                    'antenna': coordinator.current_prioritized_antenna,
                })
        finally:
            unsubscribe_stage()
            unsubscribe_fault()

        logger.info(
            "Replay complete: %d ticks, %d stage transitions, %d faults in %.3f s",
            len(self.telemetry), len(self.transitions), len(self.faults),
            time.perf_counter() - wall_start,
        )
        return self.get_telemetry_dataframe()

    def _on_stage_updated(self, event: StageUpdated) -> None:
        self.transitions.append({
            'index': self._current_index,
            'stage': event.stage.name,
            'stage_start_index': event.stage.start_index,
        })

    def get_telemetry_dataframe(self) -> pd.DataFrame:
        """Return recorded telemetry as a DataFrame."""
        return pd.DataFrame(self.telemetry, columns=TELEMETRY_COLUMNS)

    def antenna_switches(self) -> pd.DataFrame:
        """Return the rows where the prioritized antenna changed."""
        df = self.get_telemetry_dataframe()
        if df.empty:
            return df
        changed = df['antenna'].ne(df['antenna'].shift())
        return df[changed].reset_index(drop=True)
