"""
===============================================================================
MISSION TELEMETRY REPLAY - Telemetry Coordinator
===============================================================================
Owns the pre-recorded telemetry tables and the state derived from them.

At startup the coordinator validates the stage table, loads the four tables
(nominal trajectory, off-nominal trajectory, antenna availability, link
budget), seeds its state with the first stage and publishes DataLoaded once.

On every simulation index update it:

    1. STAGE   -- resolves the stage in effect; publishes StageUpdated only
                  when it differs from the current stage.
    2. ANTENNA -- recomputes the prioritized antenna (read via accessor, no
                  event).

Per-tick faults (index outside a table, malformed row) never abort the tick
loop: the last good value is kept, a warning is logged and a TelemetryFault
diagnostic is published.

The coordinator is driven synchronously from a single timeline and is not
safe for concurrent index updates.
===============================================================================
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from core.events import EventBus
from core.exceptions import (
    MalformedRowError,
    StageNotFoundError,
    TelemetryIndexError,
    TelemetryReplayError,
)
from database.tabular_store import Table, TabularDataStore
from guidance.antenna_priority import AntennaPrioritySelector
from guidance.mission_stage import MissionStageTable, StageDefinition

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


# =============================================================================
# EVENTS
# =============================================================================

@dataclass(frozen=True)
class DataLoaded:
    """Published once, after every table has been loaded."""
    nominal_trajectory: Table
    off_nominal_trajectory: Table
    antenna_availability: Table
    initial_stage: StageDefinition


@dataclass(frozen=True)
class StageUpdated:
    """Published once per mission stage transition."""
    stage: StageDefinition


@dataclass(frozen=True)
class TelemetryFault:
    """Diagnostic for a tick whose derivation failed; state was retained."""
    index: int
    kind: str
    message: str


# =============================================================================
# CONFIGURATION AND STATE
# =============================================================================

@dataclass(frozen=True)
class TelemetrySources:
    """Locations of the four telemetry tables."""
    nominal_trajectory: PathLike
    off_nominal_trajectory: PathLike
    antenna_availability: PathLike
    link_budget: PathLike

    @classmethod
    def from_config(cls, data_files: Mapping[str, PathLike]) -> "TelemetrySources":
        """Build from the ``data_files`` section of the mission config."""
        return cls(
            nominal_trajectory=data_files['nominal_trajectory'],
            off_nominal_trajectory=data_files['off_nominal_trajectory'],
            antenna_availability=data_files['antenna_availability'],
            link_budget=data_files['link_budget'],
        )


@dataclass
class CurrentState:
    """Derived state, mutated in place on every index update."""
    current_mission_stage: StageDefinition
    current_prioritized_antenna: Optional[str] = None
    last_index: Optional[int] = None


# =============================================================================
# COORDINATOR
# =============================================================================

class TelemetryCoordinator:
    """
    Loads telemetry once and re-derives mission state on each index update.

    Parameters
    ----------
    sources : TelemetrySources
        Where to load the four tables from.
    stage_table : MissionStageTable
        Ordered stage definitions; must cover index 0.
    selector : AntennaPrioritySelector, optional
        Antenna hysteresis filter.  Defaults to the standard 20-row window.
    store : TabularDataStore, optional
        Table loader.
    event_bus : EventBus, optional
        Where DataLoaded, StageUpdated and TelemetryFault are published.
    """

    def __init__(
        self,
        sources: TelemetrySources,
        stage_table: MissionStageTable,
        selector: Optional[AntennaPrioritySelector] = None,
        store: Optional[TabularDataStore] = None,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        self.sources = sources
        self.stage_table = stage_table
        self.selector = selector or AntennaPrioritySelector()
        self.store = store or TabularDataStore()
        self.event_bus = event_bus or EventBus()

        self._nominal_trajectory: Table = ()
        self._off_nominal_trajectory: Table = ()
        self._antenna_availability: Table = ()
        self._link_budget: Table = ()
        self._state: Optional[CurrentState] = None

    # -------------------------------------------------------------------------
    # Startup
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """
        Load all tables, seed the state and publish DataLoaded.

        Raises:
            StageConfigurationError: If the stage table cannot cover index 0.
            TableLoadError:          If any table source cannot be read.
            RuntimeError:            If the coordinator was already started.
        """
        if self._state is not None:
            raise RuntimeError("TelemetryCoordinator already started")

        self.stage_table.validate()

        nominal = self.store.load(self.sources.nominal_trajectory)
        off_nominal = self.store.load(self.sources.off_nominal_trajectory)
        antenna = self.store.load(self.sources.antenna_availability)
        link_budget = self.store.load(self.sources.link_budget)

        self._nominal_trajectory = nominal
        self._off_nominal_trajectory = off_nominal
        self._antenna_availability = antenna
        self._link_budget = link_budget

        # First stage starts right after the simulation begins
        initial_stage = self.stage_table.initial_stage
        self._state = CurrentState(current_mission_stage=initial_stage)

        logger.info(
            "Telemetry loaded: nominal=%d, off-nominal=%d, antenna=%d, link budget=%d rows. "
            "Initial stage: %s",
            len(nominal), len(off_nominal), len(antenna), len(link_budget),
            initial_stage.name,
        )
        self.event_bus.publish(DataLoaded(
            nominal_trajectory=nominal,
            off_nominal_trajectory=off_nominal,
            antenna_availability=antenna,
            initial_stage=initial_stage,
        ))

    @property
    def started(self) -> bool:
        return self._state is not None

    # -------------------------------------------------------------------------
    # Per-tick derivation
    # -------------------------------------------------------------------------

    def on_simulation_index_updated(self, index: int) -> None:
        """
        Re-derive mission stage and prioritized antenna for ``index``.

        Raises:
            RuntimeError: If called before :meth:`start`.
        """
        state = self._require_state()
        state.last_index = index
        self._update_mission_stage(state, index)
        self._update_prioritized_antenna(state, index)

    def _update_mission_stage(self, state: CurrentState, index: int) -> None:
        try:
            stage = self.stage_table.resolve(index)
        except StageNotFoundError as exc:
            self._report_fault(index, exc)
            return

        if stage == state.current_mission_stage:
            return

        old_stage = state.current_mission_stage
        state.current_mission_stage = stage
        logger.info(
            "Stage transition: %s -> %s at index %d",
            old_stage.name, stage.name, index,
        )
        self.event_bus.publish(StageUpdated(stage))

    def _update_prioritized_antenna(self, state: CurrentState, index: int) -> None:
        try:
            antenna = self.selector.select(self._antenna_availability, index)
        except (TelemetryIndexError, MalformedRowError) as exc:
            self._report_fault(index, exc)
            return

        if antenna != state.current_prioritized_antenna:
            logger.debug("Index %d: prioritized antenna %s", index, antenna)
        state.current_prioritized_antenna = antenna

    def _report_fault(self, index: int, exc: TelemetryReplayError) -> None:
        kind = type(exc).__name__
        logger.warning("Index %d: %s: %s. Keeping last derived state.", index, kind, exc)
        self.event_bus.publish(TelemetryFault(index=index, kind=kind, message=str(exc)))

    # -------------------------------------------------------------------------
    # Read accessors
    # -------------------------------------------------------------------------

    @property
    def state(self) -> CurrentState:
        return self._require_state()

    @property
    def current_mission_stage(self) -> StageDefinition:
        return self._require_state().current_mission_stage

    @property
    def current_prioritized_antenna(self) -> Optional[str]:
        return self._require_state().current_prioritized_antenna

    @property
    def last_index(self) -> Optional[int]:
        return self._require_state().last_index

    @property
    def nominal_trajectory_table(self) -> Table:
        return self._nominal_trajectory

    @property
    def off_nominal_trajectory_table(self) -> Table:
        return self._off_nominal_trajectory

    @property
    def antenna_availability_table(self) -> Table:
        return self._antenna_availability

    @property
    def link_budget_table(self) -> Table:
        return self._link_budget

    def _require_state(self) -> CurrentState:
        if self._state is None:
            raise RuntimeError("TelemetryCoordinator has not been started")
        return self._state

    def __repr__(self) -> str:
        if self._state is None:
            return "TelemetryCoordinator(not started)"
        return (
            f"TelemetryCoordinator(stage={self._state.current_mission_stage.name}, "
            f"antenna={self._state.current_prioritized_antenna}, "
            f"index={self._state.last_index})"
        )


def build_coordinator(config: Mapping[str, Any],
                      event_bus: Optional[EventBus] = None) -> TelemetryCoordinator:
    """
    Construct an unstarted coordinator from a loaded mission config.

    Args:
        config:    Dictionary returned by ``core.config.load_config``.
        event_bus: Bus to publish on; a new one is created if omitted.
    """
    antenna_cfg = config.get('antenna_priority') or {}
    selector = AntennaPrioritySelector(
        look_ahead=antenna_cfg.get('look_ahead', 20),
        look_ahead_step=antenna_cfg.get('look_ahead_step', 2),
        name_column=antenna_cfg.get('name_column', 1),
    )
    return TelemetryCoordinator(
        sources=TelemetrySources.from_config(config['data_files']),
        stage_table=MissionStageTable.from_config(config['stages']),
        selector=selector,
        event_bus=event_bus,
    )
