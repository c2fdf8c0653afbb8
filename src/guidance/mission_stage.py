"""
===============================================================================
MISSION TELEMETRY REPLAY - Mission Stage Table
===============================================================================
Coarse mission phases for the Earth-Moon free-return profile, and the table
that maps a simulation index to the stage in effect at that index.

The mission profile:
    1. Launch
    2. Orbiting Earth
    3. Travelling to Moon
    4. Flying by Moon
    5. Returning to Earth
    6. Re-entry and splashdown

A stage table is an ordered list of (start_index, stage_type) pairs sorted
ascending by start index.  Resolution is stateless: the stage for an index is
the last definition whose start index is at or before that index.  Detecting
transitions (and suppressing repeats) is the caller's job.
===============================================================================
"""

import bisect
import logging
from dataclasses import dataclass
from enum import IntEnum, auto
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

from core.exceptions import StageConfigurationError, StageNotFoundError

logger = logging.getLogger(__name__)


# =============================================================================
# STAGE TYPE ENUMERATION
# =============================================================================

class StageType(IntEnum):
    """
    Mission stages in chronological order.  NONE marks an unassigned stage.
    """
    NONE = 0
    LAUNCH = auto()
    ORBITING_EARTH = auto()
    TRAVELLING_TO_MOON = auto()
    FLYING_BY_MOON = auto()
    RETURNING_TO_EARTH = auto()
    RE_ENTRY_AND_SPLASHDOWN = auto()


# Display properties shown by rendering and UI collaborators.

STAGE_NAMES: Dict[StageType, str] = {
    StageType.LAUNCH: "Launch",
    StageType.ORBITING_EARTH: "Orbiting Earth",
    StageType.TRAVELLING_TO_MOON: "Travelling to Moon",
    StageType.FLYING_BY_MOON: "Flying by Moon",
    StageType.RETURNING_TO_EARTH: "Returning to Earth",
    StageType.RE_ENTRY_AND_SPLASHDOWN: "Re-entry + Splashdown",
}

# RGB in [0, 1]
STAGE_COLORS: Dict[StageType, Tuple[float, float, float]] = {
    StageType.LAUNCH: (0.9373, 0.2588, 0.2588),
    StageType.ORBITING_EARTH: (1.0000, 0.7569, 0.0000),
    StageType.TRAVELLING_TO_MOON: (0.5451, 0.9294, 0.1804),
    StageType.FLYING_BY_MOON: (0.2588, 0.6824, 0.9451),
    StageType.RETURNING_TO_EARTH: (0.5373, 0.2588, 0.9451),
    StageType.RE_ENTRY_AND_SPLASHDOWN: (0.9451, 0.2588, 0.5176),
}

UNKNOWN_STAGE_NAME = "Unknown stage"
DEFAULT_STAGE_COLOR = (1.0, 1.0, 1.0)

# Accepted spellings in configuration files, e.g. "OrbitingEarth"
_CONFIG_ALIASES: Dict[str, StageType] = {
    "None": StageType.NONE,
    "Launch": StageType.LAUNCH,
    "OrbitingEarth": StageType.ORBITING_EARTH,
    "TravellingToMoon": StageType.TRAVELLING_TO_MOON,
    "FlyingByMoon": StageType.FLYING_BY_MOON,
    "ReturningToEarth": StageType.RETURNING_TO_EARTH,
    "ReEntryAndSplashdown": StageType.RE_ENTRY_AND_SPLASHDOWN,
}


def get_stage_name(stage_type: StageType) -> str:
    """Return the display name for a stage type."""
    return STAGE_NAMES.get(stage_type, UNKNOWN_STAGE_NAME)


def get_stage_color(stage_type: StageType) -> Tuple[float, float, float]:
    """Return the display colour for a stage type, white if it has none."""
    return STAGE_COLORS.get(stage_type, DEFAULT_STAGE_COLOR)


def parse_stage_type(value: Any) -> StageType:
    """
    Interpret a configuration value as a StageType.

    Accepts a StageType, its integer value, its enum member name
    ("ORBITING_EARTH") or its CamelCase alias ("OrbitingEarth").

    Raises:
        ValueError: If the value names no stage type.
    """
    if isinstance(value, StageType):
        return value
    if isinstance(value, int):
        return StageType(value)
    text = str(value).strip()
    if text in _CONFIG_ALIASES:
        return _CONFIG_ALIASES[text]
    try:
        return StageType[text.upper()]
    except KeyError:
        raise ValueError(f"Unknown stage type: {value!r}") from None


# =============================================================================
# STAGE DEFINITION
# =============================================================================

@dataclass(frozen=True)
class StageDefinition:
    """A stage boundary: ``stage_type`` is in effect from ``start_index`` on.

    Equality is structural (same start index and same stage type), which is
    what transition detection compares.
    """
    start_index: int
    stage_type: StageType

    @property
    def name(self) -> str:
        return get_stage_name(self.stage_type)

    @property
    def color(self) -> Tuple[float, float, float]:
        return get_stage_color(self.stage_type)


# =============================================================================
# STAGE TABLE
# =============================================================================

class MissionStageTable:
    """
    Ordered stage definitions with last-match index resolution.

    The definitions must be sorted ascending by start index.  This is assumed
    by :meth:`resolve` and not enforced; :meth:`validate` only checks that the
    table covers index 0.

    Attributes:
        stages: The stage definitions in table order.
    """

    def __init__(self, stages: Iterable[StageDefinition]) -> None:
        self.stages: Tuple[StageDefinition, ...] = tuple(stages)
        self._start_indices: List[int] = [stage.start_index for stage in self.stages]

    @classmethod
    def from_config(cls, entries: Sequence[Mapping[str, Any]]) -> "MissionStageTable":
        """
        Build a table from configuration entries.

        Args:
            entries: Sequence of mappings with ``start_index`` and ``stage``
                     keys, e.g. ``{"start_index": 0, "stage": "Launch"}``.

        Raises:
            KeyError:   If an entry lacks a required key.
            ValueError: If an entry names an unknown stage type.
        """
        stages = [
            StageDefinition(int(entry["start_index"]), parse_stage_type(entry["stage"]))
            for entry in entries or []
        ]
        return cls(stages)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def initial_stage(self) -> StageDefinition:
        """The first stage definition, in effect when the replay starts."""
        if not self.stages:
            raise StageConfigurationError("Stage table is empty")
        return self.stages[0]

    def validate(self) -> None:
        """
        Check that the table can resolve every non-negative index.

        Raises:
            StageConfigurationError: If the table is empty or its first stage
                                     starts after index 0.
        """
        if not self.stages:
            raise StageConfigurationError("Stage table is empty")
        first = self.stages[0]
        if first.start_index > 0:
            raise StageConfigurationError(
                f"First stage {first.name!r} starts at index {first.start_index}; "
                "it must start at or before index 0"
            )
        if self._start_indices != sorted(self._start_indices):
            logger.warning("Stage table is not sorted by start index: %s", self._start_indices)

    def resolve(self, index: int) -> StageDefinition:
        """
        Return the stage in effect at ``index``.

        This is the last definition whose start index is at or before
        ``index``.  When several definitions share a start index, the one
        listed last wins.

        Raises:
            StageNotFoundError: If no definition starts at or before ``index``.
        """
        position = bisect.bisect_right(self._start_indices, index)
        if position == 0:
            raise StageNotFoundError(f"No mission stage starts at or before index {index}")
        return self.stages[position - 1]

    def __len__(self) -> int:
        return len(self.stages)

    def __iter__(self):
        return iter(self.stages)

    def __repr__(self) -> str:
        return f"MissionStageTable({len(self.stages)} stages)"
