"""
===============================================================================
MISSION TELEMETRY REPLAY - Trajectory Path Preview
===============================================================================
Builds a decimated line preview of a recorded trajectory, coloured in two
halves (beginning and end of the mission), and renders it to an image.

Trajectory rows carry the X, Y, Z position as decimal text in columns 1-3.
Parsing here is best-effort: a row that does not hold three numbers is
logged and skipped, never fatal.  This module is for previews only and is
not used for any derived mission state.
===============================================================================
"""

import logging
import os
from typing import List, Optional, Sequence, Tuple

import numpy as np
import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for saving
import matplotlib.pyplot as plt
from mpl_toolkits.mplot3d.art3d import Line3DCollection

logger = logging.getLogger(__name__)

DEFAULT_SCALE = 0.01
DEFAULT_LEVEL_OF_DETAIL = 10
POSITION_COLUMNS = (1, 2, 3)

BEGINNING_COLOR = '#2E86AB'
END_COLOR = '#F18F01'


def row_to_position(row: Sequence[str], scale: float = DEFAULT_SCALE) -> np.ndarray:
    """
    Convert one trajectory row to a scaled (3,) position vector.

    Raises:
        IndexError: If the row has fewer than four fields.
        ValueError: If a position field is not a number.
    """
    return np.array([float(row[c]) for c in POSITION_COLUMNS], dtype=float) * scale


def parse_positions(table: Sequence[Sequence[str]], scale: float = DEFAULT_SCALE) -> np.ndarray:
    """
    Parse every usable row of a trajectory table into positions.

    Args:
        table: Trajectory rows.
        scale: Multiplier applied to each coordinate.

    Returns:
        (N, 3) array of positions, N <= len(table).  Skipped rows are absent.
    """
    points: List[np.ndarray] = []
    skipped = 0
    for i, row in enumerate(table):
        try:
            points.append(row_to_position(row, scale))
        except (IndexError, ValueError):
            skipped += 1
            logger.warning("Trajectory path: no positional data on line %d", i)

    if skipped:
        logger.info("Trajectory path: %d of %d rows skipped", skipped, len(table))
    if not points:
        return np.empty((0, 3), dtype=float)
    return np.vstack(points)


def path_segments(points: np.ndarray, level_of_detail: int = DEFAULT_LEVEL_OF_DETAIL
                  ) -> Tuple[np.ndarray, np.ndarray]:
    """
    Split a decimated path into beginning and end line segments.

    Every ``level_of_detail``-th point is joined to the point
    ``level_of_detail`` further on.  The beginning half starts at 0 and stops
    before the midpoint; the end half starts at the midpoint.  No segment
    reaches past the last point.

    Returns:
        (beginning, end): arrays of shape (K, 2, 3).
    """
    if level_of_detail < 1:
        raise ValueError(f"level_of_detail must be at least 1, got {level_of_detail}")

    points = np.asarray(points, dtype=float).reshape(-1, 3)
    n = len(points)
    midpoint = n // 2

    def _segments(starts: range) -> np.ndarray:
        idx = np.array([i for i in starts if i + level_of_detail < n], dtype=int)
        if idx.size == 0:
            return np.empty((0, 2, 3), dtype=float)
        return np.stack([points[idx], points[idx + level_of_detail]], axis=1)

    beginning = _segments(range(0, midpoint, level_of_detail))
    end = _segments(range(midpoint, n - level_of_detail, level_of_detail))
    return beginning, end


def plot_trajectory_path(points: np.ndarray, filepath: str,
                         level_of_detail: int = DEFAULT_LEVEL_OF_DETAIL,
                         beginning_color: str = BEGINNING_COLOR,
                         end_color: str = END_COLOR,
                         title: Optional[str] = None) -> str:
    """
    Render the two-colour path preview and save it.

    Args:
        points:          (N, 3) positions, e.g. from :func:`parse_positions`.
        filepath:        Output image path; parent directories are created.
        level_of_detail: Point stride between segment ends.
        beginning_color: Colour of the first half of the path.
        end_color:       Colour of the second half.
        title:           Optional figure title.

    Returns:
        The path written.
    """
    beginning, end = path_segments(points, level_of_detail)

    fig = plt.figure(figsize=(10, 8))
    ax = fig.add_subplot(111, projection='3d')
    ax.add_collection3d(Line3DCollection(beginning, colors=beginning_color, linewidths=1.5,
                                         label='Beginning'))
    ax.add_collection3d(Line3DCollection(end, colors=end_color, linewidths=1.5, label='End'))

    points = np.asarray(points, dtype=float).reshape(-1, 3)
    if len(points):
        lo, hi = points.min(axis=0), points.max(axis=0)
        pad = np.maximum((hi - lo) * 0.05, 1e-6)
        ax.set_xlim(lo[0] - pad[0], hi[0] + pad[0])
        ax.set_ylim(lo[1] - pad[1], hi[1] + pad[1])
        ax.set_zlim(lo[2] - pad[2], hi[2] + pad[2])

    ax.set_xlabel('X')
    ax.set_ylabel('Y')
    ax.set_zlabel('Z')
    if title:
        ax.set_title(title)
    ax.legend(loc='upper left', fontsize=9)

    parent = os.path.dirname(filepath)
    if parent:
        os.makedirs(parent, exist_ok=True)
    fig.savefig(filepath, dpi=150, bbox_inches='tight')
    plt.close(fig)
    logger.info("Trajectory path preview saved to %s", filepath)
    return filepath
