"""
===============================================================================
MISSION TELEMETRY REPLAY - Visualization Package
===============================================================================
Offline previews of recorded telemetry.

Modules:
    trajectory_path -- Best-effort trajectory parsing and two-colour path plot
===============================================================================
"""
