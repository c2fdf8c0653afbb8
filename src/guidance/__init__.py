"""
===============================================================================
MISSION TELEMETRY REPLAY - Guidance Package
===============================================================================
Decision logic that turns raw telemetry rows into displayed mission state.

Modules:
    mission_stage     : Stage types, stage definitions and index resolution
    antenna_priority  : Hysteresis filter choosing the active ground antenna
===============================================================================
"""
