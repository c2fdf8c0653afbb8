"""
===============================================================================
MISSION TELEMETRY REPLAY - Simulation Package
===============================================================================
Runtime orchestration of the telemetry replay.

Modules:
    telemetry_coordinator -- Loads tables, derives stage and antenna per tick
    replay                -- Sequential index driver with DataFrame output
===============================================================================
"""
