"""
===============================================================================
MISSION TELEMETRY REPLAY - Core Package
===============================================================================
Shared infrastructure used by every other package.

Modules:
    config      -- YAML mission configuration loader
    events      -- Typed observer list used to broadcast derived state
    exceptions  -- Error taxonomy for loading and per-tick derivation
===============================================================================
"""
