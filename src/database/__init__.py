"""
===============================================================================
MISSION TELEMETRY REPLAY - Database Module
===============================================================================
Read-only tabular storage for pre-recorded mission telemetry.

Submodules:
    tabular_store -- TabularDataStore for loading comma-separated tables
===============================================================================
"""
