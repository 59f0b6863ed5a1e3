"""
Application Tracking Service
Per-wallet application cache, CRUD mediation and dashboard statistics
"""
from .state import ApplicationsState, LoadState
from .registry import ApplicationsStateRegistry
from .statistics import ApplicationStats, PlatformStat, StatusSlice

__all__ = [
    "ApplicationsState",
    "ApplicationsStateRegistry",
    "LoadState",
    "ApplicationStats",
    "PlatformStat",
    "StatusSlice",
]
