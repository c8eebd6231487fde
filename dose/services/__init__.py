"""
Core services for the application.

This package contains persistence, the stateful tracker and the pure
adherence calculator.
"""

from .repository import DoseRepository
from .storage import InMemoryStorage, JsonFileStorage, Result, SlotStorage
from .tracker import DoseTracker, TrackerSnapshot

__all__ = [
    "DoseRepository",
    "DoseTracker",
    "InMemoryStorage",
    "JsonFileStorage",
    "Result",
    "SlotStorage",
    "TrackerSnapshot",
]
