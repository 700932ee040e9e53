"""
Schedule providers - adapters behind one interface plus the fallback chain
"""

from .amadeus import AmadeusProvider
from .aviationstack import AviationStackProvider
from .base import ScheduleProvider
from .chain import ScheduleProviderChain, build_default_chain, get_schedule_chain
from .mock import MockScheduleProvider

__all__ = [
    "AmadeusProvider",
    "AviationStackProvider",
    "MockScheduleProvider",
    "ScheduleProvider",
    "ScheduleProviderChain",
    "build_default_chain",
    "get_schedule_chain"
]
