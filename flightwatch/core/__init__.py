"""
Core package - Configuration and cross-cutting concerns
"""

from .config import Settings, get_settings, reload_settings
from .exceptions import ProviderHTTPError, ScheduleProviderError, TokenError

__all__ = [
    "Settings",
    "get_settings",
    "reload_settings",
    "ProviderHTTPError",
    "ScheduleProviderError",
    "TokenError"
]
