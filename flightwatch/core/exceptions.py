"""
Provider exceptions

Raising one of these from a schedule provider means "this provider could not
answer right now" and makes the provider chain move on to the next adapter.
A definitive answer (including "flight not found") is returned, never raised.
"""

from typing import Optional


class ScheduleProviderError(Exception):
    """Transient failure of a schedule provider (network, 5xx, bad payload, auth)"""

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.provider = provider


class ProviderHTTPError(ScheduleProviderError):
    """Upstream answered with an HTTP status the adapter cannot use"""

    def __init__(self, message: str, status_code: int, provider: Optional[str] = None):
        super().__init__(message, provider=provider)
        self.status_code = status_code


class TokenError(ScheduleProviderError):
    """OAuth client-credentials grant failed"""
