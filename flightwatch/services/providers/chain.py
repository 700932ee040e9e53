"""
Schedule Provider Chain - ordered fallback across schedule adapters
Priority: Amadeus (2,000/month) -> AviationStack (100/month) -> Mock
"""

import logging
from datetime import date
from typing import List, Optional, Sequence

import requests

from flightwatch.core.config import Settings
from flightwatch.core.exceptions import ScheduleProviderError
from flightwatch.models.flight import ProviderResponse, ProviderSource, ScheduledFlight
from flightwatch.services.providers.amadeus import AmadeusProvider
from flightwatch.services.providers.aviationstack import AviationStackProvider
from flightwatch.services.providers.base import ScheduleProvider
from flightwatch.services.providers.mock import MockScheduleProvider
from flightwatch.services.token_cache import TokenCache

logger = logging.getLogger(__name__)


class ScheduleProviderChain:
    """
    Runs adapters in order until one gives a definitive answer

    - Unconfigured adapters are skipped without any upstream call
    - A returned ProviderResponse (found or confirmed absent) ends the chain
    - ScheduleProviderError moves on to the next adapter
    """

    def __init__(self, providers: Sequence[ScheduleProvider]):
        self.providers: List[ScheduleProvider] = list(providers)

    def active_providers(self) -> List[ProviderSource]:
        return [p.name for p in self.providers if p.is_configured()]

    def lookup(
        self,
        flight_number: str,
        flight_date: date,
        arrival_airport: Optional[str] = None
    ) -> ProviderResponse[ScheduledFlight]:
        """
        Get scheduled data for one flight from the first provider that can answer

        Returns:
            ProviderResponse whose source names the provider actually used
        """
        last_error: Optional[str] = None
        last_source = ProviderSource.MOCK

        for provider in self.providers:
            if not provider.is_configured():
                logger.debug(f"Skipping {provider.name.value}: not configured")
                continue

            last_source = provider.name
            try:
                response = provider.fetch(flight_number, flight_date, arrival_airport)
            except ScheduleProviderError as e:
                last_error = str(e)
                logger.warning(
                    f"{provider.name.value} unavailable for {flight_number} on {flight_date}: "
                    f"{last_error} - falling back"
                )
                continue

            if response.source == ProviderSource.MOCK:
                logger.info(f"Using synthetic schedule for {flight_number} on {flight_date}")
            return response

        return ProviderResponse[ScheduledFlight](
            success=False,
            error=last_error or "No schedule provider available",
            source=last_source,
        )


def build_default_chain(settings: Settings, session: Optional[requests.Session] = None) -> ScheduleProviderChain:
    """
    Build Amadeus -> AviationStack -> Mock from settings

    Amadeus gets a TokenCache only when both credentials are present.
    """
    session = session or requests.Session()

    token_cache = None
    if settings.is_amadeus_configured():
        token_cache = TokenCache(
            token_url=f"{settings.amadeus_base_url}{AmadeusProvider.TOKEN_PATH}",
            client_id=settings.amadeus_client_id,
            client_secret=settings.amadeus_client_secret,
            session=session,
            expiry_buffer=settings.token_expiry_buffer,
            timeout=settings.api_timeout,
        )

    return ScheduleProviderChain([
        AmadeusProvider(token_cache, settings.amadeus_base_url, session=session, timeout=settings.api_timeout),
        AviationStackProvider(
            settings.aviationstack_api_key,
            base_url=settings.aviationstack_base_url,
            session=session,
            timeout=settings.api_timeout,
        ),
        MockScheduleProvider(),
    ])


# Singleton pattern for easy reuse
_chain_instance: Optional[ScheduleProviderChain] = None


def get_schedule_chain() -> ScheduleProviderChain:
    """
    Get singleton schedule provider chain built from Settings

    Returns:
        ScheduleProviderChain instance
    """
    global _chain_instance

    if _chain_instance is None:
        from flightwatch.core.config import get_settings
        _chain_instance = build_default_chain(get_settings())

    return _chain_instance
