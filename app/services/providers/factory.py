"""
Provider factory for creating provider instances.

Builds providers from application settings.
"""

import logging
from typing import Optional, Tuple

import requests

from app.config.settings import Settings, get_settings
from .base import RestaurantProvider, ProviderType
from .google_places import GooglePlacesProvider
from .yelp import YelpProvider

logger = logging.getLogger(__name__)


def get_provider(
    provider_type: ProviderType,
    settings: Optional[Settings] = None,
    session: Optional[requests.Session] = None,
) -> RestaurantProvider:
    """
    Get a search provider instance.

    Args:
        provider_type: Which provider to build
        settings: Settings to read credentials from (defaults to environment)
        session: Optional shared HTTP session

    Returns:
        RestaurantProvider instance
    """
    settings = settings or get_settings()

    if provider_type == ProviderType.YELP:
        return YelpProvider(
            settings.yelp_api_key,
            session=session,
            timeout=settings.provider_timeout_seconds,
        )
    return GooglePlacesProvider(
        settings.google_places_api_key,
        session=session,
        timeout=settings.provider_timeout_seconds,
    )


def get_search_providers(
    settings: Optional[Settings] = None,
    session: Optional[requests.Session] = None,
) -> Tuple[RestaurantProvider, RestaurantProvider]:
    """
    Get the (primary, secondary) provider pair used by the resolver.

    Yelp is primary: its record wins when both providers return the same
    restaurant name.
    """
    session = session or requests.Session()
    yelp = get_provider(ProviderType.YELP, settings, session)
    google = get_provider(ProviderType.GOOGLE_PLACES, settings, session)

    for provider in (yelp, google):
        if not provider.is_configured:
            logger.warning(f"{provider.name} is not configured; its searches will return no results")

    return yelp, google
