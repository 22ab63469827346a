"""
Base classes for provider abstraction layer.

Defines the interface that all restaurant search providers must implement.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any
from enum import Enum

import requests

from app.models.records import RestaurantRecord

logger = logging.getLogger(__name__)

# Sample values shipped in .env templates; treated the same as a missing key
PLACEHOLDER_PREFIXES = ("your_", "your-")
PLACEHOLDER_VALUES = {"changeme", "replace_me", "xxx", "none", "null"}


class ProviderType(Enum):
    """Supported provider types."""
    YELP = "yelp"
    GOOGLE_PLACES = "google"


class ProviderError(Exception):
    """Base exception for provider errors."""
    def __init__(self, message: str, provider: str):
        super().__init__(message)
        self.provider = provider


@dataclass
class ProviderSearchResult:
    """
    Result from searching a provider.

    A provider never raises to its caller. A missing credential yields
    skipped=True; any failure yields an empty result with error set.
    """
    restaurants: List[RestaurantRecord] = field(default_factory=list)
    provider: str = "unknown"
    skipped: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return not self.skipped and self.error is None


def is_placeholder_key(api_key: Optional[str]) -> bool:
    """True when the key is absent, blank, or an obvious template value."""
    if api_key is None:
        return True
    value = api_key.strip()
    if not value:
        return True
    lowered = value.lower()
    return lowered.startswith(PLACEHOLDER_PREFIXES) or lowered in PLACEHOLDER_VALUES


def _coerce_text(value: Any) -> Optional[str]:
    """Return value when it is a non-blank string, otherwise None."""
    if isinstance(value, str) and value.strip():
        return value
    return None


def _coerce_float(value: Any, default: float = 0.0) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _coerce_int(value: Any, default: int = 0) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


class RestaurantProvider(ABC):
    """
    Abstract base class for restaurant search providers.

    Subclasses implement _fetch (one HTTP request) and _parse (payload to
    records). search_restaurants wraps them with the degraded-mode and
    failure contracts so neither ever reaches the caller.
    """

    def __init__(
        self,
        api_key: Optional[str],
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
    ):
        self._api_key = api_key
        self._session = session or requests.Session()
        self._timeout = timeout

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name for logging/tracking."""
        pass

    @property
    def is_configured(self) -> bool:
        return not is_placeholder_key(self._api_key)

    @abstractmethod
    def _fetch(
        self,
        query: str,
        latitude: Optional[float],
        longitude: Optional[float],
    ) -> Dict[str, Any]:
        """
        Issue the search request and return the decoded JSON payload.

        Raises:
            ProviderError: On non-success status or provider-reported error
        """
        pass

    @abstractmethod
    def _parse(self, payload: Dict[str, Any]) -> List[RestaurantRecord]:
        """Map a decoded payload into canonical records."""
        pass

    def search_restaurants(
        self,
        query: str,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> ProviderSearchResult:
        """
        Search the provider for restaurants matching a query.

        Args:
            query: Search query (restaurant name or cuisine), non-empty
            latitude: Optional latitude to bias results
            longitude: Optional longitude to bias results

        Returns:
            ProviderSearchResult; empty on missing credentials or any failure
        """
        if not self.is_configured:
            logger.warning(f"{self.name} API key not configured - skipping {self.name} search")
            return ProviderSearchResult(provider=self.name, skipped=True)

        try:
            logger.info(f"{self.name} -> searching: '{query}'")
            payload = self._fetch(query, latitude, longitude)
            restaurants = self._parse(payload)
        except ProviderError as e:
            logger.error(f"{self.name} search failed for '{query}': {str(e)}")
            return ProviderSearchResult(provider=self.name, error=str(e))
        except requests.RequestException as e:
            logger.error(f"{self.name} request failed for '{query}': {str(e)}", exc_info=True)
            return ProviderSearchResult(provider=self.name, error=f"Request failed: {str(e)}")
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            logger.error(f"{self.name} returned a malformed response for '{query}': {str(e)}", exc_info=True)
            return ProviderSearchResult(provider=self.name, error=f"Malformed response: {str(e)}")

        logger.info(f"{self.name} -> {len(restaurants)} results for '{query}'")
        return ProviderSearchResult(restaurants=restaurants, provider=self.name)

    def _check_status(self, response: requests.Response) -> None:
        if response.status_code != 200:
            raise ProviderError(
                f"{self.name} API error ({response.status_code}): {response.text[:200]}",
                provider=self.name,
            )
