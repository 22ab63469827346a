"""
Yelp Fusion provider implementation.

Wraps the Businesses Search endpoint with the provider interface.
"""

import logging
from typing import Any, Dict, List, Optional

from app.models.records import RestaurantRecord
from .base import RestaurantProvider, ProviderError, _coerce_float, _coerce_int, _coerce_text

logger = logging.getLogger(__name__)

YELP_SEARCH_URL = "https://api.yelp.com/v3/businesses/search"
YELP_RESULT_LIMIT = 20


class YelpProvider(RestaurantProvider):
    """Yelp Fusion business search."""

    @property
    def name(self) -> str:
        return "yelp"

    def _fetch(
        self,
        query: str,
        latitude: Optional[float],
        longitude: Optional[float],
    ) -> Dict[str, Any]:
        headers = {"Authorization": f"Bearer {self._api_key}"}
        params: Dict[str, Any] = {"term": query, "limit": YELP_RESULT_LIMIT}
        if latitude is not None:
            params["latitude"] = latitude
        if longitude is not None:
            params["longitude"] = longitude

        response = self._session.get(
            YELP_SEARCH_URL, headers=headers, params=params, timeout=self._timeout
        )
        self._check_status(response)

        data = response.json()
        if not isinstance(data, dict):
            raise ProviderError("Unexpected Yelp payload", provider=self.name)
        if "error" in data:
            error = data["error"] or {}
            raise ProviderError(
                f"Yelp API error: {error.get('description', error.get('code', 'unknown'))}",
                provider=self.name,
            )
        return data

    def _parse(self, payload: Dict[str, Any]) -> List[RestaurantRecord]:
        restaurants = []
        for business in payload.get("businesses") or []:
            business_id = _coerce_text(business.get("id"))
            name = _coerce_text(business.get("name"))
            if business_id is None or name is None:
                logger.warning(f"Skipping Yelp business without id/name: {business!r}")
                continue

            coordinates = business.get("coordinates") or {}
            categories = business.get("categories") or []

            restaurants.append(RestaurantRecord(
                id=f"yelp_{business_id}",
                name=name,
                latitude=_coerce_float(coordinates.get("latitude")),
                longitude=_coerce_float(coordinates.get("longitude")),
                cuisines=[
                    c["title"] for c in categories
                    if isinstance(c, dict) and _coerce_text(c.get("title"))
                ],
                rating=_coerce_float(business.get("rating")),
                review_count=_coerce_int(business.get("review_count")),
                image_url=_coerce_text(business.get("image_url")) or "",
                yelp_id=business_id,
            ))
        return restaurants
