"""
Google Places API provider implementation.

Wraps the Places Text Search endpoint with the provider interface.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from app.models.records import RestaurantRecord
from .base import RestaurantProvider, ProviderError, _coerce_float, _coerce_int, _coerce_text

logger = logging.getLogger(__name__)

GOOGLE_PLACES_BASE_URL = "https://maps.googleapis.com/maps/api/place"
GOOGLE_TEXT_SEARCH_URL = f"{GOOGLE_PLACES_BASE_URL}/textsearch/json"
GOOGLE_PHOTO_URL = f"{GOOGLE_PLACES_BASE_URL}/photo"
SEARCH_RADIUS_METERS = 50_000
PHOTO_MAX_WIDTH = 800

# Statuses that carry a usable (possibly empty) result list
OK_STATUSES = {"OK", "ZERO_RESULTS"}

# Types that say nothing about the cuisine
GENERIC_PLACE_TYPES = {
    "establishment",
    "point_of_interest",
    "food",
    "restaurant",
    "meal_takeaway",
    "meal_delivery",
}


def place_type_to_cuisine(place_type: str) -> str:
    label = place_type.replace("_", " ")
    return label[:1].upper() + label[1:]


class GooglePlacesProvider(RestaurantProvider):
    """
    Google Places Text Search provider.

    Limitations:
    - Cuisines are derived from place types, which are coarse
    - Only the first photo reference is used for image_url
    """

    @property
    def name(self) -> str:
        return "google_places"

    def photo_url(self, photo_reference: str) -> str:
        params = {
            "maxwidth": PHOTO_MAX_WIDTH,
            "photo_reference": photo_reference,
            "key": self._api_key,
        }
        return f"{GOOGLE_PHOTO_URL}?{urlencode(params)}"

    def _fetch(
        self,
        query: str,
        latitude: Optional[float],
        longitude: Optional[float],
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "query": f"{query} restaurant",
            "type": "restaurant",
            "key": self._api_key,
        }
        if latitude is not None and longitude is not None:
            params["location"] = f"{latitude},{longitude}"
            params["radius"] = SEARCH_RADIUS_METERS

        response = self._session.get(GOOGLE_TEXT_SEARCH_URL, params=params, timeout=self._timeout)
        self._check_status(response)

        data = response.json()
        if not isinstance(data, dict):
            raise ProviderError("Unexpected Google Places payload", provider=self.name)

        status = data.get("status", "")
        if status not in OK_STATUSES:
            error_message = data.get("error_message", "API request denied")
            raise ProviderError(
                f"Google Places API error ({status}): {error_message}",
                provider=self.name,
            )
        logger.debug(f"Google Places status: {status}")
        return data

    def _parse(self, payload: Dict[str, Any]) -> List[RestaurantRecord]:
        restaurants = []
        for place in payload.get("results") or []:
            place_id = _coerce_text(place.get("place_id"))
            name = _coerce_text(place.get("name"))
            if place_id is None or name is None:
                logger.warning(f"Skipping Google place without place_id/name: {place!r}")
                continue

            location = (place.get("geometry") or {}).get("location") or {}
            photos = place.get("photos") or []
            photo_reference = _coerce_text(photos[0].get("photo_reference")) if photos else None

            cuisines = [
                place_type_to_cuisine(t)
                for t in place.get("types") or []
                if isinstance(t, str) and t not in GENERIC_PLACE_TYPES
            ]

            restaurants.append(RestaurantRecord(
                id=f"google_{place_id}",
                name=name,
                latitude=_coerce_float(location.get("lat")),
                longitude=_coerce_float(location.get("lng")),
                cuisines=cuisines,
                rating=_coerce_float(place.get("rating")),
                review_count=_coerce_int(place.get("user_ratings_total")),
                image_url=self.photo_url(photo_reference) if photo_reference else "",
                google_place_id=place_id,
            ))
        return restaurants
