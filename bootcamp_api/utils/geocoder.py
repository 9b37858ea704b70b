# bootcamp_api/utils/geocoder.py
# Thin client for the MapQuest geocoding API.

import logging
from dataclasses import dataclass

import httpx

from bootcamp_api.core.config import Settings
from bootcamp_api.core.exceptions import GeocodingError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeoResult:
    latitude: float
    longitude: float
    street: str | None = None
    city: str | None = None
    state: str | None = None
    zipcode: str | None = None
    country_code: str | None = None

    @property
    def formatted_address(self) -> str:
        state_zip = " ".join(part for part in (self.state, self.zipcode) if part)
        parts = [self.street, self.city, state_zip, self.country_code]
        return ", ".join(part for part in parts if part)

    def to_location(self) -> dict:
        """GeoJSON point plus normalized address fields, as stored on a bootcamp."""
        return {
            "type": "Point",
            "coordinates": [self.longitude, self.latitude],
            "formattedAddress": self.formatted_address,
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "zipcode": self.zipcode,
            "country": self.country_code,
        }


class Geocoder:
    """
    Resolves free-text addresses (or bare zipcodes) to coordinates.

    The underlying ``httpx.AsyncClient`` is owned by the application and
    closed in its lifespan; tests pass a client built on ``httpx.MockTransport``.
    """

    def __init__(self, client: httpx.AsyncClient, url: str, api_key: str):
        self.client = client
        self.url = url
        self.api_key = api_key

    @classmethod
    def from_settings(cls, settings: Settings) -> "Geocoder":
        client = httpx.AsyncClient(timeout=settings.GEOCODER_TIMEOUT)
        return cls(client, settings.GEOCODER_URL, settings.GEOCODER_API_KEY)

    async def geocode(self, address: str) -> GeoResult:
        try:
            response = await self.client.get(
                self.url,
                params={"key": self.api_key, "location": address, "maxResults": 1},
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Geocoding request failed for %r: %s", address, e)
            raise GeocodingError(address) from e

        results = payload.get("results") or []
        locations = results[0].get("locations") if results else None
        if not locations:
            raise GeocodingError(address)

        loc = locations[0]
        lat_lng = loc.get("latLng") or loc.get("displayLatLng") or {}
        if "lat" not in lat_lng or "lng" not in lat_lng:
            raise GeocodingError(address)

        return GeoResult(
            latitude=float(lat_lng["lat"]),
            longitude=float(lat_lng["lng"]),
            street=loc.get("street") or None,
            city=loc.get("adminArea5") or None,
            state=loc.get("adminArea3") or None,
            zipcode=loc.get("postalCode") or None,
            country_code=loc.get("adminArea1") or None,
        )

    async def aclose(self) -> None:
        await self.client.aclose()
