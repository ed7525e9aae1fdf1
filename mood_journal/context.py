"""Ambient context providers: weather and reverse geocoding."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional, Protocol

import aiohttp
from geopy.exc import GeopyError
from geopy.geocoders import Nominatim

from .config import GeocodingConfig, WeatherConfig
from .errors import EnrichmentError
from .schemas import Coordinates, WeatherData

logger = logging.getLogger(__name__)

CURRENT_FIELDS = "temperature_2m,relative_humidity_2m,surface_pressure"


class ContextProvider(Protocol):
    """One-shot async context lookups. Failures raise EnrichmentError."""

    async def fetch_weather(self, coords: Coordinates) -> WeatherData:
        ...

    async def reverse_geocode(self, coords: Coordinates) -> str:
        ...


def parse_open_meteo_payload(payload: Dict[str, Any]) -> WeatherData:
    """Extract current conditions from an Open-Meteo forecast response."""
    current = payload.get("current") if isinstance(payload, dict) else None
    if not isinstance(current, dict):
        raise EnrichmentError("weather response has no current conditions")
    try:
        humidity = int(round(float(current["relative_humidity_2m"])))
        return WeatherData(
            temperature=float(current["temperature_2m"]),
            pressure=float(current["surface_pressure"]),
            humidity=max(0, min(100, humidity)),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise EnrichmentError(f"malformed weather response: {exc}") from exc


def format_place_name(address: Dict[str, Any], fallback: Optional[str] = None) -> Optional[str]:
    """Build "City, Region" from a Nominatim address block."""
    city = address.get("city") or address.get("town") or address.get("village")
    region = address.get("state") or address.get("country")
    parts = [part for part in (city, region) if part]
    if parts:
        return ", ".join(parts)
    return fallback or None


class OpenMeteoContextProvider:
    """Weather from Open-Meteo, place names from OpenStreetMap Nominatim."""

    def __init__(self, weather: WeatherConfig, geocoding: GeocodingConfig):
        self.weather_config = weather
        self.geocoding_config = geocoding
        self.geolocator = Nominatim(user_agent=geocoding.user_agent, timeout=geocoding.timeout)

    async def fetch_weather(self, coords: Coordinates) -> WeatherData:
        params = {
            "latitude": coords.latitude,
            "longitude": coords.longitude,
            "current": CURRENT_FIELDS,
        }
        timeout = aiohttp.ClientTimeout(total=self.weather_config.timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(self.weather_config.base_url, params=params) as resp:
                    if resp.status != 200:
                        raise EnrichmentError(f"weather error: {resp.status} {await resp.text()}")
                    payload = await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise EnrichmentError(f"weather request failed: {exc}") from exc
        return parse_open_meteo_payload(payload)

    async def reverse_geocode(self, coords: Coordinates) -> str:
        try:
            location = await asyncio.to_thread(
                self.geolocator.reverse,
                (coords.latitude, coords.longitude),
                language=self.geocoding_config.language,
            )
        except GeopyError as exc:
            raise EnrichmentError(f"reverse geocoding failed: {exc}") from exc
        if not location or not location.raw:
            raise EnrichmentError("no place found for coordinates")
        name = format_place_name(location.raw.get("address", {}), fallback=location.address)
        if not name:
            raise EnrichmentError("place has no usable name")
        return name
