"""One-shot current-location sources."""

from __future__ import annotations

import asyncio
from typing import Optional, Protocol

import aiohttp

from .config import LocationConfig
from .errors import EnrichmentError
from .schemas import Coordinates


class LocationSource(Protocol):
    """Resolves once with coordinates or raises EnrichmentError."""

    async def request_once(self) -> Coordinates:
        ...


class StaticLocationSource:
    """Fixed coordinates, e.g. from config."""

    def __init__(self, coords: Optional[Coordinates] = None):
        self.coords = coords

    async def request_once(self) -> Coordinates:
        if self.coords is None:
            raise EnrichmentError("no static location configured")
        return self.coords


class IPLocationSource:
    """Approximate coordinates from an IP geolocation service."""

    def __init__(self, url: str = "http://ip-api.com/json", timeout: float = 5.0):
        self.url = url
        self.timeout = timeout

    async def request_once(self) -> Coordinates:
        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
                async with session.get(self.url) as resp:
                    if resp.status != 200:
                        raise EnrichmentError(f"location error: {resp.status}")
                    payload = await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise EnrichmentError(f"location request failed: {exc}") from exc

        latitude = payload.get("lat", payload.get("latitude"))
        longitude = payload.get("lon", payload.get("longitude"))
        if latitude is None or longitude is None:
            raise EnrichmentError("location response has no coordinates")
        return Coordinates(latitude=float(latitude), longitude=float(longitude))


def build_location_source(config: LocationConfig) -> LocationSource:
    if config.provider == "ip":
        return IPLocationSource(url=config.ip_url, timeout=config.timeout)
    if config.provider != "static":
        raise ValueError(f"unknown location provider {config.provider!r}")
    coords = None
    if config.latitude is not None and config.longitude is not None:
        coords = Coordinates(latitude=float(config.latitude), longitude=float(config.longitude))
    return StaticLocationSource(coords)
