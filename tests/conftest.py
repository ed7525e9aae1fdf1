from __future__ import annotations

import asyncio
import dataclasses
from typing import List, Optional

import pytest

from mood_journal.config import PipelineConfig
from mood_journal.errors import EnrichmentError, PersistenceWriteError
from mood_journal.pipeline import MoodPipeline
from mood_journal.schemas import Coordinates, MoodEntry, Suggestion, WeatherData
from mood_journal.storage import EntryStore, MemoryKeyValueStore, ProfileStore


WEATHER = WeatherData(temperature=21.5, pressure=1012.25, humidity=55)
BERLIN = Coordinates(latitude=52.52, longitude=13.405)


class FakeContext:
    """Context provider with scripted outcomes."""

    def __init__(self, weather=WEATHER, place: Optional[str] = "Berlin, Berlin", delay: float = 0.0):
        self.weather = weather
        self.place = place
        self.delay = delay
        self.weather_calls: List[Coordinates] = []
        self.geocode_calls: List[Coordinates] = []

    async def fetch_weather(self, coords: Coordinates) -> WeatherData:
        self.weather_calls.append(coords)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.weather is None:
            raise EnrichmentError("weather unavailable")
        return self.weather

    async def reverse_geocode(self, coords: Coordinates) -> str:
        self.geocode_calls.append(coords)
        if self.place is None:
            raise EnrichmentError("geocoder unavailable")
        return self.place


class FakeLocation:
    def __init__(self, coords: Optional[Coordinates] = BERLIN):
        self.coords = coords
        self.calls = 0

    async def request_once(self) -> Coordinates:
        self.calls += 1
        if self.coords is None:
            raise EnrichmentError("location denied")
        return self.coords


class CountingEngine:
    """Records every draft it is asked about."""

    def __init__(self):
        self.calls: List[MoodEntry] = []
        self.feedback: List[tuple] = []

    def suggest(self, draft, history) -> Suggestion:
        self.calls.append(dataclasses.replace(draft))
        return Suggestion(
            predicted_mood=draft.mood,
            confidence=0.8,
            possible_cause="Sleep pattern",
            solution="Sleep more.",
        )

    def record_feedback(self, suggestion, was_accurate) -> None:
        self.feedback.append((suggestion, was_accurate))


class FailingBackend(MemoryKeyValueStore):
    """Accepts reads, rejects writes while ``fail`` is set."""

    def __init__(self, fail: bool = True):
        super().__init__()
        self.fail = fail

    def set(self, key: str, value: bytes) -> None:
        if self.fail:
            raise PersistenceWriteError(key, "disk full")
        super().set(key, value)


@pytest.fixture
def backend():
    return MemoryKeyValueStore()


@pytest.fixture
def make_pipeline(backend):
    """Build a pipeline on the running loop with fakes; override parts via kwargs."""

    def factory(**overrides) -> MoodPipeline:
        kv = overrides.pop("backend", backend)
        settings = overrides.pop(
            "settings",
            PipelineConfig(debounce_seconds=0.05, weather_timeout=0.2, location_timeout=0.2, geocode_timeout=0.2),
        )
        parts = {
            "entry_store": EntryStore(kv),
            "profile_store": ProfileStore(kv),
            "context_provider": FakeContext(),
            "location_source": FakeLocation(),
            "engine": CountingEngine(),
        }
        parts.update(overrides)
        return MoodPipeline(settings=settings, **parts)

    return factory
