"""Orchestration layer: draft editing, debounced suggestions, enrichment and commit."""

from __future__ import annotations

import asyncio
import dataclasses
import functools
import logging
import random
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

from .config import AppConfig, PipelineConfig
from .context import ContextProvider, OpenMeteoContextProvider
from .debounce import Debouncer
from .errors import EnrichmentError, PersistenceWriteError
from .location import LocationSource, build_location_source
from .schemas import FIELD_RANGES, MoodEntry, Suggestion, UserProfile
from .seeding import generate_sample_entries
from .storage import EntryStore, ProfileStore, SQLiteKeyValueStore
from .suggestion import SuggestionEngine, build_engine

logger = logging.getLogger(__name__)

T = TypeVar("T")
Listener = Callable[[str, Any], None]

TOPIC_DRAFT = "draft"
TOPIC_HISTORY = "history"
TOPIC_SUGGESTION = "suggestion"
TOPIC_PROFILE = "profile"


def _discard_late_result(label: str, task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("Late %s request failed after timeout: %s", label, exc)
    else:
        logger.debug("Discarding late %s result", label)


class MoodPipeline:
    """Owns the draft, history, profile and latest suggestion.

    All methods must be called from the event loop that runs the pipeline.
    State changes are published to subscribers as ``listener(topic, value)``.
    """

    def __init__(
        self,
        entry_store: EntryStore,
        profile_store: ProfileStore,
        context_provider: ContextProvider,
        location_source: LocationSource,
        engine: SuggestionEngine,
        settings: Optional[PipelineConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        self.settings = settings or PipelineConfig()
        self.entry_store = entry_store
        self.profile_store = profile_store
        self.context_provider = context_provider
        self.location_source = location_source
        self.engine = engine
        self.rng = rng or random.Random()

        self.history: List[MoodEntry] = entry_store.load_all()
        self.profile: UserProfile = profile_store.load()
        self.draft = MoodEntry()
        self.last_suggestion: Optional[Suggestion] = None

        self._debouncer = Debouncer(self.settings.debounce_seconds)
        self._listeners: List[Listener] = []
        self._commit_lock = asyncio.Lock()
        self._location_lock = asyncio.Lock()

    @classmethod
    def from_config(cls, config: AppConfig) -> "MoodPipeline":
        backend = SQLiteKeyValueStore(config.paths.store_path)
        return cls(
            entry_store=EntryStore(backend),
            profile_store=ProfileStore(backend),
            context_provider=OpenMeteoContextProvider(config.weather, config.geocoding),
            location_source=build_location_source(config.location),
            engine=build_engine(config.suggestion),
            settings=config.pipeline,
            rng=random.Random(config.suggestion.seed),
        )

    # -------------------- Publishing --------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, topic: str, value: Any) -> None:
        for listener in list(self._listeners):
            try:
                listener(topic, value)
            except Exception:
                logger.exception("Listener failed on %r update", topic)

    # -------------------- Draft & suggestions --------------------
    def edit_draft(self, mutator: Optional[Callable[[MoodEntry], None]] = None, **changes: Any) -> MoodEntry:
        """Edit the draft and restart the suggestion quiescence window.

        Values set by ``mutator`` are clamped like keyword changes; identity,
        creation date and weather context stay owned by the pipeline.
        """
        if mutator is not None:
            draft = self.draft
            kept = (draft.id, draft.date, draft.weather_context)
            before = {name: getattr(draft, name) for name in FIELD_RANGES}
            mutator(draft)
            draft.id, draft.date, draft.weather_context = kept
            draft.clamp_fields(fallbacks=before)
        if changes:
            self.draft.update(**changes)
        self._publish(TOPIC_DRAFT, self.draft)
        self._debouncer.arm(self._recompute_suggestion)
        return self.draft

    @property
    def suggestion_pending(self) -> bool:
        return self._debouncer.pending

    def _recompute_suggestion(self) -> None:
        logger.debug("Quiescence window elapsed, recomputing suggestion")
        self.last_suggestion = self.engine.suggest(self.draft, list(self.history))
        self._publish(TOPIC_SUGGESTION, self.last_suggestion)

    def record_feedback(self, suggestion: Suggestion, was_accurate: bool) -> None:
        self.engine.record_feedback(suggestion, was_accurate)

    # -------------------- Enrichment --------------------
    async def _bounded(self, label: str, request: Awaitable[T], timeout: float) -> Optional[T]:
        """Await a one-shot request for at most ``timeout`` seconds.

        Returns None on failure or timeout. A timed-out request is left to
        finish on its own and its result is dropped.
        """
        task = asyncio.ensure_future(request)
        done, _ = await asyncio.wait({task}, timeout=timeout)
        if not done:
            logger.warning("%s request timed out after %.2fs", label, timeout)
            task.add_done_callback(functools.partial(_discard_late_result, label))
            return None
        try:
            return task.result()
        except EnrichmentError as exc:
            logger.warning("%s request failed: %s", label, exc)
        except Exception:
            logger.exception("%s request raised unexpectedly", label)
        return None

    # -------------------- Commit --------------------
    async def commit(self) -> MoodEntry:
        """Enrich the draft with weather when possible, persist it, reset the draft.

        Raises PersistenceWriteError if the entry could not be stored; the
        draft is then left untouched so the commit can be retried.
        """
        async with self._commit_lock:
            candidate = dataclasses.replace(self.draft)
            coords = self.profile.coordinates
            if coords is not None:
                weather = await self._bounded(
                    "weather",
                    self.context_provider.fetch_weather(coords),
                    self.settings.weather_timeout,
                )
                candidate.weather_context = weather

            self.entry_store.append(candidate)
            self.history.append(candidate)
            logger.info(
                "Committed entry %s (weather %s)",
                candidate.id,
                "attached" if candidate.weather_context else "absent",
            )
            self._publish(TOPIC_HISTORY, list(self.history))

            self.draft = MoodEntry()
            self._publish(TOPIC_DRAFT, self.draft)
            return candidate

    # -------------------- Profile --------------------
    async def refresh_location(self) -> UserProfile:
        """Geolocate, persist the coordinates, then reverse-geocode a place name.

        A failed step leaves the fields it would have written unchanged.
        """
        async with self._location_lock:
            coords = await self._bounded(
                "location",
                self.location_source.request_once(),
                self.settings.location_timeout,
            )
            if coords is None:
                return self.profile

            previous = dataclasses.replace(self.profile)
            self.profile.set_coordinates(coords.latitude, coords.longitude)
            self._save_profile(previous)
            self._publish(TOPIC_PROFILE, self.profile)

            name = await self._bounded(
                "geocoding",
                self.context_provider.reverse_geocode(coords),
                self.settings.geocode_timeout,
            )
            if name is None:
                return self.profile

            previous = dataclasses.replace(self.profile)
            self.profile.location = name
            self._save_profile(previous)
            logger.info("Profile location set to %r", name)
            self._publish(TOPIC_PROFILE, self.profile)
            return self.profile

    def _save_profile(self, previous: UserProfile) -> None:
        """Persist the profile; on failure put back the fields from ``previous``."""
        try:
            self.profile_store.save(self.profile)
        except PersistenceWriteError:
            for item in dataclasses.fields(previous):
                setattr(self.profile, item.name, getattr(previous, item.name))
            raise

    def update_profile(self, age: Optional[int] = None, gender: Optional[str] = None) -> UserProfile:
        previous = dataclasses.replace(self.profile)
        if age is not None:
            self.profile.age = max(0, int(age))
        if gender is not None:
            self.profile.gender = str(gender)
        self._save_profile(previous)
        self._publish(TOPIC_PROFILE, self.profile)
        return self.profile

    # -------------------- Sample data --------------------
    def seed_sample_history(self, n: int) -> List[MoodEntry]:
        """Append ``n`` synthetic daily entries in one batch."""
        entries = generate_sample_entries(n, rng=self.rng)
        self.entry_store.extend(entries)
        self.history.extend(entries)
        logger.info("Seeded %d sample entries", len(entries))
        self._publish(TOPIC_HISTORY, list(self.history))
        return entries

    async def aclose(self) -> None:
        self._debouncer.cancel()
