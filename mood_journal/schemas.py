"""Core data structures shared across modules."""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from dateutil import parser as dt_parser


MOOD_VOCABULARY = ["😊", "😐", "😔", "😡", "😴", "😰"]
DEFAULT_MOOD = "😐"

DEFAULT_AGE = 0
DEFAULT_GENDER = "unspecified"

# (low, high) per numeric field, inclusive.
FIELD_RANGES: Dict[str, tuple] = {
    "intensity": (1, 5),
    "stress_level": (1, 5),
    "headache_intensity": (0, 10),
    "sleep_hours": (0.0, 24.0),
    "exercise_minutes": (0, 240),
}

# Values a NaN or unparsable edit falls back to when the field has none.
FIELD_DEFAULTS: Dict[str, Any] = {
    "intensity": 3,
    "stress_level": 3,
    "headache_intensity": 0,
    "sleep_hours": 7.0,
    "exercise_minutes": 30,
}

_IMMUTABLE_FIELDS = {"id", "date"}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


def _as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def clamp_field(name: str, value: Any, fallback: Any = None) -> Any:
    """Clamp a numeric entry field into its allowed range.

    NaN or non-numeric input yields ``fallback`` (or the field default);
    infinities clamp to the nearest bound.
    """
    low, high = FIELD_RANGES[name]
    number = _as_float(value)
    if math.isnan(number):
        number = _as_float(fallback)
    if math.isnan(number):
        number = float(FIELD_DEFAULTS[name])
    number = max(float(low), min(float(high), number))
    if isinstance(low, float):
        return number
    return int(round(number))


def _parse_date(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return dt_parser.isoparse(str(value))


@dataclass
class WeatherData:
    """Weather observed at commit time."""

    temperature: float
    pressure: float
    humidity: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "temperature": self.temperature,
            "pressure": self.pressure,
            "humidity": self.humidity,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WeatherData":
        return cls(
            temperature=float(data["temperature"]),
            pressure=float(data["pressure"]),
            humidity=int(data["humidity"]),
        )


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass
class MoodEntry:
    """One well-being observation. The draft is a MoodEntry too."""

    id: str = field(default_factory=_new_id)
    date: datetime = field(default_factory=_utcnow)
    mood: str = DEFAULT_MOOD
    intensity: int = 3
    sleep_hours: float = 7.0
    stress_level: int = 3
    exercise_minutes: int = 30
    headache_intensity: int = 0
    weather_context: Optional[WeatherData] = None

    def update(self, **changes: Any) -> None:
        """Apply field edits, clamping numeric values into range.

        ``id`` and ``date`` are fixed at creation and silently kept.
        """
        known = {f.name for f in fields(self)}
        for name, value in changes.items():
            if name not in known:
                raise TypeError(f"MoodEntry has no field {name!r}")
            if name in _IMMUTABLE_FIELDS:
                continue
            if name in FIELD_RANGES:
                value = clamp_field(name, value, fallback=getattr(self, name))
            elif name == "mood":
                value = str(value)
            setattr(self, name, value)

    def clamp_fields(self, fallbacks: Optional[Dict[str, Any]] = None) -> None:
        """Bring every numeric field back into range after direct assignment.

        ``fallbacks`` supplies per-field values to use where a field holds NaN
        or something non-numeric.
        """
        fallbacks = fallbacks or {}
        for name in FIELD_RANGES:
            setattr(self, name, clamp_field(name, getattr(self, name), fallback=fallbacks.get(name)))
        self.mood = str(self.mood)

    def same_values(self, other: "MoodEntry") -> bool:
        """Compare the user-editable fields only."""
        return all(
            getattr(self, name) == getattr(other, name)
            for name in ("mood", *FIELD_RANGES)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "mood": self.mood,
            "intensity": self.intensity,
            "sleep_hours": self.sleep_hours,
            "stress_level": self.stress_level,
            "exercise_minutes": self.exercise_minutes,
            "headache_intensity": self.headache_intensity,
            "weather_context": self.weather_context.to_dict() if self.weather_context else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MoodEntry":
        weather = data.get("weather_context")
        return cls(
            id=str(data["id"]),
            date=_parse_date(data["date"]),
            mood=str(data["mood"]),
            intensity=int(data["intensity"]),
            sleep_hours=float(data["sleep_hours"]),
            stress_level=int(data["stress_level"]),
            exercise_minutes=int(data["exercise_minutes"]),
            headache_intensity=int(data["headache_intensity"]),
            weather_context=WeatherData.from_dict(weather) if weather else None,
        )


@dataclass
class UserProfile:
    """Single per-installation profile."""

    age: int = DEFAULT_AGE
    gender: str = DEFAULT_GENDER
    location: Optional[str] = None
    coordinates: Optional[Coordinates] = None

    @property
    def latitude(self) -> Optional[float]:
        return self.coordinates.latitude if self.coordinates else None

    @property
    def longitude(self) -> Optional[float]:
        return self.coordinates.longitude if self.coordinates else None

    def set_coordinates(self, latitude: float, longitude: float) -> None:
        self.coordinates = Coordinates(latitude=float(latitude), longitude=float(longitude))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "age": self.age,
            "gender": self.gender,
            "location": self.location,
            "latitude": self.latitude,
            "longitude": self.longitude,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserProfile":
        latitude = data.get("latitude")
        longitude = data.get("longitude")
        coordinates = None
        if latitude is not None and longitude is not None:
            coordinates = Coordinates(latitude=float(latitude), longitude=float(longitude))
        location = data.get("location")
        return cls(
            age=max(0, int(data.get("age", DEFAULT_AGE))),
            gender=str(data.get("gender", DEFAULT_GENDER)),
            location=str(location) if location is not None else None,
            coordinates=coordinates,
        )


@dataclass
class Suggestion:
    """Transient inference result; never persisted."""

    predicted_mood: str
    confidence: float
    possible_cause: str
    solution: str
    created_at: datetime = field(default_factory=_utcnow)
