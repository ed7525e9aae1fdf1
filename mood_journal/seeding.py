"""Synthetic sample history for demos and tests."""

from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from .schemas import MOOD_VOCABULARY, MoodEntry, WeatherData


def generate_sample_entries(
    n: int,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> List[MoodEntry]:
    """Return ``n`` range-valid entries dated now, now-1d, now-2d, ..."""
    if n < 0:
        raise ValueError("n must be non-negative")
    now = now or datetime.now(timezone.utc)
    rng = rng or random.Random()

    entries: List[MoodEntry] = []
    for day in range(n):
        weather = WeatherData(
            temperature=round(rng.uniform(-5.0, 35.0), 1),
            pressure=round(rng.uniform(980.0, 1040.0), 1),
            humidity=rng.randint(20, 100),
        )
        entries.append(
            MoodEntry(
                date=now - timedelta(days=day),
                mood=rng.choice(MOOD_VOCABULARY),
                intensity=rng.randint(1, 5),
                sleep_hours=round(rng.uniform(4.0, 10.0), 1),
                stress_level=rng.randint(1, 5),
                exercise_minutes=rng.randint(0, 120),
                headache_intensity=rng.randint(0, 10),
                weather_context=weather,
            )
        )
    return entries
