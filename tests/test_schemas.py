from __future__ import annotations

import random

import pytest

from mood_journal.schemas import FIELD_RANGES, MoodEntry, UserProfile
from mood_journal.seeding import generate_sample_entries


def test_new_entries_get_unique_ids_and_defaults():
    first, second = MoodEntry(), MoodEntry()
    assert first.id != second.id
    assert first.date.tzinfo is not None
    assert (first.mood, first.intensity, first.sleep_hours) == ("😐", 3, 7.0)
    assert (first.stress_level, first.exercise_minutes, first.headache_intensity) == (3, 30, 0)
    assert first.weather_context is None


def test_update_clamps_instead_of_rejecting():
    entry = MoodEntry()
    entry.update(intensity=0, stress_level=7, sleep_hours=30, exercise_minutes=-5, headache_intensity=4.6)
    assert entry.intensity == 1
    assert entry.stress_level == 5
    assert entry.sleep_hours == 24.0
    assert entry.exercise_minutes == 0
    assert entry.headache_intensity == 5


def test_update_handles_nan_and_infinity():
    entry = MoodEntry(intensity=4, sleep_hours=6.5)
    entry.update(intensity=float("nan"), exercise_minutes=float("inf"), sleep_hours=float("nan"))
    assert entry.intensity == 4
    assert entry.exercise_minutes == 240
    assert entry.sleep_hours == 6.5

    entry.update(stress_level=float("-inf"), headache_intensity="severe")
    assert entry.stress_level == 1
    assert entry.headache_intensity == 0


def test_clamp_fields_repairs_direct_assignment():
    entry = MoodEntry()
    entry.intensity = 99
    entry.sleep_hours = float("nan")
    entry.exercise_minutes = float("inf")
    entry.clamp_fields(fallbacks={"sleep_hours": 8.0})
    assert entry.intensity == 5
    assert entry.sleep_hours == 8.0
    assert entry.exercise_minutes == 240
    assert isinstance(entry.exercise_minutes, int)


def test_update_keeps_identity_and_rejects_unknown_fields():
    entry = MoodEntry()
    original = (entry.id, entry.date)
    entry.update(id="other", date=None, mood="😊")
    assert (entry.id, entry.date) == original
    assert entry.mood == "😊"
    with pytest.raises(TypeError):
        entry.update(energy=3)


def test_profile_coordinates_are_set_together():
    profile = UserProfile()
    assert profile.latitude is None and profile.longitude is None
    profile.set_coordinates(-33.87, 151.21)
    assert (profile.latitude, profile.longitude) == (-33.87, 151.21)


def test_generated_entries_respect_ranges():
    entries = generate_sample_entries(200, rng=random.Random(11))
    assert len({entry.id for entry in entries}) == 200
    for entry in entries:
        for name, (low, high) in FIELD_RANGES.items():
            assert low <= getattr(entry, name) <= high
        weather = entry.weather_context
        assert -5.0 <= weather.temperature <= 35.0
        assert 980.0 <= weather.pressure <= 1040.0
        assert 20 <= weather.humidity <= 100


def test_generate_zero_entries():
    assert generate_sample_entries(0) == []
