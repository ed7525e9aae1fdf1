"""Suggestion policies: history correlation first, reference heuristic fallback."""

from __future__ import annotations

import logging
import random
from collections import Counter
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

import numpy as np

from .config import SuggestionConfig
from .schemas import MoodEntry, Suggestion

logger = logging.getLogger(__name__)


CAUSE_SLEEP = "Sleep pattern"
CAUSE_EXERCISE = "Exercise routine"
CAUSE_STRESS = "Stress level"
CAUSE_WEATHER = "Weather conditions"

REMEDIES: Dict[str, str] = {
    CAUSE_SLEEP: "Try to keep a consistent bedtime and aim for 7-9 hours of sleep.",
    CAUSE_EXERCISE: "A 20-30 minute walk or light workout can lift your mood.",
    CAUSE_STRESS: "Take a few minutes for slow breathing or a short break away from screens.",
    CAUSE_WEATHER: "Get some daylight when you can and plan an indoor activity you enjoy.",
}
CAUSES = list(REMEDIES)


class SuggestionEngine(Protocol):
    """Pure, fast, total inference over the draft and history."""

    def suggest(self, draft: MoodEntry, history: Sequence[MoodEntry]) -> Suggestion:
        ...

    def record_feedback(self, suggestion: Suggestion, was_accurate: bool) -> None:
        ...


class RandomSuggestionEngine:
    """Reference policy: random cause, fixed remedy, confidence in a fixed band."""

    def __init__(
        self,
        min_confidence: float = 0.7,
        max_confidence: float = 0.9,
        rng: Optional[random.Random] = None,
    ):
        self.min_confidence = min_confidence
        self.max_confidence = max_confidence
        self.rng = rng or random.Random()
        self.feedback: Counter = Counter()

    def suggest(self, draft: MoodEntry, history: Sequence[MoodEntry]) -> Suggestion:
        cause = self.rng.choice(CAUSES)
        confidence = self.rng.uniform(self.min_confidence, self.max_confidence)
        return Suggestion(
            predicted_mood=draft.mood,
            confidence=confidence,
            possible_cause=cause,
            solution=REMEDIES[cause],
        )

    def record_feedback(self, suggestion: Suggestion, was_accurate: bool) -> None:
        self.feedback[(suggestion.possible_cause, bool(was_accurate))] += 1
        logger.info(
            "Suggestion feedback: cause=%r accurate=%s confidence=%.2f suggested_at=%s",
            suggestion.possible_cause,
            was_accurate,
            suggestion.confidence,
            suggestion.created_at.isoformat(),
        )

    def feedback_summary(self) -> Dict[str, Dict[str, int]]:
        """Accurate / inaccurate counts per cause."""
        out: Dict[str, Dict[str, int]] = {}
        for (cause, accurate), count in self.feedback.items():
            bucket = out.setdefault(cause, {"accurate": 0, "inaccurate": 0})
            bucket["accurate" if accurate else "inaccurate"] += count
        return out


def _feature_columns(history: Sequence[MoodEntry]) -> List[Tuple[str, List[float], List[float]]]:
    """(cause, intensity values, feature values) for each candidate factor."""
    intensity = [float(entry.intensity) for entry in history]
    columns = [
        (CAUSE_SLEEP, intensity, [float(entry.sleep_hours) for entry in history]),
        (CAUSE_EXERCISE, intensity, [float(entry.exercise_minutes) for entry in history]),
        (CAUSE_STRESS, intensity, [float(entry.stress_level) for entry in history]),
    ]
    with_weather = [entry for entry in history if entry.weather_context is not None]
    columns.append(
        (
            CAUSE_WEATHER,
            [float(entry.intensity) for entry in with_weather],
            [float(entry.weather_context.temperature) for entry in with_weather],
        )
    )
    return columns


def _pearson(x: List[float], y: List[float]) -> Optional[float]:
    if len(x) < 2:
        return None
    xs = np.asarray(x, dtype=np.float64)
    ys = np.asarray(y, dtype=np.float64)
    if np.std(xs) == 0 or np.std(ys) == 0:
        return None
    r = float(np.corrcoef(xs, ys)[0, 1])
    if np.isnan(r) or np.isinf(r):
        return None
    return r


class CorrelationSuggestionEngine(RandomSuggestionEngine):
    """Names the factor whose history correlates most strongly with intensity.

    Falls back to the reference policy when there are fewer than
    ``min_history`` entries or every factor is constant.
    """

    def __init__(
        self,
        min_history: int = 7,
        min_confidence: float = 0.7,
        max_confidence: float = 0.9,
        rng: Optional[random.Random] = None,
    ):
        super().__init__(min_confidence=min_confidence, max_confidence=max_confidence, rng=rng)
        self.min_history = min_history

    def suggest(self, draft: MoodEntry, history: Sequence[MoodEntry]) -> Suggestion:
        if len(history) < self.min_history:
            return super().suggest(draft, history)

        best: Optional[Tuple[str, float]] = None
        for cause, intensity, feature in _feature_columns(history):
            if len(feature) < self.min_history:
                continue
            r = _pearson(intensity, feature)
            if r is None:
                continue
            if best is None or abs(r) > abs(best[1]):
                best = (cause, r)

        if best is None:
            return super().suggest(draft, history)

        cause, r = best
        return Suggestion(
            predicted_mood=draft.mood,
            confidence=max(0.0, min(1.0, abs(r))),
            possible_cause=cause,
            solution=REMEDIES[cause],
        )


def build_engine(config: SuggestionConfig) -> RandomSuggestionEngine:
    rng = random.Random(config.seed)
    if config.policy == "random":
        return RandomSuggestionEngine(
            min_confidence=config.min_confidence,
            max_confidence=config.max_confidence,
            rng=rng,
        )
    if config.policy != "correlation":
        raise ValueError(f"unknown suggestion policy {config.policy!r}")
    return CorrelationSuggestionEngine(
        min_history=config.min_history,
        min_confidence=config.min_confidence,
        max_confidence=config.max_confidence,
        rng=rng,
    )
