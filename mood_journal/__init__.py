"""Mood journal: context-enriched well-being entries with debounced suggestions."""

from .config import AppConfig
from .pipeline import MoodPipeline

__all__ = ["AppConfig", "MoodPipeline"]
