"""Configuration loading for the mood journal pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


def _resolve_path(raw_path: str, base_dir: Path) -> str:
    path = Path(raw_path).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)


@dataclass
class PathsConfig:
    """Filesystem locations used by the stores."""

    store_path: str = "data/mood_journal.db"


@dataclass
class PipelineConfig:
    """Debounce window and enrichment time bounds, in seconds."""

    debounce_seconds: float = 0.5
    weather_timeout: float = 5.0
    location_timeout: float = 10.0
    geocode_timeout: float = 5.0


@dataclass
class SuggestionConfig:
    """Suggestion policy settings."""

    policy: str = "correlation"
    min_confidence: float = 0.7
    max_confidence: float = 0.9
    min_history: int = 7
    seed: Optional[int] = None


@dataclass
class WeatherConfig:
    """Open-Meteo weather settings."""

    base_url: str = "https://api.open-meteo.com/v1/forecast"
    timeout: float = 5.0


@dataclass
class GeocodingConfig:
    """Nominatim reverse-geocoding settings."""

    user_agent: str = "mood-journal"
    timeout: float = 5.0
    language: str = "en"


@dataclass
class LocationConfig:
    """Where current coordinates come from."""

    provider: str = "static"
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    ip_url: str = "http://ip-api.com/json"
    timeout: float = 5.0


@dataclass
class LoggingConfig:
    """Console and rotating-file logging."""

    level: str = "INFO"
    file: Optional[str] = None
    max_bytes: int = 10_000_000
    backup_count: int = 5


@dataclass
class AppConfig:
    """Top-level app configuration."""

    paths: PathsConfig = field(default_factory=PathsConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    suggestion: SuggestionConfig = field(default_factory=SuggestionConfig)
    weather: WeatherConfig = field(default_factory=WeatherConfig)
    geocoding: GeocodingConfig = field(default_factory=GeocodingConfig)
    location: LocationConfig = field(default_factory=LocationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base_dir: Optional[Path] = None) -> "AppConfig":
        """Build config from a dictionary."""
        base = Path.cwd() if base_dir is None else base_dir

        paths_data = data.get("paths", {})
        paths = PathsConfig(
            store_path=_resolve_path(paths_data.get("store_path", "data/mood_journal.db"), base),
        )

        logging_data = dict(data.get("logging", {}))
        if logging_data.get("file"):
            logging_data["file"] = _resolve_path(logging_data["file"], base)

        return cls(
            paths=paths,
            pipeline=PipelineConfig(**data.get("pipeline", {})),
            suggestion=SuggestionConfig(**data.get("suggestion", {})),
            weather=WeatherConfig(**data.get("weather", {})),
            geocoding=GeocodingConfig(**data.get("geocoding", {})),
            location=LocationConfig(**data.get("location", {})),
            logging=LoggingConfig(**logging_data),
        )

    @classmethod
    def from_yaml(cls, path: str) -> "AppConfig":
        """Load config from YAML."""
        config_path = Path(path).resolve()
        with config_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        return cls.from_dict(data, base_dir=config_path.parent)
