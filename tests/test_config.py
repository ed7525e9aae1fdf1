from __future__ import annotations

from pathlib import Path

from mood_journal.config import AppConfig


def test_defaults():
    cfg = AppConfig()
    assert cfg.pipeline.debounce_seconds == 0.5
    assert cfg.suggestion.min_confidence == 0.7
    assert cfg.suggestion.max_confidence == 0.9
    assert cfg.location.provider == "static"


def test_from_dict_resolves_relative_paths(tmp_path):
    cfg = AppConfig.from_dict(
        {
            "paths": {"store_path": "data/j.db"},
            "pipeline": {"weather_timeout": 1.5},
            "logging": {"file": "logs/app.log", "level": "DEBUG"},
        },
        base_dir=tmp_path,
    )
    assert Path(cfg.paths.store_path) == (tmp_path / "data" / "j.db").resolve()
    assert Path(cfg.logging.file) == (tmp_path / "logs" / "app.log").resolve()
    assert cfg.pipeline.weather_timeout == 1.5
    assert cfg.pipeline.debounce_seconds == 0.5


def test_from_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "suggestion:\n  policy: random\n  seed: 4\nlocation:\n  provider: static\n  latitude: 48.1\n  longitude: 11.6\n",
        encoding="utf-8",
    )
    cfg = AppConfig.from_yaml(str(path))
    assert cfg.suggestion.policy == "random"
    assert cfg.suggestion.seed == 4
    assert (cfg.location.latitude, cfg.location.longitude) == (48.1, 11.6)
    assert Path(cfg.paths.store_path) == (tmp_path / "data" / "mood_journal.db").resolve()


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    cfg = AppConfig.from_yaml(str(path))
    assert cfg.logging.file is None
    assert cfg.weather.base_url.startswith("https://api.open-meteo.com")
