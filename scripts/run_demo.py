"""End-to-end demo: locate -> seed -> edit draft -> suggestion -> enrich and commit."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from mood_journal.config import AppConfig  # noqa: E402
from mood_journal.logging_utils import setup_logging  # noqa: E402
from mood_journal.pipeline import MoodPipeline  # noqa: E402


async def run(config: AppConfig) -> None:
    pipeline = MoodPipeline.from_config(config)
    pipeline.subscribe(lambda topic, value: print(f"[update] {topic}"))

    profile = await pipeline.refresh_location()
    print("== Profile ==")
    print(f"location={profile.location} lat={profile.latitude} lon={profile.longitude}")

    if not pipeline.history:
        pipeline.seed_sample_history(30)
    print(f"\n== History == {len(pipeline.history)} entries")

    pipeline.edit_draft(mood="😔")
    pipeline.edit_draft(sleep_hours=5)
    pipeline.edit_draft(stress_level=4, exercise_minutes=0)
    await asyncio.sleep(config.pipeline.debounce_seconds + 0.2)

    suggestion = pipeline.last_suggestion
    print("\n== Suggestion ==")
    if suggestion is None:
        print("No suggestion computed.")
    else:
        print(
            f"mood={suggestion.predicted_mood} confidence={suggestion.confidence:.2f}\n"
            f"cause={suggestion.possible_cause}\n"
            f"solution={suggestion.solution}"
        )
        pipeline.record_feedback(suggestion, was_accurate=True)

    entry = await pipeline.commit()
    print("\n== Committed Entry ==")
    print(entry.to_dict())
    await pipeline.aclose()


def main() -> None:
    config_path = PROJECT_ROOT / "config.yaml"
    config = AppConfig.from_yaml(str(config_path))
    setup_logging(config.logging)
    asyncio.run(run(config))


if __name__ == "__main__":
    main()
