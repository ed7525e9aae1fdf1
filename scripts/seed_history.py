"""CLI entrypoint for seeding sample mood history into the configured store."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from mood_journal.config import AppConfig  # noqa: E402
from mood_journal.logging_utils import setup_logging  # noqa: E402
from mood_journal.pipeline import MoodPipeline  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed synthetic mood history.")
    parser.add_argument(
        "--config",
        type=str,
        default=str(PROJECT_ROOT / "config.yaml"),
        help="Path to YAML config.",
    )
    parser.add_argument(
        "--days",
        type=int,
        default=30,
        help="Number of daily entries to generate.",
    )
    return parser.parse_args()


async def _seed(config: AppConfig, days: int) -> int:
    pipeline = MoodPipeline.from_config(config)
    pipeline.seed_sample_history(days)
    await pipeline.aclose()
    return len(pipeline.history)


def main() -> None:
    args = parse_args()
    config = AppConfig.from_yaml(args.config)
    setup_logging(config.logging)
    total = asyncio.run(_seed(config, args.days))

    print("Seeding complete.")
    print(f"entries_added: {args.days}")
    print(f"total_entries: {total}")


if __name__ == "__main__":
    main()
