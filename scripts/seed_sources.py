#!/usr/bin/env python
"""Seed feed sources from config/sources.yaml.

Sources are upserted by URL: new URLs are created, existing ones get
their name, category, personas, interval, label and active flag updated.
Poll bookkeeping is left untouched.

Run with: uv run python scripts/seed_sources.py [--file config/sources.yaml] [--create-tables]
"""

import argparse
import asyncio
import sys
from pathlib import Path

from caution_feed.core.config import get_config
from caution_feed.core.config_loader import load_source_configs
from caution_feed.core.container import get_container
from caution_feed.core.database import close_db, init_db
from caution_feed.core.exceptions import CautionFeedError
from caution_feed.core.logging import get_logger, setup_logging

logger = get_logger(__name__)


async def seed_sources(path: Path, create_tables: bool = False) -> tuple[int, int]:
    """Load the seed file and upsert its sources.

    Args:
        path: YAML seed file
        create_tables: Create missing tables first (development only)

    Returns:
        Tuple of (created, updated) counts
    """
    config = get_config()
    container = get_container()
    engine = container.infrastructure.db_engine()

    try:
        if create_tables:
            await init_db(engine)

        sources = load_source_configs(
            path,
            known_personas=config.known_personas,
            min_poll_interval_ms=config.feed_min_poll_interval_ms,
        )
        registry = container.services.source_registry()
        return await registry.upsert_sources(sources)
    finally:
        await close_db(engine)


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Seed CautionFeed feed sources")
    parser.add_argument(
        "--file",
        type=Path,
        default=Path(get_config().feed_sources_file),
        help="Source seed file (default: FEED_SOURCES_FILE)",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create tables before seeding (use Alembic in production)",
    )
    args = parser.parse_args()

    setup_logging()
    try:
        created, updated = asyncio.run(seed_sources(args.file, args.create_tables))
    except CautionFeedError as e:
        logger.error("Seeding failed", **e.to_dict())
        sys.exit(1)

    print(f"Seeded feed sources: {created} created, {updated} updated")


if __name__ == "__main__":
    main()
