"""CLI entrypoint for one-shot score refreshes."""

from __future__ import annotations

import argparse
import asyncio
import logging

from livescores.db import Base, SessionLocal, engine
from livescores.ingestion.provider import build_provider
from livescores.ingestion.schema import SportType
from livescores.ingestion.sports import TRACKED_SPORTS, parse_sport
from livescores.scores.service import ScoreService
from livescores.scores.store import ScoreStore
from livescores.settings import get_or_create_settings, load_config, snapshot_settings


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Refresh cached live scores for a list of sports.",
    )
    parser.add_argument(
        "--sports",
        type=str,
        default=",".join(sport.value for sport in TRACKED_SPORTS),
        help="Comma-separated list of sports (e.g., football,basketball).",
    )
    parser.add_argument(
        "--cleanup-days",
        type=int,
        default=None,
        help="Also delete final games completed more than N days ago.",
    )
    return parser.parse_args()


def _parse_sports(raw: str) -> list[SportType]:
    names = [name.strip().lower() for name in raw.split(",") if name.strip()]
    invalid = [name for name in names if parse_sport(name) is None]
    if invalid:
        supported = ", ".join(sport.value for sport in SportType)
        raise SystemExit(f"Unsupported sports: {', '.join(invalid)}. Supported: {supported}")
    if not names:
        raise SystemExit("No sports provided. Use --sports football,basketball,...")
    return [parse_sport(name) for name in names]


async def _run(sports: list[SportType], cleanup_days: int | None) -> dict[str, int]:
    config = load_config()
    with SessionLocal() as db:
        snapshot = snapshot_settings(get_or_create_settings(db, config))
    service = ScoreService(
        ScoreStore(SessionLocal),
        build_provider(snapshot, config),
        cache_ttl_seconds=config.cache_ttl_seconds,
    )

    results: dict[str, int] = {}
    for sport in sports:
        try:
            results[sport.value] = await service.refresh_scores(sport)
        except Exception:
            logging.exception("Refresh failed sport=%s", sport.value)
            results[sport.value] = 0

    if cleanup_days is not None:
        deleted = await service.cleanup_old_scores(cleanup_days)
        logging.info("Cleanup done: deleted=%s days=%s", deleted, cleanup_days)
    return results


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    args = _parse_args()
    sports = _parse_sports(args.sports)
    Base.metadata.create_all(bind=engine)

    logging.info("Starting refresh sports=%s", ",".join(sport.value for sport in sports))
    results = asyncio.run(_run(sports, args.cleanup_days))
    logging.info("Done: updated=%s results=%s", sum(results.values()), results)


if __name__ == "__main__":
    main()
