"""Quick probe for API-Sports availability."""

from __future__ import annotations

import argparse
import logging
from datetime import date

from livescores.errors import ProviderError
from livescores.ingestion.apisports_client import fetch_games
from livescores.ingestion.apisports_parser import parse_games
from livescores.ingestion.schema import SportType
from livescores.ingestion.sports import SPORT_ENDPOINTS, parse_sport
from livescores.settings import load_config


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Probe API-Sports for a sport/date and print the game count.",
    )
    parser.add_argument(
        "--sport",
        type=str,
        default="basketball",
        help="Sport (e.g., football, basketball, soccer).",
    )
    parser.add_argument(
        "--date",
        type=str,
        default="today",
        help="Date in YYYY-MM-DD format (default: today).",
    )
    return parser.parse_args()


def _normalize_sport(raw: str) -> SportType:
    sport = parse_sport(raw)
    if sport is None or sport not in SPORT_ENDPOINTS:
        supported = ", ".join(s.value for s in SPORT_ENDPOINTS)
        raise SystemExit(f"Unsupported sport: {raw}. Supported sports: {supported}")
    return sport


def _resolve_date(raw: str) -> date:
    cleaned = raw.strip().lower()
    if cleaned == "today":
        return date.today()
    try:
        return date.fromisoformat(cleaned)
    except ValueError:
        raise SystemExit("date must be YYYY-MM-DD or 'today'")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    args = _parse_args()
    sport = _normalize_sport(args.sport)
    target_date = _resolve_date(args.date)
    config = load_config()

    try:
        payload = fetch_games(
            sport,
            api_key=config.sports_api_key,
            game_date=target_date,
            timeout=config.sports_api_timeout_seconds,
        )
    except ProviderError as exc:
        logging.error("API-Sports error (%s): %s", exc.reason or "error", exc)
        raise SystemExit(1)

    games = parse_games(payload, sport)
    by_status: dict[str, int] = {}
    for game in games:
        by_status[game.status.value] = by_status.get(game.status.value, 0) + 1
    logging.info(
        "Fetched %s games (%s parsed) for sport=%s date=%s statuses=%s",
        len(payload),
        len(games),
        sport.value,
        target_date.isoformat(),
        by_status,
    )


if __name__ == "__main__":
    main()
