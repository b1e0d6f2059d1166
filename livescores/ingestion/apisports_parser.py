"""Parser for API-Sports game payloads."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from livescores.ingestion.schema import GameRecord, GameStatus, SportType
from livescores.ingestion.status import IN_PROGRESS_STATUSES, normalize_status


def _safe_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _clean_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_datetime(value: Any) -> datetime | None:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, ValueError, OSError):
            return None
    if isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
    return None


def _parse_scheduled_at(core: dict[str, Any], item: dict[str, Any]) -> datetime | None:
    date_value = core.get("date")
    if isinstance(date_value, dict):
        # american-football: {"date": "2025-11-07", "time": "00:20", "timestamp": ...}
        parsed = _parse_datetime(date_value.get("timestamp"))
        if parsed is not None:
            return parsed
        day = date_value.get("date")
        clock = date_value.get("time") or "00:00"
        if isinstance(day, str):
            return _parse_datetime(f"{day}T{clock}")
        return None
    parsed = _parse_datetime(core.get("timestamp") or item.get("timestamp"))
    if parsed is not None:
        return parsed
    return _parse_datetime(date_value)


def _extract_core(item: dict[str, Any]) -> dict[str, Any]:
    for key in ("game", "fixture"):
        nested = item.get(key)
        if isinstance(nested, dict):
            return nested
    return item


def _extract_score(item: dict[str, Any], side: str) -> int:
    goals = item.get("goals")
    if isinstance(goals, dict):
        return max(_safe_int(goals.get(side)) or 0, 0)
    side_score = _as_dict(item.get("scores")).get(side)
    if isinstance(side_score, dict):
        side_score = side_score.get("total")
    return max(_safe_int(side_score) or 0, 0)


def _extract_venue(core: dict[str, Any]) -> str | None:
    venue = core.get("venue")
    if isinstance(venue, dict):
        return _clean_str(venue.get("name"))
    return _clean_str(venue)


def _extract_clock(item: dict[str, Any], core: dict[str, Any], status: dict[str, Any]) -> str | None:
    timer = status.get("timer") or core.get("timer") or item.get("timer")
    if timer:
        return _clean_str(timer)
    elapsed = _safe_int(status.get("elapsed"))
    if elapsed is not None:
        return f"{elapsed}'"
    return None


def _build_metadata(item: dict[str, Any], core: dict[str, Any], raw_status: Any) -> dict[str, Any]:
    league = _as_dict(item.get("league"))
    metadata: dict[str, Any] = {
        "provider": "api-sports",
        "provider_game_id": core.get("id"),
        "league": league.get("name"),
        "season": league.get("season"),
        "raw_status": raw_status,
    }
    week = core.get("week") or item.get("week")
    if week:
        metadata["week"] = week
    stage = core.get("stage") or league.get("round")
    if stage:
        metadata["stage"] = stage
    return metadata


def build_game_id(sport: SportType, provider_game_id: Any) -> str:
    return f"{sport.value}_{provider_game_id}"


def parse_game(
    item: dict[str, Any],
    sport: SportType,
    *,
    now_utc: datetime | None = None,
) -> GameRecord | None:
    """Parse one API-Sports game into a GameRecord; None when it lacks an id or start time."""

    core = _extract_core(item)
    provider_game_id = _clean_str(core.get("id"))
    if provider_game_id is None:
        return None
    scheduled_at = _parse_scheduled_at(core, item)
    if scheduled_at is None:
        return None

    status_payload = _as_dict(core.get("status"))
    raw_status = status_payload.get("short") if status_payload else core.get("status")
    status = normalize_status(raw_status)

    teams = _as_dict(item.get("teams"))
    home = _as_dict(teams.get("home"))
    away = _as_dict(teams.get("away"))

    not_started = status == GameStatus.SCHEDULED
    in_progress = status in IN_PROGRESS_STATUSES
    now = now_utc or datetime.now(timezone.utc)

    return GameRecord(
        game_id=build_game_id(sport, provider_game_id),
        sport_type=sport,
        home_team=_clean_str(home.get("name")) or "TBD",
        away_team=_clean_str(away.get("name")) or "TBD",
        home_team_logo=_clean_str(home.get("logo")),
        away_team_logo=_clean_str(away.get("logo")),
        home_score=0 if not_started else _extract_score(item, "home"),
        away_score=0 if not_started else _extract_score(item, "away"),
        status=status,
        period=None if not_started else _clean_str(status_payload.get("long")),
        time_remaining=_extract_clock(item, core, status_payload) if in_progress else None,
        scheduled_at=scheduled_at,
        started_at=scheduled_at if in_progress else None,
        completed_at=now if status == GameStatus.FINAL else None,
        venue=_extract_venue(core),
        metadata=_build_metadata(item, core, raw_status),
    )


def parse_games(
    payload: list[dict[str, Any]],
    sport: SportType,
    *,
    now_utc: datetime | None = None,
) -> list[GameRecord]:
    """Parse an API-Sports ``response`` list, skipping malformed and duplicate games."""

    seen_game_ids: set[str] = set()
    parsed_games: list[GameRecord] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        record = parse_game(item, sport, now_utc=now_utc)
        if record is None or record.game_id in seen_game_ids:
            continue
        seen_game_ids.add(record.game_id)
        parsed_games.append(record)
    return parsed_games
