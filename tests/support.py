"""Shared fixtures for the score cache tests."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from livescores.db import build_session_factory
from livescores.errors import ProviderError
from livescores.ingestion.mock_games import generate_games
from livescores.ingestion.schema import GameRecord, GameStatus, SportType
from livescores.scores.store import ScoreStore

NOW = datetime(2026, 3, 1, 15, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


def make_memory_store() -> ScoreStore:
    return ScoreStore(build_session_factory("sqlite://"))


def make_record(
    game_id: str,
    *,
    sport: SportType = SportType.BASKETBALL,
    status: GameStatus = GameStatus.SCHEDULED,
    scheduled_at: datetime | None = None,
    home_score: int = 0,
    away_score: int = 0,
    started_at: datetime | None = None,
    completed_at: datetime | None = None,
    home_team: str = "Home",
    away_team: str = "Away",
    metadata: dict | None = None,
) -> GameRecord:
    return GameRecord(
        game_id=game_id,
        sport_type=sport,
        home_team=home_team,
        away_team=away_team,
        status=status,
        scheduled_at=scheduled_at or NOW,
        home_score=home_score,
        away_score=away_score,
        started_at=started_at,
        completed_at=completed_at,
        metadata=metadata or {},
    )


class FakeProvider:
    """In-memory provider that counts calls and can be told to fail."""

    mode = "mock"

    def __init__(
        self,
        games: dict[SportType, list[GameRecord]] | None = None,
        *,
        failing_sports: set[SportType] | None = None,
        by_id: dict[str, GameRecord] | None = None,
    ) -> None:
        self.games = games or {}
        self.failing_sports = failing_sports or set()
        self.by_id = by_id or {}
        self.live_calls: list[SportType] = []
        self.id_calls: list[str] = []
        self.upcoming_calls: list[tuple[SportType, int]] = []

    def synthetic_live(self, sport: SportType, game_date: date | None = None) -> list[GameRecord]:
        return generate_games(sport, game_date or NOW.date(), now=NOW)

    def synthetic_upcoming(self, sport: SportType, days: int = 7) -> list[GameRecord]:
        games: list[GameRecord] = []
        for offset in range(1, days + 1):
            games.extend(generate_games(sport, NOW.date() + timedelta(days=offset), now=NOW))
        return games

    async def fetch_live(self, sport: SportType, game_date: date | None = None) -> list[GameRecord]:
        self.live_calls.append(sport)
        if sport in self.failing_sports:
            raise ProviderError(f"{sport.value} feed is down", reason="network")
        return list(self.games.get(sport, []))

    async def fetch_by_id(self, game_id: str) -> GameRecord | None:
        self.id_calls.append(game_id)
        return self.by_id.get(game_id)

    async def fetch_upcoming(self, sport: SportType, days: int = 7) -> list[GameRecord]:
        self.upcoming_calls.append((sport, days))
        return [game for game in self.games.get(sport, []) if game.status == GameStatus.SCHEDULED]
