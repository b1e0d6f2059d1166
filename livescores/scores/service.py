"""Cache orchestrator: freshness decisions between the score store and the provider."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from livescores.errors import NotFoundError, ProviderError, ValidationError
from livescores.ingestion.provider import ScoreProvider
from livescores.ingestion.schema import GameRecord, GameStatus, SportType
from livescores.ingestion.sports import TRACKED_SPORTS, parse_sport
from livescores.schemas import CacheStatus, LiveScoresOut, ScoreOut
from livescores.scores.store import ScoreStore

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_SECONDS = 300
MAX_RANGE = timedelta(days=7)
UPCOMING_LIMIT = 5
RECENT_HOURS = 24
RECENT_LIMIT = 5
MIN_UPCOMING_DAYS = 1
MAX_UPCOMING_DAYS = 14


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_sport(value: str | SportType) -> SportType:
    sport = parse_sport(value)
    if sport is None:
        raise ValidationError(f"Invalid sport type: {value}")
    return sport


def validate_status(value: str | GameStatus) -> GameStatus:
    if isinstance(value, GameStatus):
        return value
    try:
        return GameStatus(str(value).strip().lower())
    except ValueError as exc:
        raise ValidationError(f"Invalid game status: {value}") from exc


class ScoreService:
    """Serves scores from the store and refreshes them from the provider once stale.

    A sport is fresh while the newest ``last_updated`` among its records is
    younger than the TTL. Reads of a stale or empty sport fetch from the
    provider, upsert every returned game, then answer from the store.
    """

    def __init__(
        self,
        store: ScoreStore,
        provider: ScoreProvider,
        *,
        cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
        now_fn: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.provider = provider
        self.cache_ttl_seconds = cache_ttl_seconds
        self._now = now_fn
        self._sport_locks: dict[SportType, asyncio.Lock] = {}

    def _lock_for(self, sport: SportType) -> asyncio.Lock:
        lock = self._sport_locks.get(sport)
        if lock is None:
            lock = asyncio.Lock()
            self._sport_locks[sport] = lock
        return lock

    def _age_seconds(self, last_update: datetime | None) -> float | None:
        if last_update is None:
            return None
        return (self._now() - last_update).total_seconds()

    def _is_stale(self, last_update: datetime | None) -> bool:
        age = self._age_seconds(last_update)
        return age is None or age >= self.cache_ttl_seconds

    async def _upsert_all(self, games: list[GameRecord]) -> int:
        count = 0
        for game in games:
            await asyncio.to_thread(self.store.upsert, game, now=self._now())
            count += 1
        return count

    async def _refresh_masked(self, sport: SportType) -> int:
        """Refresh for a read request: provider failures fall back to synthetic games."""
        try:
            games = await self.provider.fetch_live(sport)
        except ProviderError as exc:
            logger.warning(
                "Provider refresh failed for sport=%s, caching synthetic games: %s",
                sport.value,
                exc,
            )
            games = self.provider.synthetic_live(sport, self._now().date())
        return await self._upsert_all(games)

    async def get_live_scores(self, sport_type: str | SportType, force_refresh: bool = False) -> LiveScoresOut:
        sport = validate_sport(sport_type)

        async with self._lock_for(sport):
            cache_status = await asyncio.to_thread(self.store.get_cache_status, sport)
            if force_refresh or self._is_stale(cache_status.last_update):
                logger.info(
                    "Refreshing %s scores (forced=%s, last_update=%s)",
                    sport.value,
                    force_refresh,
                    cache_status.last_update,
                )
                await self._refresh_masked(sport)
                cache_status = await asyncio.to_thread(self.store.get_cache_status, sport)

        now = self._now()
        live = await asyncio.to_thread(self.store.find_live, sport)
        upcoming = await asyncio.to_thread(self.store.find_upcoming, sport, UPCOMING_LIMIT, now=now)
        recent = await asyncio.to_thread(
            self.store.find_recently_completed,
            sport,
            RECENT_HOURS,
            RECENT_LIMIT,
            now=now,
        )
        age = self._age_seconds(cache_status.last_update)
        return LiveScoresOut(
            live=live,
            upcoming=upcoming,
            recent=recent,
            cache_age_seconds=max(int(age), 0) if age is not None else None,
            last_update=cache_status.last_update,
        )

    async def get_game_by_id(self, game_id: str) -> ScoreOut:
        game_id = (game_id or "").strip()
        if not game_id:
            raise ValidationError("Game id is required")

        game = await asyncio.to_thread(self.store.find_by_game_id, game_id)
        if game is None or self._is_stale(game.last_updated):
            try:
                fetched = await self.provider.fetch_by_id(game_id)
            except ProviderError as exc:
                logger.warning("Provider lookup failed for game_id=%s, serving cached copy: %s", game_id, exc)
                fetched = None
            if fetched is not None:
                game = await asyncio.to_thread(self.store.upsert, fetched, now=self._now())

        if game is None:
            raise NotFoundError("Game not found")
        return game

    async def get_scores_by_date_range(
        self,
        sport_type: str | SportType,
        start: datetime,
        end: datetime,
    ) -> list[ScoreOut]:
        sport = validate_sport(sport_type)
        if start.tzinfo is None:
            start = start.replace(tzinfo=timezone.utc)
        if end.tzinfo is None:
            end = end.replace(tzinfo=timezone.utc)
        if start > end:
            raise ValidationError("Start date must be before end date")
        if end - start > MAX_RANGE:
            raise ValidationError("Date range cannot exceed 7 days")
        return await asyncio.to_thread(self.store.find_by_date_range, sport, start, end)

    async def get_upcoming_games(self, sport_type: str | SportType, days: int = 7) -> list[ScoreOut]:
        sport = validate_sport(sport_type)
        if not MIN_UPCOMING_DAYS <= days <= MAX_UPCOMING_DAYS:
            raise ValidationError(
                f"Days parameter must be between {MIN_UPCOMING_DAYS} and {MAX_UPCOMING_DAYS}"
            )
        try:
            games = await self.provider.fetch_upcoming(sport, days)
        except ProviderError as exc:
            logger.warning(
                "Provider upcoming fetch failed for sport=%s, caching synthetic games: %s",
                sport.value,
                exc,
            )
            games = self.provider.synthetic_upcoming(sport, days)
        await self._upsert_all(games)
        return await asyncio.to_thread(self.store.find_upcoming, sport, days * 5, now=self._now())

    async def get_games_by_status(
        self,
        status: str | GameStatus,
        sport_type: str | SportType | None = None,
    ) -> list[ScoreOut]:
        game_status = validate_status(status)
        sport = validate_sport(sport_type) if sport_type else None
        return await asyncio.to_thread(self.store.find_by_status, game_status, sport)

    async def refresh_scores(self, sport_type: str | SportType) -> int:
        """Fetch and upsert one sport unconditionally; provider and store errors propagate."""

        sport = validate_sport(sport_type)
        async with self._lock_for(sport):
            games = await self.provider.fetch_live(sport)
            count = await self._upsert_all(games)
        logger.info("Refreshed %s %s scores", count, sport.value)
        return count

    async def refresh_all_scores(self) -> dict[str, int]:
        results: dict[str, int] = {}
        for sport in TRACKED_SPORTS:
            try:
                results[sport.value] = await self.refresh_scores(sport)
            except Exception:
                logger.exception("Failed to refresh %s scores", sport.value)
                results[sport.value] = 0
        return results

    async def cleanup_old_scores(self, days: int = 7) -> int:
        if days < 1:
            raise ValidationError("Days parameter must be at least 1")
        deleted = await asyncio.to_thread(self.store.delete_older_than, days, now=self._now())
        logger.info("Deleted %s old score records (older than %s days)", deleted, days)
        return deleted

    async def get_cache_statistics(self) -> dict[str, CacheStatus]:
        stats: dict[str, CacheStatus] = {}
        for sport in TRACKED_SPORTS:
            stats[sport.value] = await asyncio.to_thread(self.store.get_cache_status, sport)
        return stats
