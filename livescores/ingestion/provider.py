"""Provider adapter: live API-Sports data with a synthetic fallback."""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Callable

from livescores.errors import ProviderError
from livescores.ingestion.apisports_client import DEFAULT_TIMEOUT_SECONDS, fetch_games
from livescores.ingestion.apisports_parser import parse_games
from livescores.ingestion.mock_games import find_mock_game, generate_games, parse_mock_game_id
from livescores.ingestion.schema import GameRecord, GameStatus, SportType
from livescores.ingestion.sports import parse_sport
from livescores.settings import ProviderSettingsSnapshot, ScoreConfig, decrypt_api_key

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def split_provider_game_id(game_id: str) -> tuple[SportType, str] | None:
    """Split ``<sport>_<provider id>`` into its parts; bare numeric ids are football."""

    cleaned = game_id.strip()
    if cleaned.isdigit():
        return SportType.FOOTBALL, cleaned
    sport_part, sep, provider_id = cleaned.partition("_")
    if not sep or not provider_id.isdigit():
        return None
    sport = parse_sport(sport_part)
    if sport is None:
        return None
    return sport, provider_id


class ScoreProvider:
    """Produces GameRecords for a sport and date.

    The mode is fixed at construction. In live mode every provider failure is
    replaced by a synthetic slate of the same shape unless ``fallback_to_mock``
    is disabled, in which case ProviderError propagates.
    """

    def __init__(
        self,
        *,
        use_real_api: bool = False,
        api_key: str | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        fallback_to_mock: bool = True,
        now_fn: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.use_real_api = use_real_api
        self.fallback_to_mock = fallback_to_mock
        self._api_key = api_key
        self._timeout = timeout_seconds
        self._now = now_fn

    @property
    def mode(self) -> str:
        return "live" if self.use_real_api else "mock"

    def synthetic_live(self, sport: SportType, game_date: date | None = None) -> list[GameRecord]:
        now = self._now()
        return generate_games(sport, game_date or now.date(), now=now)

    def synthetic_upcoming(self, sport: SportType, days: int = 7) -> list[GameRecord]:
        """Synthetic slates for the next *days* days, starting tomorrow so today's slate is untouched."""
        now = self._now()
        games: list[GameRecord] = []
        for offset in range(1, days + 1):
            games.extend(generate_games(sport, now.date() + timedelta(days=offset), now=now))
        return games

    async def _fetch_real(
        self,
        sport: SportType,
        *,
        game_date: date | None = None,
        game_id: str | None = None,
    ) -> list[GameRecord]:
        payload = await asyncio.to_thread(
            fetch_games,
            sport,
            api_key=self._api_key,
            game_date=game_date,
            game_id=game_id,
            timeout=self._timeout,
        )
        return parse_games(payload, sport, now_utc=self._now())

    def _fallback(self, sport: SportType, exc: ProviderError) -> None:
        if not self.fallback_to_mock:
            raise exc
        logger.warning(
            "Provider unavailable for sport=%s reason=%s, serving synthetic games: %s",
            sport.value,
            exc.reason or "error",
            exc,
        )

    async def fetch_live(self, sport: SportType, game_date: date | None = None) -> list[GameRecord]:
        """Current state of every game for a sport on a date (today by default)."""

        game_date = game_date or self._now().date()
        if self.use_real_api:
            try:
                games = await self._fetch_real(sport, game_date=game_date)
                logger.info(
                    "Fetched %s %s games from API-Sports for %s",
                    len(games),
                    sport.value,
                    game_date,
                )
                return games
            except ProviderError as exc:
                self._fallback(sport, exc)
        return self.synthetic_live(sport, game_date)

    async def fetch_by_id(self, game_id: str) -> GameRecord | None:
        if parse_mock_game_id(game_id) is not None:
            return find_mock_game(game_id, now=self._now())
        if not self.use_real_api:
            return None

        provider_ref = split_provider_game_id(game_id)
        if provider_ref is None:
            return None
        sport, provider_id = provider_ref
        try:
            games = await self._fetch_real(sport, game_id=provider_id)
        except ProviderError as exc:
            # no synthetic stand-in exists for a real provider id
            self._fallback(sport, exc)
            return None
        return games[0] if games else None

    async def fetch_upcoming(self, sport: SportType, days: int = 7) -> list[GameRecord]:
        """Not-yet-started games over the next *days* days, all scheduled and zero-scored."""

        today = self._now().date()
        if self.use_real_api:
            try:
                games: list[GameRecord] = []
                for offset in range(days):
                    day_games = await self._fetch_real(sport, game_date=today + timedelta(days=offset))
                    games.extend(game for game in day_games if game.status == GameStatus.SCHEDULED)
                return games
            except ProviderError as exc:
                self._fallback(sport, exc)

        return self.synthetic_upcoming(sport, days)


def build_provider(
    snapshot: ProviderSettingsSnapshot,
    config: ScoreConfig,
    *,
    now_fn: Callable[[], datetime] = _utcnow,
) -> ScoreProvider:
    api_key = decrypt_api_key(snapshot.api_key_enc) or config.sports_api_key
    use_real_api = snapshot.use_real_api
    if use_real_api and not api_key:
        logger.warning("USE_REAL_API is enabled but no sports API key is configured; using mock data.")
        use_real_api = False
    provider = ScoreProvider(
        use_real_api=use_real_api,
        api_key=api_key,
        timeout_seconds=config.sports_api_timeout_seconds,
        fallback_to_mock=config.fallback_to_mock,
        now_fn=now_fn,
    )
    logger.info("Score provider configured: mode=%s fallback_to_mock=%s", provider.mode, provider.fallback_to_mock)
    return provider
