from __future__ import annotations

import unittest
from datetime import date, datetime, timedelta, timezone
from unittest.mock import patch

from livescores.errors import ProviderError
from livescores.ingestion.mock_games import GAME_DURATION, find_mock_game, generate_games, parse_mock_game_id
from livescores.ingestion.provider import ScoreProvider, build_provider, split_provider_game_id
from livescores.ingestion.schema import GameStatus, SportType
from livescores.settings import ProviderSettingsSnapshot, ScoreConfig

NOW = datetime(2026, 3, 1, 15, 0, tzinfo=timezone.utc)

BASKETBALL_GAME = {
    "id": 4242,
    "date": "2026-03-01T19:00:00+00:00",
    "status": {"long": "Quarter 3", "short": "Q3", "timer": "05:12"},
    "league": {"name": "NBA", "season": "2025-2026"},
    "teams": {
        "home": {"id": 1, "name": "Los Angeles Lakers", "logo": "https://media.example/lal.png"},
        "away": {"id": 2, "name": "Boston Celtics", "logo": "https://media.example/bos.png"},
    },
    "scores": {"home": {"total": 71}, "away": {"total": 68}},
}


def _now() -> datetime:
    return NOW


class MockGameTests(unittest.TestCase):
    def test_generate_games_is_deterministic_per_sport_and_date(self) -> None:
        first = generate_games(SportType.SOCCER, date(2026, 3, 1), now=NOW)
        second = generate_games(SportType.SOCCER, date(2026, 3, 1), now=NOW)
        other_day = generate_games(SportType.SOCCER, date(2026, 3, 2), now=NOW)

        self.assertEqual(first, second)
        self.assertTrue(3 <= len(first) <= 5)
        self.assertNotEqual([g.game_id for g in first], [g.game_id for g in other_day])

    def test_generated_games_respect_status_timing_rules(self) -> None:
        for sport in (SportType.FOOTBALL, SportType.BASKETBALL, SportType.HOCKEY):
            for game in generate_games(sport, date(2026, 3, 1), now=NOW):
                self.assertNotEqual(game.home_team, game.away_team)
                if game.status == GameStatus.SCHEDULED:
                    self.assertEqual((0, 0), (game.home_score, game.away_score))
                if game.status in (GameStatus.LIVE, GameStatus.HALFTIME):
                    self.assertIsNotNone(game.started_at)
                else:
                    self.assertIsNone(game.started_at)
                if game.status == GameStatus.FINAL:
                    self.assertIsNotNone(game.completed_at)
                else:
                    self.assertIsNone(game.completed_at)

    def test_future_slates_are_scheduled_without_score(self) -> None:
        games = generate_games(SportType.BASEBALL, date(2026, 3, 4), now=NOW)

        for game in games:
            self.assertEqual(GameStatus.SCHEDULED, game.status)
            self.assertEqual((0, 0), (game.home_score, game.away_score))
            self.assertIsNone(game.period)
            self.assertIsNone(game.time_remaining)
            self.assertIsNone(game.started_at)

    def test_game_state_only_moves_forward_as_time_passes(self) -> None:
        rank = {
            GameStatus.SCHEDULED: 0,
            GameStatus.LIVE: 1,
            GameStatus.HALFTIME: 1,
            GameStatus.FINAL: 2,
        }
        for sport in SportType:
            previous: dict[str, tuple[int, int, int]] = {}
            instant = datetime(2026, 3, 1, 11, 0, tzinfo=timezone.utc)
            while instant <= datetime(2026, 3, 2, 1, 0, tzinfo=timezone.utc):
                for game in generate_games(sport, date(2026, 3, 1), now=instant):
                    state = (rank[game.status], game.home_score, game.away_score)
                    before = previous.get(game.game_id)
                    if before is not None:
                        for earlier, later in zip(before, state):
                            self.assertLessEqual(earlier, later, f"{game.game_id} at {instant}")
                    previous[game.game_id] = state
                instant += timedelta(minutes=10)
            self.assertTrue(all(state[0] == 2 for state in previous.values()))

    def test_final_games_completed_no_later_than_now(self) -> None:
        late = NOW + timedelta(hours=8)

        for game in generate_games(SportType.HOCKEY, date(2026, 3, 1), now=late):
            if game.status == GameStatus.FINAL:
                self.assertLessEqual(game.completed_at, late)
                self.assertEqual(game.scheduled_at + GAME_DURATION, game.completed_at)
            else:
                self.assertGreater(game.scheduled_at + GAME_DURATION, late)

    def test_find_mock_game_for_tomorrow_is_still_scheduled(self) -> None:
        game = find_mock_game("football_2026-03-02_0", now=NOW + timedelta(minutes=10))

        self.assertEqual(GameStatus.SCHEDULED, game.status)
        self.assertEqual((0, 0), (game.home_score, game.away_score))

    def test_parse_mock_game_id(self) -> None:
        self.assertEqual(
            (SportType.SOCCER, date(2026, 3, 1), 2),
            parse_mock_game_id("soccer_2026-03-01_2"),
        )
        self.assertIsNone(parse_mock_game_id("soccer_4242"))
        self.assertIsNone(parse_mock_game_id("cricket_2026-03-01_2"))


class SplitProviderGameIdTests(unittest.TestCase):
    def test_sport_prefixed_and_bare_ids(self) -> None:
        self.assertEqual((SportType.HOCKEY, "99"), split_provider_game_id("hockey_99"))
        self.assertEqual((SportType.FOOTBALL, "12"), split_provider_game_id("12"))
        self.assertIsNone(split_provider_game_id("hockey_abc"))
        self.assertIsNone(split_provider_game_id("curling_12"))


class ScoreProviderTests(unittest.IsolatedAsyncioTestCase):
    async def test_mock_mode_never_calls_the_api(self) -> None:
        provider = ScoreProvider(use_real_api=False, now_fn=_now)

        with patch("livescores.ingestion.provider.fetch_games") as fetch:
            games = await provider.fetch_live(SportType.BASKETBALL)

        fetch.assert_not_called()
        self.assertEqual(generate_games(SportType.BASKETBALL, NOW.date(), now=NOW), games)
        self.assertEqual("mock", provider.mode)

    async def test_live_mode_parses_provider_payload(self) -> None:
        provider = ScoreProvider(use_real_api=True, api_key="key", now_fn=_now)

        with patch("livescores.ingestion.provider.fetch_games", return_value=[BASKETBALL_GAME]) as fetch:
            games = await provider.fetch_live(SportType.BASKETBALL)

        self.assertEqual(date(2026, 3, 1), fetch.call_args.kwargs["game_date"])
        self.assertEqual(1, len(games))
        self.assertEqual("basketball_4242", games[0].game_id)
        self.assertEqual(GameStatus.LIVE, games[0].status)

    async def test_live_mode_falls_back_to_mock_slate(self) -> None:
        provider = ScoreProvider(use_real_api=True, api_key="key", now_fn=_now)
        error = ProviderError("quota", reason="rate_limit")

        with patch("livescores.ingestion.provider.fetch_games", side_effect=error):
            games = await provider.fetch_live(SportType.HOCKEY)

        self.assertEqual(generate_games(SportType.HOCKEY, NOW.date(), now=NOW), games)

    async def test_live_mode_without_fallback_raises(self) -> None:
        provider = ScoreProvider(use_real_api=True, api_key="key", fallback_to_mock=False, now_fn=_now)

        with patch("livescores.ingestion.provider.fetch_games", side_effect=ProviderError("down")):
            with self.assertRaises(ProviderError):
                await provider.fetch_live(SportType.HOCKEY)

    async def test_fetch_by_id_regenerates_mock_games(self) -> None:
        provider = ScoreProvider(use_real_api=False, now_fn=_now)
        expected = generate_games(SportType.SOCCER, date(2026, 3, 1), now=NOW)[1]

        game = await provider.fetch_by_id("soccer_2026-03-01_1")
        missing = await provider.fetch_by_id("soccer_2026-03-01_9")
        real_id = await provider.fetch_by_id("soccer_4242")

        self.assertEqual(expected, game)
        self.assertIsNone(missing)
        self.assertIsNone(real_id)

    async def test_fetch_by_id_queries_provider_with_raw_id(self) -> None:
        provider = ScoreProvider(use_real_api=True, api_key="key", now_fn=_now)

        with patch("livescores.ingestion.provider.fetch_games", return_value=[BASKETBALL_GAME]) as fetch:
            game = await provider.fetch_by_id("basketball_4242")

        self.assertEqual("4242", fetch.call_args.kwargs["game_id"])
        self.assertEqual(SportType.BASKETBALL, fetch.call_args.args[0])
        self.assertEqual("basketball_4242", game.game_id)

    async def test_mock_upcoming_starts_tomorrow(self) -> None:
        provider = ScoreProvider(use_real_api=False, now_fn=_now)

        games = await provider.fetch_upcoming(SportType.FOOTBALL, 2)

        days = {game.scheduled_at.date() for game in games}
        self.assertEqual({date(2026, 3, 2), date(2026, 3, 3)}, days)
        self.assertTrue(all(game.status == GameStatus.SCHEDULED for game in games))

    async def test_live_upcoming_keeps_only_scheduled_games(self) -> None:
        provider = ScoreProvider(use_real_api=True, api_key="key", now_fn=_now)
        scheduled = dict(BASKETBALL_GAME, id=5000, status={"long": "Not Started", "short": "NS"})

        with patch(
            "livescores.ingestion.provider.fetch_games",
            return_value=[BASKETBALL_GAME, scheduled],
        ) as fetch:
            games = await provider.fetch_upcoming(SportType.BASKETBALL, 2)

        self.assertEqual(2, fetch.call_count)
        self.assertEqual(["basketball_5000", "basketball_5000"], [game.game_id for game in games])


class BuildProviderTests(unittest.TestCase):
    def test_real_mode_without_key_degrades_to_mock(self) -> None:
        snapshot = ProviderSettingsSnapshot(id=1, use_real_api=True, api_key_enc=None, updated_at_utc=None)

        provider = build_provider(snapshot, ScoreConfig(sports_api_key=None))

        self.assertEqual("mock", provider.mode)

    def test_config_key_enables_live_mode(self) -> None:
        snapshot = ProviderSettingsSnapshot(id=1, use_real_api=True, api_key_enc=None, updated_at_utc=None)

        provider = build_provider(snapshot, ScoreConfig(sports_api_key="env-key", fallback_to_mock=False))

        self.assertEqual("live", provider.mode)
        self.assertFalse(provider.fallback_to_mock)


if __name__ == "__main__":
    unittest.main()
