from __future__ import annotations

import unittest
from datetime import date
from unittest.mock import patch

import requests

from livescores.errors import ProviderError
from livescores.ingestion.apisports_client import fetch_games
from livescores.ingestion.schema import SportType


class _FakeResponse:
    def __init__(self, status_code: int, payload=None, text: str | None = None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else str(payload)

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FetchGamesTests(unittest.TestCase):
    def test_fetch_games_returns_response_items(self) -> None:
        payload = {"errors": [], "results": 2, "response": [{"id": 1}, "junk"]}

        with patch(
            "livescores.ingestion.apisports_client.requests.get",
            return_value=_FakeResponse(200, payload),
        ) as get:
            games = fetch_games(SportType.HOCKEY, api_key="secret", game_date=date(2026, 3, 1))

        self.assertEqual([{"id": 1}], games)
        url = get.call_args.args[0]
        self.assertEqual("https://v1.hockey.api-sports.io/games", url)
        self.assertEqual({"date": "2026-03-01"}, get.call_args.kwargs["params"])
        self.assertEqual("secret", get.call_args.kwargs["headers"]["x-apisports-key"])

    def test_soccer_uses_fixtures_endpoint_and_id_param(self) -> None:
        payload = {"errors": [], "response": []}

        with patch(
            "livescores.ingestion.apisports_client.requests.get",
            return_value=_FakeResponse(200, payload),
        ) as get:
            fetch_games(SportType.SOCCER, api_key="secret", game_date=date(2026, 3, 1), game_id="77")

        self.assertEqual("https://v3.football.api-sports.io/fixtures", get.call_args.args[0])
        self.assertEqual({"id": "77"}, get.call_args.kwargs["params"])

    def test_missing_key_fails_without_request(self) -> None:
        with patch("livescores.ingestion.apisports_client.requests.get") as get:
            with self.assertRaises(ProviderError) as ctx:
                fetch_games(SportType.HOCKEY, api_key=None)

        get.assert_not_called()
        self.assertEqual("auth", ctx.exception.reason)

    def test_errors_in_ok_response_are_classified(self) -> None:
        cases = {
            "token": "auth",
            "plan": "plan",
            "requests": "rate_limit",
            "date": "api",
        }
        for key, reason in cases.items():
            payload = {"errors": {key: "nope"}, "response": []}
            with patch(
                "livescores.ingestion.apisports_client.requests.get",
                return_value=_FakeResponse(200, payload),
            ):
                with self.assertRaises(ProviderError) as ctx:
                    fetch_games(SportType.BASEBALL, api_key="secret")
            self.assertEqual(reason, ctx.exception.reason, key)

    def test_rate_limit_status_is_not_retried(self) -> None:
        with patch(
            "livescores.ingestion.apisports_client.requests.get",
            return_value=_FakeResponse(429, {}, text="slow down"),
        ) as get:
            with self.assertRaises(ProviderError) as ctx:
                fetch_games(SportType.BASKETBALL, api_key="secret")

        self.assertEqual(1, get.call_count)
        self.assertEqual(429, ctx.exception.status)
        self.assertEqual("rate_limit", ctx.exception.reason)

    def test_timeout_fails_immediately(self) -> None:
        with patch(
            "livescores.ingestion.apisports_client.requests.get",
            side_effect=requests.Timeout("read timed out"),
        ) as get:
            with self.assertRaises(ProviderError) as ctx:
                fetch_games(SportType.BASKETBALL, api_key="secret", timeout=1)

        self.assertEqual(1, get.call_count)
        self.assertEqual("timeout", ctx.exception.reason)

    def test_network_errors_are_retried_then_raised(self) -> None:
        with patch(
            "livescores.ingestion.apisports_client.requests.get",
            side_effect=requests.ConnectionError("refused"),
        ) as get, patch("livescores.ingestion.apisports_client.time.sleep") as sleep:
            with self.assertRaises(ProviderError) as ctx:
                fetch_games(SportType.BASKETBALL, api_key="secret")

        self.assertEqual(2, get.call_count)
        sleep.assert_called_once_with(0.5)
        self.assertEqual("network", ctx.exception.reason)

    def test_server_error_then_success(self) -> None:
        responses = [
            _FakeResponse(502, None, text="bad gateway"),
            _FakeResponse(200, {"errors": [], "response": [{"id": 5}]}),
        ]

        with patch(
            "livescores.ingestion.apisports_client.requests.get",
            side_effect=responses,
        ), patch("livescores.ingestion.apisports_client.time.sleep"):
            games = fetch_games(SportType.BASKETBALL, api_key="secret")

        self.assertEqual([{"id": 5}], games)

    def test_non_json_body_is_a_provider_error(self) -> None:
        with patch(
            "livescores.ingestion.apisports_client.requests.get",
            return_value=_FakeResponse(200, ValueError("no json"), text="<html>"),
        ):
            with self.assertRaises(ProviderError):
                fetch_games(SportType.BASKETBALL, api_key="secret")

    def test_sport_without_feed_is_unsupported(self) -> None:
        with self.assertRaises(ProviderError) as ctx:
            fetch_games(SportType.OTHER, api_key="secret")

        self.assertEqual("unsupported", ctx.exception.reason)


if __name__ == "__main__":
    unittest.main()
