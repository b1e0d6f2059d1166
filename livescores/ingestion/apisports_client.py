"""API-Sports HTTP client for fetching games."""

from __future__ import annotations

import logging
import time
from datetime import date
from typing import Any

import requests

from livescores.errors import ProviderError
from livescores.ingestion.schema import SportType
from livescores.ingestion.sports import get_sport_endpoint

logger = logging.getLogger(__name__)
DEFAULT_TIMEOUT_SECONDS = 12
DEFAULT_RETRIES = 2
DEFAULT_BACKOFF_SECONDS = 0.5
DEFAULT_USER_AGENT = "livescores/1.0 (+https://example.local)"
MAX_BODY_SNIPPET = 300


def build_games_url(sport: SportType) -> str:
    endpoint = get_sport_endpoint(sport)
    if endpoint is None:
        raise ProviderError(f"No provider feed for sport: {sport.value}", reason="unsupported")
    host, path = endpoint
    return f"{host}{path}"


def build_games_params(
    game_date: date | None = None,
    game_id: str | None = None,
) -> dict[str, str]:
    params: dict[str, str] = {}
    if game_id:
        params["id"] = game_id
    elif game_date is not None:
        params["date"] = game_date.isoformat()
    return params


def _api_errors(payload: dict[str, Any]) -> dict[str, Any] | None:
    """API-Sports reports auth, plan and quota problems inside a 200 response."""
    errors = payload.get("errors")
    if isinstance(errors, dict) and errors:
        return errors
    if isinstance(errors, list) and errors:
        return {"errors": errors}
    return None


def _classify_api_errors(errors: dict[str, Any]) -> str:
    keys = {str(key).lower() for key in errors}
    if "token" in keys:
        return "auth"
    if "plan" in keys:
        return "plan"
    if "requests" in keys or "ratelimit" in keys:
        return "rate_limit"
    return "api"


def fetch_games(
    sport: SportType,
    *,
    api_key: str | None,
    game_date: date | None = None,
    game_id: str | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> list[dict[str, Any]]:
    """Fetch the raw API-Sports game list for a sport and date (or a single id).

    Raises ProviderError on any failure; never returns a partial result.
    """

    if not api_key:
        raise ProviderError("Missing sports API key", reason="auth")

    url = build_games_url(sport)
    params = build_games_params(game_date, game_id)
    headers = {
        "x-apisports-key": api_key,
        "Accept": "application/json",
        "User-Agent": DEFAULT_USER_AGENT,
    }

    last_error: str | None = None
    last_status: int | None = None
    for attempt in range(DEFAULT_RETRIES):
        try:
            response = requests.get(url, params=params, headers=headers, timeout=timeout)
        except requests.Timeout as exc:
            raise ProviderError(
                f"API-Sports request timed out after {timeout}s: {exc}",
                reason="timeout",
            ) from exc
        except requests.RequestException as exc:
            last_error = str(exc)
            logger.warning(
                "API-Sports request failed sport=%s attempt=%s error=%s",
                sport.value,
                attempt + 1,
                last_error,
            )
            if attempt < DEFAULT_RETRIES - 1:
                time.sleep(DEFAULT_BACKOFF_SECONDS * (2**attempt))
            continue

        last_status = response.status_code
        if response.status_code == 429:
            raise ProviderError("API-Sports rate limit reached", status=429, reason="rate_limit")
        if response.status_code in (401, 403):
            raise ProviderError(
                f"API-Sports rejected credentials status={response.status_code}",
                status=response.status_code,
                reason="auth",
            )
        if response.status_code >= 500:
            last_error = f"status={response.status_code} body={response.text[:MAX_BODY_SNIPPET]}"
            logger.error(
                "API-Sports non-200 sport=%s status=%s body=%s",
                sport.value,
                response.status_code,
                response.text[:MAX_BODY_SNIPPET],
            )
            if attempt < DEFAULT_RETRIES - 1:
                time.sleep(DEFAULT_BACKOFF_SECONDS * (2**attempt))
            continue
        if response.status_code != 200:
            raise ProviderError(
                f"API-Sports returned status={response.status_code} "
                f"body={response.text[:MAX_BODY_SNIPPET]}",
                status=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderError(
                "API-Sports returned non-JSON response: " + response.text[:MAX_BODY_SNIPPET],
                status=response.status_code,
            ) from exc
        if not isinstance(payload, dict):
            raise ProviderError("API-Sports returned unexpected payload", status=response.status_code)

        errors = _api_errors(payload)
        if errors:
            raise ProviderError(
                f"API-Sports error: {errors}",
                status=response.status_code,
                reason=_classify_api_errors(errors),
            )

        games = payload.get("response")
        if not isinstance(games, list):
            return []
        return [game for game in games if isinstance(game, dict)]

    raise ProviderError(
        f"Failed to fetch API-Sports games after {DEFAULT_RETRIES} attempts: {last_error}",
        status=last_status,
        reason="network",
    )
