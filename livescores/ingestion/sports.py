"""Supported sports and their API-Sports endpoints."""

from __future__ import annotations

from livescores.ingestion.schema import SportType

# Sport -> (API-Sports host, games endpoint)
SPORT_ENDPOINTS: dict[SportType, tuple[str, str]] = {
    SportType.FOOTBALL: ("https://v1.american-football.api-sports.io", "/games"),
    SportType.BASKETBALL: ("https://v1.basketball.api-sports.io", "/games"),
    SportType.BASEBALL: ("https://v1.baseball.api-sports.io", "/games"),
    SportType.HOCKEY: ("https://v1.hockey.api-sports.io", "/games"),
    SportType.SOCCER: ("https://v3.football.api-sports.io", "/fixtures"),
}

# Sports refreshed by the background updater and reported in cache statistics.
TRACKED_SPORTS: tuple[SportType, ...] = (
    SportType.FOOTBALL,
    SportType.BASKETBALL,
    SportType.BASEBALL,
    SportType.SOCCER,
    SportType.HOCKEY,
)


def parse_sport(value: str | SportType) -> SportType | None:
    """Return the SportType for *value* (case-insensitive), or None when unknown."""

    if isinstance(value, SportType):
        return value
    try:
        return SportType(str(value).strip().lower())
    except ValueError:
        return None


def get_sport_endpoint(sport: SportType) -> tuple[str, str] | None:
    """Return (host, path) for a sport, or None when the provider has no feed for it."""

    return SPORT_ENDPOINTS.get(sport)
