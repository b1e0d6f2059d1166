"""Deterministic synthetic game slates used when the live provider is unavailable."""

from __future__ import annotations

import random
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

from livescores.ingestion.schema import GameRecord, GameStatus, SportType

# ESPN CDN base URL for team logos
_ESPN_LOGO_BASE = "https://a.espncdn.com/i/teamlogos"

_MOCK_GAME_ID = re.compile(r"^(?P<sport>[a-z]+)_(?P<day>\d{4}-\d{2}-\d{2})_(?P<index>\d+)$")


@dataclass(frozen=True)
class MockTeam:
    name: str
    city: str
    league: str
    logo_path: str  # "<league path>/<abbrev or id>"

    def logo_url(self, size: int = 500) -> str:
        league_path, _, slug = self.logo_path.partition("/")
        return f"{_ESPN_LOGO_BASE}/{league_path}/{size}/{slug}.png"


TEAM_POOLS: dict[SportType, tuple[MockTeam, ...]] = {
    SportType.FOOTBALL: (
        MockTeam("Dallas Cowboys", "Dallas", "NFL", "nfl/dal"),
        MockTeam("Philadelphia Eagles", "Philadelphia", "NFL", "nfl/phi"),
        MockTeam("New England Patriots", "Foxborough", "NFL", "nfl/ne"),
        MockTeam("Green Bay Packers", "Green Bay", "NFL", "nfl/gb"),
        MockTeam("Kansas City Chiefs", "Kansas City", "NFL", "nfl/kc"),
        MockTeam("Buffalo Bills", "Buffalo", "NFL", "nfl/buf"),
        MockTeam("San Francisco 49ers", "San Francisco", "NFL", "nfl/sf"),
        MockTeam("Baltimore Ravens", "Baltimore", "NFL", "nfl/bal"),
        MockTeam("Detroit Lions", "Detroit", "NFL", "nfl/det"),
        MockTeam("Miami Dolphins", "Miami", "NFL", "nfl/mia"),
    ),
    SportType.BASKETBALL: (
        MockTeam("Los Angeles Lakers", "Los Angeles", "NBA", "nba/lal"),
        MockTeam("Boston Celtics", "Boston", "NBA", "nba/bos"),
        MockTeam("Golden State Warriors", "San Francisco", "NBA", "nba/gs"),
        MockTeam("Chicago Bulls", "Chicago", "NBA", "nba/chi"),
        MockTeam("Miami Heat", "Miami", "NBA", "nba/mia"),
        MockTeam("Denver Nuggets", "Denver", "NBA", "nba/den"),
        MockTeam("Milwaukee Bucks", "Milwaukee", "NBA", "nba/mil"),
        MockTeam("New York Knicks", "New York", "NBA", "nba/ny"),
        MockTeam("Phoenix Suns", "Phoenix", "NBA", "nba/phx"),
        MockTeam("Dallas Mavericks", "Dallas", "NBA", "nba/dal"),
    ),
    SportType.BASEBALL: (
        MockTeam("New York Yankees", "New York", "MLB", "mlb/nyy"),
        MockTeam("Boston Red Sox", "Boston", "MLB", "mlb/bos"),
        MockTeam("Los Angeles Dodgers", "Los Angeles", "MLB", "mlb/lad"),
        MockTeam("Chicago Cubs", "Chicago", "MLB", "mlb/chc"),
        MockTeam("San Francisco Giants", "San Francisco", "MLB", "mlb/sf"),
        MockTeam("Atlanta Braves", "Atlanta", "MLB", "mlb/atl"),
        MockTeam("Houston Astros", "Houston", "MLB", "mlb/hou"),
        MockTeam("St. Louis Cardinals", "St. Louis", "MLB", "mlb/stl"),
        MockTeam("Seattle Mariners", "Seattle", "MLB", "mlb/sea"),
        MockTeam("Toronto Blue Jays", "Toronto", "MLB", "mlb/tor"),
    ),
    SportType.SOCCER: (
        MockTeam("Real Madrid", "Madrid", "La Liga", "soccer/86"),
        MockTeam("Barcelona", "Barcelona", "La Liga", "soccer/83"),
        MockTeam("Manchester United", "Manchester", "Premier League", "soccer/360"),
        MockTeam("Liverpool", "Liverpool", "Premier League", "soccer/364"),
        MockTeam("Bayern Munich", "Munich", "Bundesliga", "soccer/132"),
        MockTeam("Arsenal", "London", "Premier League", "soccer/359"),
        MockTeam("Juventus", "Turin", "Serie A", "soccer/111"),
        MockTeam("Paris Saint-Germain", "Paris", "Ligue 1", "soccer/160"),
        MockTeam("Borussia Dortmund", "Dortmund", "Bundesliga", "soccer/124"),
        MockTeam("Inter Milan", "Milan", "Serie A", "soccer/110"),
    ),
    SportType.HOCKEY: (
        MockTeam("Montreal Canadiens", "Montreal", "NHL", "nhl/mtl"),
        MockTeam("Toronto Maple Leafs", "Toronto", "NHL", "nhl/tor"),
        MockTeam("Boston Bruins", "Boston", "NHL", "nhl/bos"),
        MockTeam("Chicago Blackhawks", "Chicago", "NHL", "nhl/chi"),
        MockTeam("Detroit Red Wings", "Detroit", "NHL", "nhl/det"),
        MockTeam("Edmonton Oilers", "Edmonton", "NHL", "nhl/edm"),
        MockTeam("New York Rangers", "New York", "NHL", "nhl/nyr"),
        MockTeam("Colorado Avalanche", "Denver", "NHL", "nhl/col"),
        MockTeam("Vegas Golden Knights", "Las Vegas", "NHL", "nhl/vgs"),
        MockTeam("Tampa Bay Lightning", "Tampa", "NHL", "nhl/tb"),
    ),
}

_VENUE_SUFFIX: dict[SportType, str] = {
    SportType.FOOTBALL: "Stadium",
    SportType.BASKETBALL: "Arena",
    SportType.BASEBALL: "Ballpark",
    SportType.SOCCER: "Stadium",
    SportType.HOCKEY: "Arena",
}

_LIVE_PERIODS: dict[SportType, tuple[str, ...]] = {
    SportType.FOOTBALL: ("1st Quarter", "2nd Quarter", "3rd Quarter", "4th Quarter"),
    SportType.BASKETBALL: ("1st Quarter", "2nd Quarter", "3rd Quarter", "4th Quarter"),
    SportType.BASEBALL: ("1st Inning", "5th Inning", "9th Inning"),
    SportType.SOCCER: ("1st Half", "2nd Half"),
    SportType.HOCKEY: ("1st Period", "2nd Period", "3rd Period"),
}

# (min, max) final score per team
_SCORE_RANGES: dict[SportType, tuple[int, int]] = {
    SportType.FOOTBALL: (0, 35),
    SportType.BASKETBALL: (60, 125),
    SportType.BASEBALL: (0, 10),
    SportType.SOCCER: (0, 4),
    SportType.HOCKEY: (0, 6),
}

# Regulation minutes per period, for the game clock
_PERIOD_MINUTES: dict[SportType, int] = {
    SportType.FOOTBALL: 15,
    SportType.BASKETBALL: 12,
    SportType.HOCKEY: 20,
}

# Sports that break between halves; share of the game window spent at halftime
_HALFTIME_SPORTS = frozenset({SportType.FOOTBALL, SportType.BASKETBALL, SportType.SOCCER})
_HALFTIME_WINDOW = (0.45, 0.55)

GAME_DURATION = timedelta(hours=3)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_mock_game_id(sport: SportType, game_date: date, index: int) -> str:
    return f"{sport.value}_{game_date.isoformat()}_{index}"


def parse_mock_game_id(game_id: str) -> tuple[SportType, date, int] | None:
    """Split a synthetic game id into (sport, date, index); None when it is not one."""

    match = _MOCK_GAME_ID.match(game_id.strip())
    if not match:
        return None
    try:
        sport = SportType(match.group("sport"))
        day = date.fromisoformat(match.group("day"))
    except ValueError:
        return None
    return sport, day, int(match.group("index"))


def _pool_for(sport: SportType) -> tuple[MockTeam, ...]:
    return TEAM_POOLS.get(sport, TEAM_POOLS[SportType.FOOTBALL])


def _progress(scheduled_at: datetime, now: datetime) -> float:
    """Share of the game window elapsed at *now*, clamped to [0, 1]."""
    elapsed = (now - scheduled_at) / GAME_DURATION
    return min(max(elapsed, 0.0), 1.0)


def _status_at(sport: SportType, scheduled_at: datetime, now: datetime) -> GameStatus:
    if now < scheduled_at:
        return GameStatus.SCHEDULED
    if now >= scheduled_at + GAME_DURATION:
        return GameStatus.FINAL
    low, high = _HALFTIME_WINDOW
    if sport in _HALFTIME_SPORTS and low <= _progress(scheduled_at, now) < high:
        return GameStatus.HALFTIME
    return GameStatus.LIVE


def _period(sport: SportType, status: GameStatus, progress: float) -> str | None:
    if status == GameStatus.HALFTIME:
        return "Halftime"
    if status == GameStatus.FINAL:
        return "Final"
    if status != GameStatus.LIVE:
        return None
    periods = _LIVE_PERIODS.get(sport, _LIVE_PERIODS[SportType.FOOTBALL])
    return periods[min(int(progress * len(periods)), len(periods) - 1)]


def _clock(sport: SportType, status: GameStatus, progress: float) -> str | None:
    if status != GameStatus.LIVE or sport == SportType.BASEBALL:
        return None
    if sport == SportType.SOCCER:
        return f"{min(int(progress * 90) + 1, 90)}'"
    periods = len(_LIVE_PERIODS.get(sport, _LIVE_PERIODS[SportType.FOOTBALL]))
    period_share = (progress * periods) % 1.0
    remaining = int(_PERIOD_MINUTES.get(sport, 15) * 60 * (1.0 - period_share))
    return f"{remaining // 60:02d}:{remaining % 60:02d}"


def _score_at(final_score: int, status: GameStatus, progress: float) -> int:
    if status == GameStatus.SCHEDULED:
        return 0
    if status == GameStatus.FINAL:
        return final_score
    return int(final_score * progress)


def generate_games(
    sport: SportType,
    game_date: date,
    *,
    now: datetime | None = None,
) -> list[GameRecord]:
    """Build a slate of 3-5 schema-complete games for a sport and date.

    Teams, start times and final scores are seeded by (sport, date), so the same
    inputs always produce the same games and ids. Each game's status follows the
    clock: scheduled before kickoff, in progress for GAME_DURATION, final after.
    Scores only grow as *now* advances.
    """

    now = now or _utcnow()
    rng = random.Random(f"{sport.value}:{game_date.isoformat()}")
    teams = _pool_for(sport)
    count = rng.randint(3, 5)
    drawn = rng.sample(teams, count * 2)
    low, high = _SCORE_RANGES.get(sport, _SCORE_RANGES[SportType.FOOTBALL])

    games: list[GameRecord] = []
    for index in range(count):
        home, away = drawn[index * 2], drawn[index * 2 + 1]
        final_home = rng.randint(low, high)
        final_away = rng.randint(low, high)

        scheduled_at = datetime.combine(game_date, time(12 + index * 2), tzinfo=timezone.utc)
        status = _status_at(sport, scheduled_at, now)
        progress = _progress(scheduled_at, now)
        games.append(
            GameRecord(
                game_id=build_mock_game_id(sport, game_date, index),
                sport_type=sport,
                home_team=home.name,
                away_team=away.name,
                home_team_logo=home.logo_url(),
                away_team_logo=away.logo_url(),
                home_score=_score_at(final_home, status, progress),
                away_score=_score_at(final_away, status, progress),
                status=status,
                period=_period(sport, status, progress),
                time_remaining=_clock(sport, status, progress),
                scheduled_at=scheduled_at,
                started_at=scheduled_at if status in (GameStatus.LIVE, GameStatus.HALFTIME) else None,
                completed_at=scheduled_at + GAME_DURATION if status == GameStatus.FINAL else None,
                venue=f"{home.city} {_VENUE_SUFFIX.get(sport, 'Stadium')}",
                metadata={
                    "league": home.league,
                    "season": str(game_date.year),
                },
            )
        )
    return games


def find_mock_game(game_id: str, *, now: datetime | None = None) -> GameRecord | None:
    """Regenerate the slate a synthetic id belongs to and return that game as of *now*."""

    parsed = parse_mock_game_id(game_id)
    if parsed is None:
        return None
    sport, game_date, index = parsed
    games = generate_games(sport, game_date, now=now)
    if index >= len(games):
        return None
    return games[index]
