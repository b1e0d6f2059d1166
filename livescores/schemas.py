from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from livescores.ingestion.schema import GameStatus, SportType


class ScoreOut(BaseModel):
    id: int
    game_id: str
    sport_type: SportType
    home_team: str
    away_team: str
    home_team_logo: Optional[str]
    away_team_logo: Optional[str]
    home_score: int
    away_score: int
    status: GameStatus
    period: Optional[str]
    time_remaining: Optional[str]
    scheduled_at: datetime
    started_at: Optional[datetime]
    completed_at: Optional[datetime]
    venue: Optional[str]
    metadata: dict[str, Any]
    last_updated: datetime
    created_at: datetime

    class Config:
        from_attributes = True


class CacheStatus(BaseModel):
    sport_type: SportType
    total_games: int = 0
    live_games: int = 0
    scheduled_games: int = 0
    completed_games: int = 0
    last_update: Optional[datetime] = None


class LiveScoresOut(BaseModel):
    live: list[ScoreOut]
    upcoming: list[ScoreOut]
    recent: list[ScoreOut]
    cache_age_seconds: Optional[int]
    last_update: Optional[datetime]


class UpdaterStatusOut(BaseModel):
    is_running: bool
    last_update: Optional[datetime]
    update_count: int
    interval_ms: int


class RefreshRequest(BaseModel):
    sport: Optional[str] = None


class CleanupRequest(BaseModel):
    days: int = Field(default=7, ge=1, le=30)


class ProviderSettingsIn(BaseModel):
    use_real_api: bool
    api_key: Optional[str] = None


class ProviderSettingsOut(BaseModel):
    use_real_api: bool
    has_key: bool
    mode: str
    updated_at_utc: Optional[datetime]
