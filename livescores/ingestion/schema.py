"""Internal data contract for cached games."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class SportType(str, Enum):
    FOOTBALL = "football"
    BASKETBALL = "basketball"
    BASEBALL = "baseball"
    SOCCER = "soccer"
    HOCKEY = "hockey"
    OTHER = "other"


class GameStatus(str, Enum):
    SCHEDULED = "scheduled"
    LIVE = "live"
    HALFTIME = "halftime"
    FINAL = "final"
    POSTPONED = "postponed"
    CANCELLED = "cancelled"


class GameRecord(BaseModel):
    """
    Latest known state of one game, as produced by the provider adapter and
    written to the score store.
    """

    # Required fields
    game_id: str = Field(min_length=1, max_length=100)
    sport_type: SportType
    home_team: str
    away_team: str
    status: GameStatus
    scheduled_at: datetime

    # Optional fields
    home_team_logo: Optional[str] = None
    away_team_logo: Optional[str] = None
    home_score: int = Field(default=0, ge=0)
    away_score: int = Field(default=0, ge=0)
    period: Optional[str] = None
    time_remaining: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    venue: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)
