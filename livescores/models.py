from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Index, Integer, String, Text
from sqlalchemy.sql import func

from .db import Base


class Score(Base):
    __tablename__ = "scores"
    __table_args__ = (
        CheckConstraint(
            "status IN ('scheduled', 'live', 'halftime', 'final', 'postponed', 'cancelled')",
            name="ck_scores_valid_status",
        ),
        CheckConstraint("home_score >= 0 AND away_score >= 0", name="ck_scores_valid_scores"),
        Index("ix_scores_sport_status", "sport_type", "status"),
        Index("ix_scores_scheduled_at", "scheduled_at"),
        Index("ix_scores_last_updated", "last_updated"),
    )

    id = Column(Integer, primary_key=True, index=True)
    game_id = Column(String(100), nullable=False, unique=True, index=True)
    sport_type = Column(String(50), nullable=False)

    home_team = Column(String(100), nullable=False)
    away_team = Column(String(100), nullable=False)
    home_team_logo = Column(String(500), nullable=True)
    away_team_logo = Column(String(500), nullable=True)

    home_score = Column(Integer, nullable=False, default=0)
    away_score = Column(Integer, nullable=False, default=0)

    status = Column(String(20), nullable=False)
    period = Column(String(50), nullable=True)
    time_remaining = Column(String(20), nullable=True)

    scheduled_at = Column(DateTime(timezone=True), nullable=False)
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    venue = Column(String(200), nullable=True)
    # league, season, week and provider extras; passthrough JSON
    metadata_json = Column(Text, nullable=False, default="{}")

    last_updated = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)


class ProviderSettings(Base):
    __tablename__ = "provider_settings"

    id = Column(Integer, primary_key=True)
    use_real_api = Column(Boolean, nullable=False, default=False)
    api_key_enc = Column(Text, nullable=True)
    updated_at_utc = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)
