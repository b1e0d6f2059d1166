"""Persistent score cache keyed by external game id."""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Iterator

from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from livescores.db import SessionLocal
from livescores.errors import StoreError
from livescores.ingestion.schema import GameRecord, GameStatus, SportType
from livescores.models import Score
from livescores.schemas import CacheStatus, ScoreOut

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _ensure_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _serialize_metadata(metadata: dict | None) -> str:
    if not metadata:
        return "{}"
    return json.dumps(metadata, ensure_ascii=False, separators=(",", ":"), default=str)


def _load_metadata(raw: str | None) -> dict:
    if not raw:
        return {}
    try:
        loaded = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Discarding unreadable score metadata: %s", raw[:100])
        return {}
    return loaded if isinstance(loaded, dict) else {}


def to_score_out(score: Score) -> ScoreOut:
    return ScoreOut(
        id=score.id,
        game_id=score.game_id,
        sport_type=score.sport_type,
        home_team=score.home_team,
        away_team=score.away_team,
        home_team_logo=score.home_team_logo,
        away_team_logo=score.away_team_logo,
        home_score=score.home_score,
        away_score=score.away_score,
        status=score.status,
        period=score.period,
        time_remaining=score.time_remaining,
        scheduled_at=_ensure_utc(score.scheduled_at),
        started_at=_ensure_utc(score.started_at),
        completed_at=_ensure_utc(score.completed_at),
        venue=score.venue,
        metadata=_load_metadata(score.metadata_json),
        last_updated=_ensure_utc(score.last_updated),
        created_at=_ensure_utc(score.created_at),
    )


def _insert_score(db: Session, record: GameRecord, now: datetime) -> Score:
    completed_at = _ensure_utc(record.completed_at)
    if record.status == GameStatus.FINAL and completed_at is None:
        completed_at = now
    score = Score(
        game_id=record.game_id,
        sport_type=record.sport_type.value,
        home_team=record.home_team,
        away_team=record.away_team,
        home_team_logo=record.home_team_logo,
        away_team_logo=record.away_team_logo,
        home_score=record.home_score,
        away_score=record.away_score,
        status=record.status.value,
        period=record.period,
        time_remaining=record.time_remaining,
        scheduled_at=_ensure_utc(record.scheduled_at),
        started_at=_ensure_utc(record.started_at),
        completed_at=completed_at if record.status == GameStatus.FINAL else None,
        venue=record.venue,
        metadata_json=_serialize_metadata(record.metadata),
        last_updated=now,
        created_at=now,
    )
    db.add(score)
    return score


def _update_score_from_record(score: Score, record: GameRecord, now: datetime) -> None:
    # game_id, created_at, team names and scheduled_at never change once stored.
    score.home_score = record.home_score
    score.away_score = record.away_score
    score.status = record.status.value
    score.period = record.period
    score.time_remaining = record.time_remaining
    if score.started_at is None and record.started_at is not None:
        score.started_at = _ensure_utc(record.started_at)
    if record.status == GameStatus.FINAL:
        if score.completed_at is None:
            score.completed_at = _ensure_utc(record.completed_at) or now
    else:
        score.completed_at = None
    score.metadata_json = _serialize_metadata(record.metadata)
    score.last_updated = now


def _apply_upsert(db: Session, record: GameRecord, now: datetime) -> Score:
    existing = db.query(Score).filter(Score.game_id == record.game_id).one_or_none()
    if existing is not None:
        _update_score_from_record(existing, record, now)
        return existing
    return _insert_score(db, record, now)


class ScoreStore:
    """Keyed storage for the latest known state of each game.

    Every method opens its own session, so a store instance can be shared
    between the request path and the background updater. Any database fault
    is raised as StoreError.
    """

    def __init__(self, session_factory: sessionmaker = SessionLocal) -> None:
        self._session_factory = session_factory

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Score store failed to %s: %s", action, exc)
            raise StoreError(f"Score store failed to {action}: {exc}") from exc
        finally:
            db.close()

    def upsert(self, record: GameRecord, *, now: datetime | None = None) -> ScoreOut:
        """Insert the game if its id is unknown, otherwise overwrite its mutable fields."""

        now_utc = _ensure_utc(now) or _utcnow()
        with self._session("upsert game") as db:
            try:
                score = _apply_upsert(db, record, now_utc)
                db.commit()
            except IntegrityError:
                # A concurrent writer inserted the same game_id first; overwrite it.
                db.rollback()
                score = _apply_upsert(db, record, now_utc)
                db.commit()
            return to_score_out(score)

    def find_by_game_id(self, game_id: str) -> ScoreOut | None:
        with self._session("load game") as db:
            score = db.query(Score).filter(Score.game_id == game_id).one_or_none()
            return to_score_out(score) if score else None

    def find_live(self, sport: SportType | None = None) -> list[ScoreOut]:
        with self._session("load live games") as db:
            query = db.query(Score).filter(Score.status == GameStatus.LIVE.value)
            if sport is not None:
                query = query.filter(Score.sport_type == sport.value)
            return [to_score_out(score) for score in query.order_by(Score.scheduled_at.asc()).all()]

    def find_upcoming(
        self,
        sport: SportType,
        limit: int = 10,
        *,
        now: datetime | None = None,
    ) -> list[ScoreOut]:
        now_utc = _ensure_utc(now) or _utcnow()
        with self._session("load upcoming games") as db:
            scores = (
                db.query(Score)
                .filter(
                    Score.sport_type == sport.value,
                    Score.status == GameStatus.SCHEDULED.value,
                    Score.scheduled_at > now_utc,
                )
                .order_by(Score.scheduled_at.asc())
                .limit(limit)
                .all()
            )
            return [to_score_out(score) for score in scores]

    def find_recently_completed(
        self,
        sport: SportType,
        hours_back: int = 24,
        limit: int = 10,
        *,
        now: datetime | None = None,
    ) -> list[ScoreOut]:
        now_utc = _ensure_utc(now) or _utcnow()
        since = now_utc - timedelta(hours=hours_back)
        with self._session("load completed games") as db:
            scores = (
                db.query(Score)
                .filter(
                    Score.sport_type == sport.value,
                    Score.status == GameStatus.FINAL.value,
                    Score.completed_at.isnot(None),
                    Score.completed_at >= since,
                )
                .order_by(Score.completed_at.desc())
                .limit(limit)
                .all()
            )
            return [to_score_out(score) for score in scores]

    def find_by_date_range(self, sport: SportType, start: datetime, end: datetime) -> list[ScoreOut]:
        with self._session("load games by date range") as db:
            scores = (
                db.query(Score)
                .filter(
                    Score.sport_type == sport.value,
                    Score.scheduled_at >= _ensure_utc(start),
                    Score.scheduled_at <= _ensure_utc(end),
                )
                .order_by(Score.scheduled_at.asc())
                .all()
            )
            return [to_score_out(score) for score in scores]

    def find_by_status(self, status: GameStatus, sport: SportType | None = None) -> list[ScoreOut]:
        with self._session("load games by status") as db:
            query = db.query(Score).filter(Score.status == status.value)
            if sport is not None:
                query = query.filter(Score.sport_type == sport.value)
            return [to_score_out(score) for score in query.order_by(Score.scheduled_at.desc()).all()]

    def get_cache_status(self, sport: SportType) -> CacheStatus:
        with self._session("read cache status") as db:
            total, live, scheduled, completed, last_update = (
                db.query(
                    func.count(Score.id),
                    func.count(case((Score.status == GameStatus.LIVE.value, 1))),
                    func.count(case((Score.status == GameStatus.SCHEDULED.value, 1))),
                    func.count(case((Score.status == GameStatus.FINAL.value, 1))),
                    func.max(Score.last_updated),
                )
                .filter(Score.sport_type == sport.value)
                .one()
            )
        return CacheStatus(
            sport_type=sport,
            total_games=total or 0,
            live_games=live or 0,
            scheduled_games=scheduled or 0,
            completed_games=completed or 0,
            last_update=_ensure_utc(last_update),
        )

    def delete_older_than(self, days: int = 7, *, now: datetime | None = None) -> int:
        """Delete final games completed more than *days* days ago. Other statuses are kept."""

        now_utc = _ensure_utc(now) or _utcnow()
        cutoff = now_utc - timedelta(days=days)
        with self._session("delete old games") as db:
            deleted = (
                db.query(Score)
                .filter(
                    Score.status == GameStatus.FINAL.value,
                    Score.completed_at.isnot(None),
                    Score.completed_at < cutoff,
                )
                .delete(synchronize_session=False)
            )
            db.commit()
        return int(deleted or 0)
