from __future__ import annotations

from datetime import datetime, timezone
import logging
import os

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from livescores.db import Base, SessionLocal, engine, get_db
from livescores.errors import NotFoundError, ProviderError, ScoreError, StoreError, ValidationError
from livescores.ingestion.provider import build_provider
from livescores.log_buffer import get_buffer_handler, install_buffer_handler
from livescores.schemas import (
    CleanupRequest,
    ProviderSettingsIn,
    ProviderSettingsOut,
    RefreshRequest,
    UpdaterStatusOut,
)
from livescores.scores.service import ScoreService, validate_sport
from livescores.scores.store import ScoreStore
from livescores.scores.updater import ScoreUpdater
from livescores.settings import (
    ScoreConfig,
    encrypt_api_key,
    get_or_create_settings,
    load_config,
    snapshot_settings,
)

app = FastAPI(title="Live Scores")
logger = logging.getLogger(__name__)
_config: ScoreConfig | None = None
_service: ScoreService | None = None
_updater: ScoreUpdater | None = None

_ERROR_STATUS: tuple[tuple[type[ScoreError], int], ...] = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (ProviderError, 502),
    (StoreError, 503),
)


@app.on_event("startup")
async def start_score_updater() -> None:
    global _config, _service, _updater
    install_buffer_handler()
    logger.info("App starting up, initializing score cache and updater")
    Base.metadata.create_all(bind=engine)
    _config = load_config()
    with SessionLocal() as db:
        snapshot = snapshot_settings(get_or_create_settings(db, _config))
    provider = build_provider(snapshot, _config)
    _service = ScoreService(
        ScoreStore(SessionLocal),
        provider,
        cache_ttl_seconds=_config.cache_ttl_seconds,
    )
    _updater = ScoreUpdater(
        _service,
        interval_seconds=_config.update_interval_seconds,
        cleanup_interval_seconds=_config.cleanup_interval_hours * 60 * 60,
        retention_days=_config.retention_days,
    )
    if _config.updater_enabled:
        _updater.start()
    else:
        logger.warning("Score updater disabled (SCORE_UPDATER_ENABLED=false)")


@app.on_event("shutdown")
async def stop_score_updater() -> None:
    global _service, _updater
    if _updater:
        await _updater.stop()
    _updater = None
    _service = None


def get_config() -> ScoreConfig:
    return _config or load_config()


def get_score_service() -> ScoreService:
    if _service is None:
        raise HTTPException(status_code=503, detail="Score service is not ready")
    return _service


def get_score_updater() -> ScoreUpdater:
    if _updater is None:
        raise HTTPException(status_code=503, detail="Score updater is not ready")
    return _updater


@app.exception_handler(ScoreError)
async def score_error_handler(request: Request, exc: ScoreError) -> JSONResponse:
    status_code = 500
    for error_type, code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            status_code = code
            break
    if status_code >= 500:
        logger.error("Request %s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"ok": False, "error": str(exc)})


def _parse_query_datetime(value: str | None, name: str) -> datetime:
    if not value:
        raise ValidationError(f"{name} is required")
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError as exc:
        raise ValidationError(f"{name} must be an ISO date or datetime") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@app.get("/health")
def health(service: ScoreService = Depends(get_score_service)):
    return {
        "ok": True,
        "provider_mode": service.provider.mode,
        "updater_running": _updater.is_running if _updater else False,
    }


# Fixed-prefix routes are declared before /{sport}/... so they are not read as a sport.
@app.get("/api/scores/cache/stats")
async def api_cache_stats(service: ScoreService = Depends(get_score_service)):
    stats = await service.get_cache_statistics()
    return {"ok": True, "stats": stats}


@app.get("/api/scores/updater/status", response_model=UpdaterStatusOut)
def api_updater_status(updater: ScoreUpdater = Depends(get_score_updater)):
    return updater.get_status()


@app.post("/api/scores/updater/force")
async def api_updater_force(updater: ScoreUpdater = Depends(get_score_updater)):
    await updater.force_update()
    return {"ok": True, "message": "Score update triggered", "status": updater.get_status()}


@app.post("/api/scores/refresh")
async def api_refresh_scores(
    payload: RefreshRequest | None = None,
    service: ScoreService = Depends(get_score_service),
):
    sport = payload.sport if payload else None
    if sport:
        sport_type = validate_sport(sport)
        results = {sport_type.value: await service.refresh_scores(sport_type)}
    else:
        results = await service.refresh_all_scores()
    return {"ok": True, "results": results, "total": sum(results.values())}


@app.post("/api/scores/cleanup")
async def api_cleanup_scores(
    payload: CleanupRequest | None = None,
    service: ScoreService = Depends(get_score_service),
):
    days = payload.days if payload else 7
    deleted = await service.cleanup_old_scores(days)
    return {"ok": True, "deleted": deleted, "days": days}


@app.get("/api/scores/game/{game_id}")
async def api_game(game_id: str, service: ScoreService = Depends(get_score_service)):
    game = await service.get_game_by_id(game_id)
    return {"ok": True, "game": game}


@app.get("/api/scores/status/{status}")
async def api_games_by_status(
    status: str,
    sport: str | None = None,
    service: ScoreService = Depends(get_score_service),
):
    games = await service.get_games_by_status(status, sport)
    return {
        "ok": True,
        "status": status.lower(),
        "sport": sport.lower() if sport else "all",
        "count": len(games),
        "games": games,
    }


@app.get("/api/scores/{sport}/live")
async def api_live_scores(
    sport: str,
    force_refresh: bool = False,
    service: ScoreService = Depends(get_score_service),
):
    result = await service.get_live_scores(sport, force_refresh)
    return {"ok": True, "sport": sport.lower(), **result.model_dump()}


@app.get("/api/scores/{sport}/upcoming")
async def api_upcoming_games(
    sport: str,
    days: int = 7,
    service: ScoreService = Depends(get_score_service),
):
    games = await service.get_upcoming_games(sport, days)
    return {"ok": True, "sport": sport.lower(), "days": days, "count": len(games), "games": games}


@app.get("/api/scores/{sport}/range")
async def api_scores_by_range(
    sport: str,
    start_date: str | None = None,
    end_date: str | None = None,
    service: ScoreService = Depends(get_score_service),
):
    start = _parse_query_datetime(start_date, "start_date")
    end = _parse_query_datetime(end_date, "end_date")
    scores = await service.get_scores_by_date_range(sport, start, end)
    return {
        "ok": True,
        "sport": sport.lower(),
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        "count": len(scores),
        "scores": scores,
    }


def _settings_out(settings, mode: str) -> ProviderSettingsOut:
    return ProviderSettingsOut(
        use_real_api=bool(settings.use_real_api),
        has_key=bool(settings.api_key_enc),
        mode=mode,
        updated_at_utc=settings.updated_at_utc,
    )


@app.get("/api/settings/provider", response_model=ProviderSettingsOut)
def api_provider_settings(
    db: Session = Depends(get_db),
    service: ScoreService = Depends(get_score_service),
):
    settings = get_or_create_settings(db, get_config())
    return _settings_out(settings, service.provider.mode)


@app.post("/api/settings/provider", response_model=ProviderSettingsOut)
def api_save_provider_settings(
    payload: ProviderSettingsIn,
    db: Session = Depends(get_db),
    service: ScoreService = Depends(get_score_service),
):
    config = get_config()
    settings = get_or_create_settings(db, config)
    api_key = (payload.api_key or "").strip()
    if api_key:
        settings.api_key_enc = encrypt_api_key(api_key)
    settings.use_real_api = payload.use_real_api
    settings.updated_at_utc = datetime.now(timezone.utc)
    db.commit()
    db.refresh(settings)

    # The adapter's mode is fixed per instance, so swap in a new one.
    service.provider = build_provider(snapshot_settings(settings), config)
    logger.info("Provider settings saved: use_real_api=%s mode=%s", settings.use_real_api, service.provider.mode)
    return _settings_out(settings, service.provider.mode)


@app.get("/api/logs")
def api_logs(limit: int = 100, level: str | None = None):
    handler = get_buffer_handler()
    return {"entries": handler.entries(limit=limit, min_level=level)}


def main() -> None:
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    uvicorn.run(
        "livescores.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
    )


if __name__ == "__main__":
    main()
