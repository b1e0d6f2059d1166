from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone

from cryptography.fernet import Fernet, InvalidToken

from livescores.models import ProviderSettings

logger = logging.getLogger(__name__)
_FERNET: Fernet | None = None

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ScoreConfig:
    cache_ttl_seconds: int = 300
    update_interval_seconds: int = 60
    cleanup_interval_hours: int = 24
    retention_days: int = 7
    updater_enabled: bool = True
    use_real_api: bool = False
    sports_api_key: str | None = None
    sports_api_timeout_seconds: float = 12
    fallback_to_mock: bool = True


@dataclass(frozen=True)
class ProviderSettingsSnapshot:
    id: int
    use_real_api: bool
    api_key_enc: str | None
    updated_at_utc: datetime | None


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid %s=%r, using default %s", name, raw, default)
        return default
    if value < minimum:
        logger.warning("%s must be >= %s (got %s), using default %s", name, minimum, value, default)
        return default
    return value


def _env_bool(name: str, default: bool) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if not raw:
        return default
    return raw in _TRUTHY


def load_config() -> ScoreConfig:
    """Read the live-score configuration from the environment."""
    return ScoreConfig(
        cache_ttl_seconds=_env_int("SCORE_CACHE_TTL_SECONDS", 300),
        update_interval_seconds=_env_int("SCORE_UPDATE_INTERVAL_SECONDS", 60),
        cleanup_interval_hours=_env_int("SCORE_CLEANUP_INTERVAL_HOURS", 24),
        retention_days=_env_int("SCORE_RETENTION_DAYS", 7),
        updater_enabled=_env_bool("SCORE_UPDATER_ENABLED", True),
        use_real_api=_env_bool("USE_REAL_API", False),
        sports_api_key=(os.getenv("SPORTS_API_KEY") or "").strip() or None,
        sports_api_timeout_seconds=_env_int("SPORTS_API_TIMEOUT_SECONDS", 12),
        fallback_to_mock=_env_bool("SPORTS_API_FALLBACK_TO_MOCK", True),
    )


def _default_settings(config: ScoreConfig) -> ProviderSettings:
    return ProviderSettings(
        id=1,
        use_real_api=config.use_real_api,
        api_key_enc=encrypt_api_key(config.sports_api_key),
        updated_at_utc=datetime.now(timezone.utc),
    )


def get_or_create_settings(db, config: ScoreConfig | None = None) -> ProviderSettings:
    settings = db.query(ProviderSettings).filter(ProviderSettings.id == 1).one_or_none()
    if settings:
        return settings
    settings = _default_settings(config or load_config())
    db.add(settings)
    db.commit()
    db.refresh(settings)
    return settings


def snapshot_settings(settings: ProviderSettings) -> ProviderSettingsSnapshot:
    return ProviderSettingsSnapshot(
        id=settings.id,
        use_real_api=bool(settings.use_real_api),
        api_key_enc=settings.api_key_enc,
        updated_at_utc=settings.updated_at_utc,
    )


def get_fernet() -> Fernet:
    global _FERNET
    if _FERNET is not None:
        return _FERNET
    secret = (os.getenv("APP_SECRET_KEY") or "").strip()
    if not secret:
        secret = Fernet.generate_key().decode("utf-8")
        logger.warning(
            "APP_SECRET_KEY missing. Generated a temporary key: %s. "
            "Set APP_SECRET_KEY to this value to persist decryption.",
            secret,
        )
    _FERNET = Fernet(secret.encode("utf-8"))
    return _FERNET


def encrypt_api_key(api_key: str | None) -> str | None:
    if not api_key:
        return None
    fernet = get_fernet()
    return fernet.encrypt(api_key.encode("utf-8")).decode("utf-8")


def decrypt_api_key(encrypted: str | None) -> str | None:
    if not encrypted:
        return None
    fernet = get_fernet()
    try:
        return fernet.decrypt(encrypted.encode("utf-8")).decode("utf-8")
    except InvalidToken:
        logger.error("Failed to decrypt sports API key. Check APP_SECRET_KEY.")
        return None
