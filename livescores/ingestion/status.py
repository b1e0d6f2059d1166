"""Normalization of API-Sports status codes into canonical game statuses."""

from __future__ import annotations

from typing import Any

from livescores.ingestion.schema import GameStatus

# Raw short codes across the API-Sports feeds (american-football, basketball,
# baseball, hockey, football v3). Every code maps to exactly one canonical status.
STATUS_CODES: dict[str, GameStatus] = {
    # Not started
    "NS": GameStatus.SCHEDULED,
    "TBD": GameStatus.SCHEDULED,
    # In progress
    "LIVE": GameStatus.LIVE,
    "Q1": GameStatus.LIVE,
    "Q2": GameStatus.LIVE,
    "Q3": GameStatus.LIVE,
    "Q4": GameStatus.LIVE,
    "OT": GameStatus.LIVE,
    "1H": GameStatus.LIVE,
    "2H": GameStatus.LIVE,
    "ET": GameStatus.LIVE,
    "BT": GameStatus.LIVE,
    "P": GameStatus.LIVE,
    "P1": GameStatus.LIVE,
    "P2": GameStatus.LIVE,
    "P3": GameStatus.LIVE,
    "PT": GameStatus.LIVE,
    "IN1": GameStatus.LIVE,
    "IN2": GameStatus.LIVE,
    "IN3": GameStatus.LIVE,
    "IN4": GameStatus.LIVE,
    "IN5": GameStatus.LIVE,
    "IN6": GameStatus.LIVE,
    "IN7": GameStatus.LIVE,
    "IN8": GameStatus.LIVE,
    "IN9": GameStatus.LIVE,
    # Half time
    "HT": GameStatus.HALFTIME,
    # Finished, including technical results
    "FT": GameStatus.FINAL,
    "AOT": GameStatus.FINAL,
    "AET": GameStatus.FINAL,
    "PEN": GameStatus.FINAL,
    "AP": GameStatus.FINAL,
    "AWD": GameStatus.FINAL,
    "WO": GameStatus.FINAL,
    # Suspended or interrupted
    "PST": GameStatus.POSTPONED,
    "POST": GameStatus.POSTPONED,
    "SUSP": GameStatus.POSTPONED,
    "INT": GameStatus.POSTPONED,
    "INTR": GameStatus.POSTPONED,
    # Called off
    "CANC": GameStatus.CANCELLED,
    "ABD": GameStatus.CANCELLED,
}

IN_PROGRESS_STATUSES = frozenset({GameStatus.LIVE, GameStatus.HALFTIME})


def normalize_status(raw: Any) -> GameStatus:
    """Map a raw provider status code to a canonical status.

    Unknown or missing codes normalize to ``scheduled``.
    """

    if isinstance(raw, dict):
        raw = raw.get("short")
    if not isinstance(raw, str):
        return GameStatus.SCHEDULED
    return STATUS_CODES.get(raw.strip().upper(), GameStatus.SCHEDULED)
