"""
Key/value config store and the typed snapshot consumed by the core logic.

Values live as strings in the ``config`` table. Attendance and payroll
code never read the table directly; they receive a ``RuntimeConfig``
loaded once per request.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.config_entry import ConfigEntry

logger = logging.getLogger(__name__)

# key -> (default, parser, description)
DEFAULTS: dict[str, tuple[str, type, str]] = {
    "officeLat": ("-2.9795731113284303", float, "Site office latitude"),
    "officeLng": ("104.73111003716011", float, "Site office longitude"),
    "geofenceRadius": ("100", float, "Clock-in geofence radius in meters"),
    "latePenaltyPerMinute": ("2000", int, "Late penalty per minute (IDR)"),
    "bpjsKesehatanRate": ("0.01", float, "BPJS Kesehatan employee contribution rate"),
    "bpjsKetenagakerjaanRate": ("0.02", float, "BPJS Ketenagakerjaan employee contribution rate"),
}


@dataclass(frozen=True)
class RuntimeConfig:
    office_lat: float = -2.9795731113284303
    office_lng: float = 104.73111003716011
    geofence_radius: float = 100
    late_penalty_per_minute: int = 2000
    bpjs_kesehatan_rate: float = 0.01
    bpjs_ketenagakerjaan_rate: float = 0.02


def _parse(key: str, raw: str | None):
    default, parser, _ = DEFAULTS[key]
    if raw is None or not raw.strip():
        return parser(default)
    try:
        if parser is int:
            # "2000.0" is accepted for integer keys
            return int(float(raw))
        return parser(raw)
    except (ValueError, OverflowError):
        logger.warning("Config %s has unparsable value %r, using default %s", key, raw, default)
        return parser(default)


def build_runtime_config(values: dict[str, str]) -> RuntimeConfig:
    return RuntimeConfig(
        office_lat=_parse("officeLat", values.get("officeLat")),
        office_lng=_parse("officeLng", values.get("officeLng")),
        geofence_radius=_parse("geofenceRadius", values.get("geofenceRadius")),
        late_penalty_per_minute=_parse("latePenaltyPerMinute", values.get("latePenaltyPerMinute")),
        bpjs_kesehatan_rate=_parse("bpjsKesehatanRate", values.get("bpjsKesehatanRate")),
        bpjs_ketenagakerjaan_rate=_parse(
            "bpjsKetenagakerjaanRate", values.get("bpjsKetenagakerjaanRate")
        ),
    )


async def list_configs(db: AsyncSession) -> list[ConfigEntry]:
    result = await db.execute(select(ConfigEntry).order_by(ConfigEntry.key))
    return list(result.scalars().all())


async def get_config(db: AsyncSession, key: str) -> ConfigEntry | None:
    result = await db.execute(select(ConfigEntry).where(ConfigEntry.key == key))
    return result.scalar_one_or_none()


async def load_runtime_config(db: AsyncSession) -> RuntimeConfig:
    """Read the config table fresh; nothing is cached between requests."""
    entries = await list_configs(db)
    return build_runtime_config({e.key: e.value for e in entries})


async def set_config(
    db: AsyncSession,
    key: str,
    value: str,
    description: str | None = None,
    *,
    commit: bool = True,
) -> ConfigEntry:
    """Upsert: update value/description/timestamp of an existing key, else insert."""
    entry = await get_config(db, key)
    if entry is None:
        entry = ConfigEntry(key=key, value=value, description=description)
        db.add(entry)
    else:
        entry.value = value
        if description is not None:
            entry.description = description
        entry.updated_at = datetime.now(timezone.utc)

    if commit:
        await db.commit()
        await db.refresh(entry)
    return entry


async def seed_defaults(db: AsyncSession) -> int:
    """Insert the core keys that are missing. Returns how many were added."""
    existing = {e.key for e in await list_configs(db)}
    added = 0
    for key, (default, _, description) in DEFAULTS.items():
        if key not in existing:
            db.add(ConfigEntry(key=key, value=default, description=description))
            added += 1
    if added:
        await db.commit()
    return added
