"""
Key/value config endpoints — office coordinates, geofence radius,
penalty and BPJS rates. Reads for any user, writes for admins.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_active_user, get_db, require_admin
from app.models.config_entry import ConfigEntry
from app.models.user import User
from app.schemas.attendance import DeleteResponse
from app.schemas.config import ConfigBulkResponse, ConfigRead, ConfigSet
from app.services import config_store

router = APIRouter(prefix="/config", tags=["config"])
logger = logging.getLogger(__name__)


@router.get("", response_model=dict[str, str])
async def get_all_config(
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> dict[str, str]:
    """All entries flattened to ``{key: value}``."""
    return {e.key: e.value or "" for e in await config_store.list_configs(db)}


@router.get("/{key}", response_model=ConfigRead)
async def get_config_entry(
    key: str,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> ConfigEntry:
    entry = await config_store.get_config(db, key)
    if entry is None:
        raise HTTPException(status_code=404, detail="Config key not found")
    return entry


@router.post("", response_model=ConfigRead)
async def set_config_entry(
    body: ConfigSet,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> ConfigEntry:
    entry = await config_store.set_config(db, body.key, body.value, body.description)
    logger.info("Config %s set to %r", body.key, body.value)
    return entry


@router.post("/bulk", response_model=ConfigBulkResponse)
async def set_config_bulk(
    body: dict[str, str | bool | int | float | None] = Body(...),
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> ConfigBulkResponse:
    """Upsert many keys at once from a flat ``{key: value}`` object."""
    if not body:
        raise HTTPException(status_code=400, detail="Config object required")

    entries = []
    for key, value in body.items():
        try:
            item = ConfigSet(key=key, value=value)
        except ValidationError as exc:
            raise HTTPException(status_code=400, detail=f"Invalid config key {key!r}") from exc
        entries.append(
            await config_store.set_config(db, item.key, item.value, commit=False)
        )
    await db.commit()
    for entry in entries:
        await db.refresh(entry)

    logger.info("Bulk config update: %s", sorted(body))
    return ConfigBulkResponse(
        success=True, configs=[ConfigRead.model_validate(e) for e in entries]
    )


@router.delete("/{key}", response_model=DeleteResponse)
async def delete_config_entry(
    key: str,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> DeleteResponse:
    entry = await config_store.get_config(db, key)
    if entry is None:
        raise HTTPException(status_code=404, detail="Config key not found")
    await db.delete(entry)
    await db.commit()
    logger.info("Deleted config %s", key)
    return DeleteResponse(success=True, message="Config deleted successfully")
