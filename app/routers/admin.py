# app/routers/admin.py
# Estado y control de migraciones del esquema (solo manage_settings).
from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel, Field
from typing import List
import logging

from ..activation import activate, migration_lock
from ..config import get_settings
from ..db import get_db
from ..exceptions import MigrationError, MigrationLockedError
from ..migrations.runner import MigrationRunner
from ..migrations.units import default_registry
from ..repositories import SettingsStore, get_settings_store
from ..security import require_capability

logger = logging.getLogger(__name__)

router = APIRouter()
settings = get_settings()

class RegisteredMigration(BaseModel):
    version: str
    name: str
    reversible: bool

class MigrationStatusOut(BaseModel):
    current_version: str
    latest_version: str
    pending: List[str]
    registered: List[RegisteredMigration]

class RollbackIn(BaseModel):
    target_version: str = Field(..., pattern=r"^\d{3}$")

class RunOut(BaseModel):
    applied: List[str]
    current_version: str

class RollbackOut(BaseModel):
    rolled_back: List[str]
    current_version: str

async def get_migration_runner(
    store: SettingsStore = Depends(get_settings_store),
    db: AsyncIOMotorDatabase = Depends(get_db),
) -> MigrationRunner:
    return MigrationRunner(store, default_registry(), db)

def _raise_http(exc: MigrationError) -> None:
    if isinstance(exc, MigrationLockedError):
        raise HTTPException(status_code=409, detail=str(exc))
    raise HTTPException(status_code=500, detail=str(exc))

@router.get("/migrations", response_model=MigrationStatusOut)
async def migration_status(
    current=Depends(require_capability("manage_settings")),
    runner: MigrationRunner = Depends(get_migration_runner),
):
    version = await runner.get_current_version()
    return {
        "current_version": version,
        "latest_version": runner.registry.latest_version,
        "pending": [m.version for m in runner.registry.pending(version)],
        "registered": [
            {"version": m.version, "name": m.name, "reversible": m.reversible}
            for m in runner.registry
        ],
    }

@router.post("/migrations/run", response_model=RunOut)
async def run_migrations(
    current=Depends(require_capability("manage_settings")),
    runner: MigrationRunner = Depends(get_migration_runner),
):
    try:
        applied = await activate(runner.store, runner, settings.migration_lock_ttl)
    except MigrationError as exc:
        _raise_http(exc)
    return {"applied": applied, "current_version": await runner.get_current_version()}

@router.post("/migrations/rollback", response_model=RollbackOut)
async def rollback_migrations(
    payload: RollbackIn,
    current=Depends(require_capability("manage_settings")),
    runner: MigrationRunner = Depends(get_migration_runner),
):
    logger.warning("Rollback de esquema a %s solicitado por %s", payload.target_version, current["id"])
    try:
        async with migration_lock(runner.store, settings.migration_lock_ttl):
            rolled_back = await runner.rollback(payload.target_version)
    except MigrationError as exc:
        _raise_http(exc)
    return {"rolled_back": rolled_back, "current_version": await runner.get_current_version()}
