# app/activation.py
# Arranque del esquema: lock consultivo -> migraciones -> opciones por defecto.
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import List

from .config import APP_VERSION
from .exceptions import MigrationLockedError
from .migrations.runner import MigrationRunner

logger = logging.getLogger(__name__)

LOCK_NAME = "migrations"


@asynccontextmanager
async def migration_lock(store, ttl_seconds: int = 300):
    """
    Exclusión mutua entre procesos que migran la misma base de datos.
    Un lock más viejo que ttl_seconds se considera abandonado.
    """
    if not await store.acquire_lock(LOCK_NAME, ttl_seconds):
        raise MigrationLockedError("Hay otra ejecución de migraciones en curso")
    try:
        yield
    finally:
        await store.release_lock(LOCK_NAME)


async def set_default_options(store) -> None:
    await store.set("canil_core_version", APP_VERSION)
    if not await store.get("canil_core_activated_at"):
        await store.set("canil_core_activated_at", datetime.utcnow().isoformat())


async def activate(store, runner: MigrationRunner, lock_ttl: int = 300) -> List[str]:
    """
    Ejecuta las migraciones pendientes bajo el lock y guarda las opciones
    por defecto. Un MigrationError se propaga tal cual: el arranque aborta.
    """
    async with migration_lock(store, lock_ttl):
        applied = await runner.run()
        await set_default_options(store)
    logger.info("Activación completada (versión %s)", await runner.get_current_version())
    return applied
