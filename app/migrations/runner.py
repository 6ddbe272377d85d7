# app/migrations/runner.py
import logging
from typing import Any, List, Optional

from ..exceptions import MigrationError
from .base import INITIAL_VERSION, MigrationRegistry, validate_version

logger = logging.getLogger(__name__)

VERSION_OPTION = "canil_core_db_version"


class MigrationRunner:
    """
    Lleva el esquema desde la versión guardada hasta la última registrada.

    `store` es el almacén clave-valor (get/set) donde vive la versión actual y
    `db` se pasa tal cual a apply()/rollback() de cada unidad. La versión se
    persiste después de cada unidad completada: si el proceso cae a mitad de
    run(), la siguiente ejecución retoma desde la última unidad terminada.
    Cada unidad debe ser idempotente.

    No hay exclusión mutua aquí; quien lo invoque debe tomar el lock
    (ver app/activation.py).
    """

    def __init__(self, store, registry: MigrationRegistry, db: Optional[Any] = None):
        self.store = store
        self.registry = registry
        self.db = db

    async def get_current_version(self) -> str:
        return str(await self.store.get(VERSION_OPTION, INITIAL_VERSION))

    async def run(self) -> List[str]:
        """Aplica las unidades pendientes en orden ascendente. Devuelve las versiones aplicadas."""
        current = await self.get_current_version()
        pending = self.registry.pending(current)
        if not pending:
            logger.info("Esquema al día (versión %s)", current)
            return []

        applied: List[str] = []
        for migration in pending:
            logger.info("Aplicando migración %s_%s", migration.version, migration.name)
            try:
                await migration.apply(self.db)
            except Exception as exc:
                logger.exception(
                    "Fallo en la migración %s_%s; esquema queda en %s",
                    migration.version, migration.name, current,
                )
                raise MigrationError(
                    f"Migración {migration.version}_{migration.name} falló: {exc}",
                    version=migration.version,
                    name=migration.name,
                ) from exc
            await self.store.set(VERSION_OPTION, migration.version)
            current = migration.version
            applied.append(migration.version)

        logger.info("Migraciones aplicadas: %s (versión %s)", ", ".join(applied), current)
        return applied

    async def rollback(self, target_version: str) -> List[str]:
        """
        Revierte hasta target_version (exclusive) en orden descendente.
        No hace nada si target_version >= versión actual. Las unidades sin
        rollback se saltan.
        """
        validate_version(target_version)
        current = await self.get_current_version()
        if target_version >= current:
            logger.info("Rollback a %s ignorado (versión actual %s)", target_version, current)
            return []

        rolled_back: List[str] = []
        for migration in self.registry.between(target_version, current):
            if migration.rollback is None:
                logger.debug("Migración %s sin rollback, se salta", migration.version)
                continue
            logger.info("Revirtiendo migración %s_%s", migration.version, migration.name)
            try:
                await migration.rollback(self.db)
            except Exception as exc:
                logger.exception("Fallo revirtiendo %s_%s", migration.version, migration.name)
                raise MigrationError(
                    f"Rollback de {migration.version}_{migration.name} falló: {exc}",
                    version=migration.version,
                    name=migration.name,
                ) from exc
            rolled_back.append(migration.version)

        await self.store.set(VERSION_OPTION, target_version)
        logger.info("Rollback completado: versión %s", target_version)
        return rolled_back
