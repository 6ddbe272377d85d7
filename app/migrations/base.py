# app/migrations/base.py
"""
Unidades de migración y registro explícito.

Cada unidad se identifica por una versión de tres dígitos con ceros a la
izquierda ("001" ... "999"). Al ser de ancho fijo, la comparación de strings
coincide con el orden numérico; el límite es de 999 unidades.
"""
import logging
import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from pymongo import ASCENDING

logger = logging.getLogger(__name__)

INITIAL_VERSION = "000"
VERSION_RE = re.compile(r"^\d{3}$")

MigrationFn = Callable[[Any], Awaitable[None]]
IndexSpec = Tuple[List[Tuple[str, int]], Dict[str, Any]]


def validate_version(version: str) -> str:
    if not isinstance(version, str) or not VERSION_RE.match(version):
        raise ValueError(f"Versión de migración inválida: {version!r} (se espera 'NNN')")
    return version


@dataclass(frozen=True)
class Migration:
    version: str
    name: str
    apply: MigrationFn
    rollback: Optional[MigrationFn] = None

    @property
    def reversible(self) -> bool:
        return self.rollback is not None


class MigrationRegistry:
    """Mapa versión -> Migration, poblado con llamadas a register()."""

    def __init__(self) -> None:
        self._migrations: Dict[str, Migration] = {}

    def register(
        self,
        version: str,
        name: str,
        apply: MigrationFn,
        rollback: Optional[MigrationFn] = None,
    ) -> Migration:
        validate_version(version)
        if version == INITIAL_VERSION:
            raise ValueError(f"La versión {INITIAL_VERSION} está reservada")
        if version in self._migrations:
            raise ValueError(f"Versión de migración duplicada: {version}")
        migration = Migration(version=version, name=name, apply=apply, rollback=rollback)
        self._migrations[version] = migration
        logger.debug("Migración registrada: %s_%s", version, name)
        return migration

    def get(self, version: str) -> Optional[Migration]:
        return self._migrations.get(version)

    def all(self) -> List[Migration]:
        return [self._migrations[v] for v in sorted(self._migrations)]

    def pending(self, current_version: str) -> List[Migration]:
        """Unidades con versión > current_version, en orden ascendente."""
        return [m for m in self.all() if m.version > current_version]

    def between(self, target_version: str, current_version: str) -> List[Migration]:
        """Unidades en (target, current], en orden descendente (para rollback)."""
        return [
            m for m in reversed(self.all())
            if target_version < m.version <= current_version
        ]

    @property
    def latest_version(self) -> str:
        return max(self._migrations, default=INITIAL_VERSION)

    def __len__(self) -> int:
        return len(self._migrations)

    def __iter__(self) -> Iterator[Migration]:
        return iter(self.all())


# ---------- Helpers para unidades sobre Mongo ----------

async def ensure_collection(db, name: str) -> None:
    if name not in await db.list_collection_names():
        await db.create_collection(name)


def collection_migration(
    collection: str, indexes: Sequence[IndexSpec] = ()
) -> Tuple[MigrationFn, MigrationFn]:
    """
    Genera (apply, rollback) para una colección: apply la crea si no existe y
    asegura sus índices (create_index es idempotente), rollback la elimina.
    """

    async def apply(db) -> None:
        await ensure_collection(db, collection)
        for keys, options in indexes:
            await db[collection].create_index(keys, **options)

    async def rollback(db) -> None:
        await db.drop_collection(collection)

    apply.__name__ = f"create_{collection}"
    rollback.__name__ = f"drop_{collection}"
    return apply, rollback


def index(*fields: str, **options: Any) -> IndexSpec:
    return [(f, ASCENDING) for f in fields], options
