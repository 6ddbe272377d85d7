"""
Excepciones de dominio.

Los servicios las lanzan; los handlers de app/main.py las traducen a 404/400.
"""
from typing import Dict, Optional


class NotFoundError(Exception):
    """El recurso solicitado no existe (404)."""

    def __init__(self, message: str = "Recurso no encontrado"):
        super().__init__(message)
        self.message = message


class ValidationError(Exception):
    """Datos inválidos; `errors` mapea campo -> mensaje (400)."""

    def __init__(self, errors: Dict[str, str], message: str = "Datos inválidos"):
        super().__init__(message)
        self.message = message
        self.errors = errors


class MigrationError(Exception):
    """Fallo fatal aplicando o revirtiendo una migración."""

    def __init__(self, message: str, version: Optional[str] = None, name: Optional[str] = None):
        super().__init__(message)
        self.version = version
        self.name = name


class MigrationLockedError(MigrationError):
    """Otro proceso está ejecutando las migraciones."""
