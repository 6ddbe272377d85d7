# app/dates.py
"""
Utilidades de fechas: parseo tolerante, fecha prevista de parto y edad.

Las fechas se guardan en Mongo como strings `YYYY-MM-DD`, así que casi todas
las funciones aceptan indistintamente `str`, `date` o `datetime`.
"""
import calendar
from datetime import date, datetime, timedelta
from typing import Dict, Optional, Union

DateLike = Union[str, date, datetime, None]

# Periodo de gestación por defecto (días)
GESTATION_DAYS = 63

_FORMATS = ("%Y-%m-%d", "%Y-%m-%d %H:%M:%S", "%d/%m/%Y")


def parse_iso(value: DateLike) -> Optional[datetime]:
    """
    Convierte una fecha en `datetime`. Devuelve None si está vacía o no se
    puede interpretar.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None

    raw = value.strip()
    for fmt in _FORMATS:
        try:
            return datetime.strptime(raw, fmt)
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None


def to_date_str(value: DateLike) -> Optional[str]:
    """Normaliza a `YYYY-MM-DD` (formato de almacenamiento)."""
    parsed = parse_iso(value)
    return parsed.date().isoformat() if parsed else None


def calculate_expected_birth(mating_date: DateLike, days: int = GESTATION_DAYS) -> str:
    """Fecha prevista de parto (`YYYY-MM-DD`) a partir de la fecha de monta."""
    parsed = parse_iso(mating_date)
    if parsed is None:
        raise ValueError(f"Fecha de monta inválida: {mating_date!r}")
    return (parsed.date() + timedelta(days=days)).isoformat()


def _add_months(value: date, months: int) -> date:
    year, month = divmod(value.month - 1 + months, 12)
    year += value.year
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def calculate_age(birth_date: DateLike, reference: DateLike = None) -> Dict[str, int]:
    birth = parse_iso(birth_date)
    ref = parse_iso(reference) if reference is not None else None
    if birth is None:
        return {"years": 0, "months": 0, "days": 0}
    b = birth.date()
    r = ref.date() if ref else date.today()
    if r < b:
        return {"years": 0, "months": 0, "days": 0}

    months = (r.year - b.year) * 12 + r.month - b.month
    if r.day < b.day:
        months -= 1
    # días restantes desde el último "cumple-mes" (31 ene + 1 mes = 29 feb)
    days = (r - _add_months(b, months)).days
    return {"years": months // 12, "months": months % 12, "days": days}


def format_age(birth_date: DateLike, reference: DateLike = None) -> str:
    age = calculate_age(birth_date, reference)
    parts = []
    if age["years"] > 0:
        parts.append(f"{age['years']} año" if age["years"] == 1 else f"{age['years']} años")
    if age["months"] > 0:
        parts.append(f"{age['months']} mes" if age["months"] == 1 else f"{age['months']} meses")
    if not parts:
        parts.append(f"{age['days']} día" if age["days"] == 1 else f"{age['days']} días")
    return " y ".join(parts)


def is_past(value: DateLike) -> bool:
    parsed = parse_iso(value)
    if parsed is None:
        return False
    now = datetime.now(parsed.tzinfo) if parsed.tzinfo else datetime.now()
    return parsed < now


def is_future(value: DateLike) -> bool:
    parsed = parse_iso(value)
    if parsed is None:
        return False
    now = datetime.now(parsed.tzinfo) if parsed.tzinfo else datetime.now()
    return parsed > now
