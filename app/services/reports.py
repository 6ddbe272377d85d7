# app/services/reports.py
"""
Informes del criadero: plantel, camadas, cachorros y salud.

Cada informe devuelve `{data, summary, generated_at}` y puede exportarse a CSV
con `to_csv` usando las columnas de `CSV_COLUMNS`.
"""
import csv
import io
import json
import logging
from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from ..exceptions import ValidationError
from .events import HEALTH_TYPES

logger = logging.getLogger(__name__)

REPORT_LIMIT = 1000

# informe -> [(campo, cabecera)]
CSV_COLUMNS: Dict[str, List[tuple]] = {
    "stock": [
        ("name", "Nombre"), ("breed", "Raza"), ("sex", "Sexo"), ("birth_date", "Nacimiento"),
        ("status", "Estado"), ("registration_number", "Registro"), ("chip_number", "Microchip"),
        ("color", "Color"),
    ],
    "litters": [
        ("name", "Nombre"), ("dam_name", "Madre"), ("sire_name", "Padre"), ("mating_date", "Monta"),
        ("expected_birth_date", "Parto previsto"), ("actual_birth_date", "Parto"), ("status", "Estado"),
        ("puppies_born_count", "Nacidos"), ("puppies_alive_count", "Vivos"),
    ],
    "puppies": [
        ("identifier", "Identificador"), ("name", "Nombre"), ("sex", "Sexo"), ("color", "Color"),
        ("status", "Estado"), ("litter_name", "Camada"), ("birth_weight", "Peso al nacer"),
        ("chip_number", "Microchip"),
    ],
    "health": [
        ("event_date", "Fecha"), ("event_type", "Tipo"), ("entity_type", "Entidad"),
        ("entity_id", "Id entidad"), ("notes", "Notas"),
    ],
}


def _report(data: List[Dict[str, Any]], summary: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "data": data,
        "summary": summary,
        "generated_at": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
    }


def _in_range(value: Optional[str], start: Optional[str], end: Optional[str]) -> bool:
    # sin fecha no se descarta
    if not value:
        return True
    day = str(value)[:10]
    if start and day < start:
        return False
    if end and day > end:
        return False
    return True


async def _names(repo, ids) -> Dict[str, Optional[str]]:
    """id -> nombre, una búsqueda por id distinto."""
    names: Dict[str, Optional[str]] = {}
    for ref in set(filter(None, ids)):
        doc = await repo.find_by_id(ref)
        names[ref] = doc.get("name") if doc else None
    return names


def _cell(value: Any) -> Any:
    if isinstance(value, (list, dict)):
        return json.dumps(value, ensure_ascii=False)
    return "" if value is None else value


def to_csv(rows: Sequence[Dict[str, Any]], columns: Sequence[str], headers: Optional[Sequence[str]] = None) -> str:
    """Filas -> CSV. Las listas y dicts se escriben como JSON."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(headers or columns)
    for row in rows:
        writer.writerow([_cell(row.get(col)) for col in columns])
    return buffer.getvalue()


def report_to_csv(name: str, report: Dict[str, Any]) -> str:
    columns = CSV_COLUMNS[name]
    return to_csv(report["data"], [c for c, _ in columns], [h for _, h in columns])


class ReportsService:
    def __init__(self, dogs, litters, puppies, events):
        self.dogs = dogs
        self.litters = litters
        self.puppies = puppies
        self.events = events

    async def stock(self, status: Optional[str] = None, sex: Optional[str] = None) -> Dict[str, Any]:
        """Plantel: perros del criadero por estado y sexo."""
        dogs = await self.dogs.find_all({"status": status, "sex": sex}, limit=REPORT_LIMIT, sort_by="name")
        by_status = Counter(d.get("status") for d in dogs)
        summary = {
            "total": len(dogs),
            "males": sum(1 for d in dogs if d.get("sex") == "male"),
            "females": sum(1 for d in dogs if d.get("sex") == "female"),
        }
        for key in ("active", "breeding", "retired", "coowned"):
            summary[key] = by_status.get(key, 0)
        return _report(dogs, summary)

    async def litters_report(
        self, start: Optional[str] = None, end: Optional[str] = None, status: Optional[str] = None
    ) -> Dict[str, Any]:
        litters = await self.litters.find_all(
            {"status": status}, limit=REPORT_LIMIT, sort_by="mating_date", descending=True
        )
        litters = [
            litter for litter in litters
            if _in_range(litter.get("mating_date") or litter.get("created_at"), start, end)
        ]
        names = await _names(self.dogs, [litter.get(k) for litter in litters for k in ("dam_id", "sire_id")])
        for litter in litters:
            litter["dam_name"] = names.get(litter.get("dam_id"))
            litter["sire_name"] = names.get(litter.get("sire_id"))
        summary = {
            "total": len(litters),
            "by_status": dict(Counter(litter.get("status") for litter in litters)),
            "total_puppies_born": sum(litter.get("puppies_born_count") or 0 for litter in litters),
            "total_puppies_alive": sum(litter.get("puppies_alive_count") or 0 for litter in litters),
        }
        return _report(litters, summary)

    async def puppies_report(self, status: Optional[str] = None) -> Dict[str, Any]:
        puppies = await self.puppies.find_all(
            {"status": status}, limit=REPORT_LIMIT, sort_by="created_at", descending=True
        )
        litter_names = await _names(self.litters, [p.get("litter_id") for p in puppies])
        # solo se cuentan estos estados; "returned" no entra en el resumen
        by_status = dict.fromkeys(("available", "reserved", "sold", "retained", "deceased"), 0)
        for p in puppies:
            p["litter_name"] = litter_names.get(p.get("litter_id"))
            if p.get("status") in by_status:
                by_status[p["status"]] += 1
        summary = {
            "total": len(puppies),
            "by_status": by_status,
            "males": sum(1 for p in puppies if p.get("sex") == "male"),
            "females": sum(1 for p in puppies if p.get("sex") == "female"),
        }
        return _report(puppies, summary)

    async def health_report(
        self,
        start: Optional[str] = None,
        end: Optional[str] = None,
        event_type: Optional[str] = None,
        entity_type: Optional[str] = None,
    ) -> Dict[str, Any]:
        if event_type and event_type not in HEALTH_TYPES:
            raise ValidationError({"event_type": "No es un tipo de registro de salud"})

        date_range = {k: v for k, v in (("$gte", start), ("$lte", end)) if v}
        events = await self.events.find_all(
            {
                "event_type": event_type or {"$in": list(HEALTH_TYPES)},
                "entity_type": entity_type,
                "event_date": date_range or None,
            },
            limit=REPORT_LIMIT,
            sort_by="event_date",
            descending=True,
        )
        summary = {
            "total": len(events),
            "by_type": dict(Counter(e.get("event_type") for e in events)),
            "by_entity_type": dict(Counter(e.get("entity_type") for e in events)),
        }
        logger.info("Informe de salud: %d eventos", len(events))
        return _report(events, summary)
