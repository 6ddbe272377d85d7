# app/services/events.py
# Historial de eventos (dog / litter / puppy) y sus recordatorios.
import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from ..exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

ENTITY_TYPES = ("dog", "litter", "puppy")

REPRODUCTION_TYPES = ("heat", "mating", "pregnancy_test", "birth")
HEALTH_TYPES = ("vaccine", "deworming", "exam", "medication", "surgery", "vet_visit")
OTHER_TYPES = ("weighing", "grooming", "training", "show", "note")
EVENT_TYPES = REPRODUCTION_TYPES + HEALTH_TYPES + OTHER_TYPES


def _today(today: Optional[date]) -> date:
    return today or date.today()


class EventService:
    """
    Capa fina sobre la colección `events`. Las fechas se guardan como
    `YYYY-MM-DD`, así que los rangos se filtran comparando strings.
    """

    def __init__(self, events):
        self.events = events

    async def add(
        self,
        entity_type: str,
        entity_id: str,
        event_type: str,
        event_date: str,
        payload: Optional[Dict[str, Any]] = None,
        notes: Optional[str] = None,
        reminder_date: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> Dict[str, Any]:
        errors = {}
        if entity_type not in ENTITY_TYPES:
            errors["entity_type"] = "Tipo de entidad inválido"
        if event_type not in EVENT_TYPES:
            errors["event_type"] = "Tipo de evento inválido"
        if errors:
            raise ValidationError(errors)

        event_id = await self.events.insert({
            "entity_type": entity_type,
            "entity_id": entity_id,
            "event_type": event_type,
            "event_date": event_date,
            "payload": payload or {},
            "notes": notes,
            "reminder_date": reminder_date,
            "reminder_completed": False if reminder_date else None,
            "created_by": created_by,
        })
        return await self.events.find_by_id(event_id)

    async def get(self, event_id: str) -> Dict[str, Any]:
        event = await self.events.find_by_id(event_id)
        if not event:
            raise NotFoundError("Evento no encontrado")
        return event

    async def by_entity(
        self, entity_type: str, entity_id: str, event_types: Optional[tuple] = None
    ) -> List[Dict[str, Any]]:
        """Eventos de una entidad, del más reciente al más antiguo."""
        filters: Dict[str, Any] = {"entity_type": entity_type, "entity_id": entity_id}
        if event_types:
            filters["event_type"] = {"$in": list(event_types)}
        return await self.events.find_all(filters, limit=1000, sort_by="event_date", descending=True)

    async def upcoming(self, days: int = 30, today: Optional[date] = None) -> List[Dict[str, Any]]:
        start = _today(today)
        end = start + timedelta(days=days)
        return await self.events.find_all(
            {"event_date": {"$gte": start.isoformat(), "$lte": end.isoformat()}},
            limit=1000,
            sort_by="event_date",
        )

    async def pending_reminders(
        self, today: Optional[date] = None, event_types: Optional[tuple] = None
    ) -> List[Dict[str, Any]]:
        """Recordatorios vencidos (reminder_date <= hoy) sin completar."""
        filters: Dict[str, Any] = {
            "reminder_date": {"$lte": _today(today).isoformat()},
            "reminder_completed": False,
        }
        if event_types:
            filters["event_type"] = {"$in": list(event_types)}
        return await self.events.find_all(filters, limit=1000, sort_by="reminder_date")

    async def upcoming_reminders(
        self, event_type: str, days: int = 30, today: Optional[date] = None
    ) -> List[Dict[str, Any]]:
        start = _today(today)
        end = start + timedelta(days=days)
        return await self.events.find_all(
            {
                "event_type": event_type,
                "reminder_date": {"$gte": start.isoformat(), "$lte": end.isoformat()},
                "reminder_completed": False,
            },
            limit=1000,
            sort_by="reminder_date",
        )

    async def complete_reminder(self, event_id: str) -> Dict[str, Any]:
        event = await self.get(event_id)
        if not event.get("reminder_date"):
            raise ValidationError({"reminder_date": "El evento no tiene recordatorio"})
        await self.events.update(event_id, {"reminder_completed": True})
        logger.info("Recordatorio completado: evento %s", event_id)
        return await self.events.find_by_id(event_id)

    async def delete(self, event_id: str) -> None:
        if not await self.events.delete(event_id):
            raise NotFoundError("Evento no encontrado")


async def ensure_entity(entity_type: str, entity_id: str, dogs, litters, puppies) -> Dict[str, Any]:
    """Devuelve el perro/camada/cachorro al que se asocia un evento, o lanza."""
    repos = {"dog": dogs, "litter": litters, "puppy": puppies}
    if entity_type not in repos:
        raise ValidationError({"entity_type": "Tipo de entidad inválido"})
    entity = await repos[entity_type].find_by_id(entity_id)
    if not entity:
        raise NotFoundError("Entidad no encontrada")
    return entity
