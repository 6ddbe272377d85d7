# app/services/health.py
# Registros de salud (vacunas, desparasitaciones, exámenes...) sobre `events`.
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from ..dates import to_date_str
from ..exceptions import ValidationError
from .events import HEALTH_TYPES, EventService, ensure_entity

logger = logging.getLogger(__name__)

# tipo -> (campos del payload, campo obligatorio, campo que fija el recordatorio)
HEALTH_RECORDS: Dict[str, tuple] = {
    "vaccine": (("name", "manufacturer", "batch", "next_dose_date"), "name", "next_dose_date"),
    "deworming": (("product", "dosage", "next_dose_date"), "product", "next_dose_date"),
    "exam": (("type", "result"), "type", None),
    "medication": (("name", "dosage", "frequency", "end_date"), "name", None),
    "surgery": (("type", "veterinarian"), "type", None),
    "vet_visit": (("reason", "veterinarian", "diagnosis", "treatment", "next_visit_date"), None, "next_visit_date"),
}


class HealthService:
    def __init__(self, dogs, litters, puppies, events):
        self.dogs = dogs
        self.litters = litters
        self.puppies = puppies
        self.events = EventService(events)

    async def record(
        self,
        event_type: str,
        entity_type: str,
        entity_id: str,
        event_date: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
        notes: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Valida la entidad y los campos del tipo de registro y crea el evento.
        Si el tipo tiene próxima dosis / visita, esa fecha queda como recordatorio.
        """
        if event_type not in HEALTH_RECORDS:
            raise ValidationError({"event_type": "Tipo de registro de salud inválido"})
        fields, required, reminder_field = HEALTH_RECORDS[event_type]

        await ensure_entity(entity_type, entity_id, self.dogs, self.litters, self.puppies)

        data = data or {}
        if required and not data.get(required):
            raise ValidationError({required: "Campo obligatorio"})

        when = to_date_str(event_date) if event_date else date.today().isoformat()
        if when is None:
            raise ValidationError({"event_date": "Fecha inválida"})

        payload = {f: data.get(f) for f in fields if data.get(f) is not None}
        reminder = to_date_str(payload.get(reminder_field)) if reminder_field else None

        event = await self.events.add(
            entity_type, entity_id, event_type, when, payload, notes,
            reminder_date=reminder, created_by=created_by,
        )
        logger.info("Registro de salud %s para %s %s", event_type, entity_type, entity_id)
        return event

    async def history(self, entity_type: str, entity_id: str) -> List[Dict[str, Any]]:
        await ensure_entity(entity_type, entity_id, self.dogs, self.litters, self.puppies)
        return await self.events.by_entity(entity_type, entity_id, HEALTH_TYPES)

    async def upcoming(self, event_type: str, days: int = 30, today: Optional[date] = None) -> List[Dict[str, Any]]:
        return await self.events.upcoming_reminders(event_type, days, today)

    async def overdue(self, today: Optional[date] = None) -> List[Dict[str, Any]]:
        """Vacunas y desparasitaciones cuyo recordatorio ya venció."""
        return await self.events.pending_reminders(today, ("vaccine", "deworming"))
