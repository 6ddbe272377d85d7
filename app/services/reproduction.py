# app/services/reproduction.py
# Flujo reproductivo: celo -> monta -> confirmación de gestación -> parto.
import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from ..dates import GESTATION_DAYS, calculate_expected_birth, parse_iso, to_date_str
from ..exceptions import NotFoundError, ValidationError
from .events import REPRODUCTION_TYPES, EventService

logger = logging.getLogger(__name__)


class ReproductionService:
    def __init__(self, dogs, litters, puppies, events, gestation_days: int = GESTATION_DAYS):
        self.dogs = dogs
        self.litters = litters
        self.puppies = puppies
        self.events = EventService(events)
        self.gestation_days = gestation_days

    async def _get_litter(self, litter_id: str) -> Dict[str, Any]:
        litter = await self.litters.find_by_id(litter_id)
        if not litter:
            raise NotFoundError("Camada no encontrada")
        return litter

    async def record_mating(
        self,
        dam_id: str,
        sire_id: str,
        mating_date: str,
        mating_type: str = "natural",
        heat_start_date: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Dict[str, Any]:
        dam = await self.dogs.find_by_id(dam_id)
        if not dam:
            raise NotFoundError("Hembra no encontrada")
        if dam.get("sex") != "female":
            raise ValidationError({"dam_id": "La madre debe ser una hembra"})

        sire = await self.dogs.find_by_id(sire_id)
        if not sire:
            raise NotFoundError("Macho no encontrado")
        if sire.get("sex") != "male":
            raise ValidationError({"sire_id": "El padre debe ser un macho"})

        mating = to_date_str(mating_date)
        if mating is None:
            raise ValidationError({"mating_date": "Fecha de monta inválida"})
        expected = calculate_expected_birth(mating, self.gestation_days)

        litter_data = {
            "name": f"Camada {dam['name']} x {sire['name']}",
            "dam_id": dam["id"],
            "sire_id": sire["id"],
            "status": "confirmed",
            "mating_date": mating,
            "mating_type": mating_type,
            "expected_birth_date": expected,
            "notes": notes,
            "puppies_born_count": 0,
            "puppies_alive_count": 0,
            "males_count": 0,
            "females_count": 0,
        }
        if heat_start_date:
            litter_data["heat_start_date"] = to_date_str(heat_start_date)

        litter_id = await self.litters.insert(litter_data)
        litter = await self.litters.find_by_id(litter_id)

        payload = {
            "litter_id": litter_id,
            "sire_id": sire["id"],
            "sire_name": sire["name"],
            "dam_name": dam["name"],
            "mating_type": mating_type,
            "expected_birth_date": expected,
        }
        event = await self.events.add(
            "dog", dam["id"], "mating", mating, payload, notes, reminder_date=expected
        )
        await self.events.add(
            "litter", litter_id, "mating", mating, payload, notes, reminder_date=expected
        )
        logger.info("Monta registrada: camada %s, parto previsto %s", litter_id, expected)

        return {
            "litter": litter,
            "event": event,
            "message": f"Monta registrada. Parto previsto: {parse_iso(expected):%d/%m/%Y}",
        }

    async def confirm_pregnancy(
        self,
        litter_id: str,
        confirmation_date: str,
        method: str = "ultrasound",
        notes: Optional[str] = None,
    ) -> Dict[str, Any]:
        litter = await self._get_litter(litter_id)
        confirmed = to_date_str(confirmation_date)
        if confirmed is None:
            raise ValidationError({"confirmation_date": "Fecha inválida"})

        await self.litters.update(litter_id, {
            "status": "pregnant",
            "pregnancy_confirmed_date": confirmed,
        })
        payload = {
            "result": "positive",
            "method": method,
            "dam_id": litter["dam_id"],
            "sire_id": litter["sire_id"],
        }
        event = await self.events.add("litter", litter_id, "pregnancy_test", confirmed, payload, notes)
        await self.events.add("dog", litter["dam_id"], "pregnancy_test", confirmed, payload, notes)

        return {
            "litter": await self.litters.find_by_id(litter_id),
            "event": event,
            "message": "Gestación confirmada",
        }

    async def record_birth(
        self,
        litter_id: str,
        birth_date: str,
        birth_type: str = "natural",
        puppies: Optional[List[Dict[str, Any]]] = None,
        notes: Optional[str] = None,
    ) -> Dict[str, Any]:
        await self._get_litter(litter_id)
        born = to_date_str(birth_date)
        if born is None:
            raise ValidationError({"birth_date": "Fecha de parto inválida"})

        puppies = puppies or []
        males = sum(1 for p in puppies if p.get("sex") == "male")
        alive = sum(1 for p in puppies if p.get("status") != "deceased")

        await self.litters.update(litter_id, {
            "status": "born",
            "actual_birth_date": born,
            "birth_type": birth_type,
            "puppies_born_count": len(puppies),
            "puppies_alive_count": alive,
            "males_count": males,
            "females_count": len(puppies) - males,
        })

        created: List[Dict[str, Any]] = []
        for order, data in enumerate(puppies, start=1):
            sex = data.get("sex") or "male"
            puppy_id = await self.puppies.insert({
                "litter_id": litter_id,
                "identifier": data.get("identifier") or f"{'M' if sex == 'male' else 'F'}-{order}",
                "name": data.get("name"),
                "sex": sex,
                "color": data.get("color"),
                "birth_weight": data.get("birth_weight"),
                "birth_order": order,
                "status": data.get("status") or "available",
                "notes": data.get("notes"),
            })
            created.append(await self.puppies.find_by_id(puppy_id))

            if data.get("birth_weight"):
                await self.events.add("puppy", puppy_id, "weighing", born, {
                    "weight": data["birth_weight"],
                    "weight_unit": "g",
                    "type": "birth_weight",
                })

        event = await self.events.add("litter", litter_id, "birth", born, {
            "birth_type": birth_type,
            "puppies_count": len(puppies),
            "alive_count": alive,
        }, notes)
        logger.info("Parto registrado: camada %s, %d cachorros", litter_id, len(puppies))

        return {
            "litter": await self.litters.find_by_id(litter_id),
            "puppies": created,
            "event": event,
            "message": f"Parto registrado con {len(puppies)} cachorros",
        }

    async def start_heat(
        self, dam_id: str, heat_date: Optional[str] = None, notes: Optional[str] = None
    ) -> Dict[str, Any]:
        dam = await self.dogs.find_by_id(dam_id)
        if not dam:
            raise NotFoundError("Perro no encontrado")
        if dam.get("sex") != "female":
            raise ValidationError({"dam_id": "Solo las hembras pueden entrar en celo"})

        started = to_date_str(heat_date) if heat_date else date.today().isoformat()
        if started is None:
            raise ValidationError({"heat_date": "Fecha de celo inválida"})

        event = await self.events.add("dog", dam["id"], "heat", started, {
            "heat_start_date": started,
            "dog_name": dam["name"],
        }, notes)
        logger.info("Celo registrado: %s desde %s", dam["name"], started)

        return {"event": event, "message": f"Celo registrado para {dam['name']}"}

    async def cancel_litter(self, litter_id: str, reason: Optional[str] = None) -> Dict[str, Any]:
        litter = await self._get_litter(litter_id)
        if litter.get("status") == "cancelled":
            raise ValidationError({"status": "La camada ya está cancelada"})

        await self.litters.update(litter_id, {
            "status": "cancelled",
            "notes": reason or litter.get("notes"),
        })
        event = await self.events.add("litter", litter_id, "note", date.today().isoformat(), {
            "action": "cancelled",
            "reason": reason,
            "previous_status": litter.get("status"),
        }, reason)
        logger.info("Camada %s cancelada (estado previo: %s)", litter_id, litter.get("status"))

        return {
            "litter": await self.litters.find_by_id(litter_id),
            "event": event,
            "message": "Camada cancelada",
        }

    async def litter_timeline(self, litter_id: str) -> List[Dict[str, Any]]:
        await self._get_litter(litter_id)
        return await self.events.by_entity("litter", litter_id)

    async def dog_history(self, dog_id: str) -> Dict[str, Any]:
        """Eventos reproductivos del perro y las camadas en las que es padre o madre."""
        dog = await self.dogs.find_by_id(dog_id)
        if not dog:
            raise NotFoundError("Perro no encontrado")

        events = await self.events.by_entity("dog", dog_id, REPRODUCTION_TYPES)
        role = "dam_id" if dog.get("sex") == "female" else "sire_id"
        litters = await self.litters.find_all(
            {role: dog_id}, limit=1000, sort_by="mating_date", descending=True
        )
        return {"events": events, "litters": litters}

    async def upcoming_births(self, days: int = 30, today: Optional[date] = None) -> List[Dict[str, Any]]:
        start = today or date.today()
        end = start + timedelta(days=days)
        return await self.litters.find_all(
            {
                "status": {"$in": ["pregnant", "confirmed"]},
                "expected_birth_date": {"$gte": start.isoformat(), "$lte": end.isoformat()},
            },
            limit=1000,
            sort_by="expected_birth_date",
        )
