# app/migrations/units.py
# Unidades de esquema del canil. Nunca renumerar una versión ya publicada.
from .base import MigrationRegistry, collection_migration, index


def default_registry() -> MigrationRegistry:
    registry = MigrationRegistry()

    registry.register("001", "create_dogs", *collection_migration("dogs", [
        index("tenant_id"),
        index("tenant_id", "status"),
        index("tenant_id", "sex"),
        index("tenant_id", "breed"),
        index("sire_id"),
        index("dam_id"),
        index("chip_number"),
        index("registration_number"),
    ]))

    registry.register("002", "create_people", *collection_migration("people", [
        index("tenant_id"),
        index("tenant_id", "type"),
        index("email"),
        index("phone"),
    ]))

    registry.register("003", "create_litters", *collection_migration("litters", [
        index("tenant_id"),
        index("tenant_id", "status"),
        index("dam_id"),
        index("sire_id"),
        index("actual_birth_date"),
    ]))

    registry.register("004", "create_puppies", *collection_migration("puppies", [
        index("tenant_id"),
        index("tenant_id", "status"),
        index("litter_id"),
        index("buyer_id"),
        index("chip_number"),
    ]))

    registry.register("005", "create_events", *collection_migration("events", [
        index("tenant_id"),
        index("entity_type", "entity_id"),
        index("tenant_id", "entity_type", "entity_id"),
        index("event_type"),
        index("event_date"),
        index("reminder_date", "reminder_completed"),
    ]))

    registry.register("006", "create_audit_log", *collection_migration("audit_log", [
        index("tenant_id"),
        index("entity_type", "entity_id"),
        index("user_id"),
        index("created_at"),
    ]))

    registry.register("007", "create_settings", *collection_migration("tenant_settings", [
        index("tenant_id", "setting_key", unique=True),
        index("tenant_id"),
    ]))

    registry.register("008", "create_interests", *collection_migration("interests", [
        index("puppy_id"),
        index("email"),
        index("created_at"),
    ]))

    return registry
