import logging

from .common import ActionError, failure, not_found, plain

log = logging.getLogger(__name__)


def _number(value, cast):
    """None for missing or zero-ish input so COALESCE keeps the stored value."""
    return cast(value) if value else None


def get_services(store):
    try:
        rows = store.query("SELECT * FROM services ORDER BY name")
    except Exception as e:
        log.error(f"get_services: error fetching services: {e}")
        return []
    log.info(f"get_services: retrieved {len(rows)} services")
    return [plain(row) for row in rows]


def get_service_by_id(store, service_id):
    try:
        rows = store.query("SELECT * FROM services WHERE id = :id", {"id": service_id})
    except Exception as e:
        log.error(f"get_service_by_id: error fetching service {service_id}: {e}")
        return None
    return plain(rows[0]) if rows else None


def create_service(store, service: dict):
    try:
        rows = store.query(
            """
            INSERT INTO services (name, duration, price, description)
            VALUES (:name, :duration, :price, :description)
            RETURNING *
            """,
            {
                "name": service.get("name"),
                "duration": int(service.get("duration") or 30),
                "price": float(service.get("price") or 0),
                "description": service.get("description") or "",
            },
        )
    except Exception as e:
        log.error(f"create_service: error creating service: {e}")
        raise ActionError("An error occurred while creating the service.") from e

    if not rows:
        raise ActionError("The service was not stored.")
    created = plain(rows[0])
    log.info(f"create_service: service created with ID {created['id']}")
    return created


def _exists(store, service_id) -> bool:
    return bool(store.query("SELECT id FROM services WHERE id = :id", {"id": service_id}))


def update_service(store, service_id, changes: dict):
    try:
        if not _exists(store, service_id):
            return not_found("Service", service_id)

        rows = store.query(
            """
            UPDATE services SET
              name = COALESCE(:name, name),
              duration = COALESCE(:duration, duration),
              price = COALESCE(:price, price),
              description = COALESCE(:description, description)
            WHERE id = :id
            RETURNING *
            """,
            {
                "name": changes.get("name") or None,
                "duration": _number(changes.get("duration"), int),
                "price": _number(changes.get("price"), float),
                "description": changes.get("description"),
                "id": service_id,
            },
        )
    except Exception as e:
        log.error(f"update_service: error updating service {service_id}: {e}")
        return failure("An error occurred while updating the service.")

    return {"success": True, "service": plain(rows[0])}


def delete_service(store, service_id):
    """Delete a service; appointments booked for it go with it."""
    try:
        if not _exists(store, service_id):
            return not_found("Service", service_id)
        store.query("DELETE FROM services WHERE id = :id", {"id": service_id})
    except Exception as e:
        log.error(f"delete_service: error deleting service {service_id}: {e}")
        return failure("An error occurred while deleting the service.")

    return {"success": True, "message": "Service deleted successfully"}
