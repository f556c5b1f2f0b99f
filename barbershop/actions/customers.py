import logging

from .common import ActionError, failure, iso_date, not_found, plain

log = logging.getLogger(__name__)


def _customer(row):
    record = plain(row)
    record["last_visit"] = iso_date(record.get("last_visit"))
    return record


def get_customers(store):
    try:
        rows = store.query("SELECT * FROM customers ORDER BY name")
    except Exception as e:
        log.error(f"get_customers: error fetching customers: {e}")
        return []
    log.info(f"get_customers: retrieved {len(rows)} customers")
    return [_customer(row) for row in rows]


def get_customer_by_id(store, customer_id):
    try:
        rows = store.query("SELECT * FROM customers WHERE id = :id", {"id": customer_id})
    except Exception as e:
        log.error(f"get_customer_by_id: error fetching customer {customer_id}: {e}")
        return None
    return _customer(rows[0]) if rows else None


def create_customer(store, customer: dict):
    """Insert a customer with no visits yet and return the stored row."""
    try:
        rows = store.query(
            """
            INSERT INTO customers (name, phone, email, visits, last_visit)
            VALUES (:name, :phone, :email, 0, NULL)
            RETURNING *
            """,
            {
                "name": customer.get("name"),
                "phone": customer.get("phone") or "",
                "email": customer.get("email") or "",
            },
        )
    except Exception as e:
        log.error(f"create_customer: error creating customer: {e}")
        raise ActionError("An error occurred while creating the customer.") from e

    if not rows:
        raise ActionError("The customer was not stored.")
    created = _customer(rows[0])
    log.info(f"create_customer: customer created with ID {created['id']}")
    return created


def _exists(store, customer_id) -> bool:
    return bool(store.query("SELECT id FROM customers WHERE id = :id", {"id": customer_id}))


def update_customer(store, customer_id, changes: dict):
    """Update name, phone and email. Fields missing from ``changes`` keep their value."""
    try:
        if not _exists(store, customer_id):
            return not_found("Customer", customer_id)

        rows = store.query(
            """
            UPDATE customers SET
              name = COALESCE(:name, name),
              phone = COALESCE(:phone, phone),
              email = COALESCE(:email, email)
            WHERE id = :id
            RETURNING *
            """,
            {
                "name": changes.get("name") or None,
                "phone": changes.get("phone"),
                "email": changes.get("email"),
                "id": customer_id,
            },
        )
    except Exception as e:
        log.error(f"update_customer: error updating customer {customer_id}: {e}")
        return failure("An error occurred while updating the customer.")

    return {"success": True, "customer": _customer(rows[0])}


def delete_customer(store, customer_id):
    """Delete a customer; their appointments go with them."""
    try:
        if not _exists(store, customer_id):
            return not_found("Customer", customer_id)
        store.query("DELETE FROM customers WHERE id = :id", {"id": customer_id})
    except Exception as e:
        log.error(f"delete_customer: error deleting customer {customer_id}: {e}")
        return failure("An error occurred while deleting the customer.")

    return {"success": True, "message": "Customer deleted successfully"}
