import logging

from .common import (
    ActionError,
    clock_time,
    failure,
    first_or_none,
    iso_date,
    money,
    not_found,
    plain,
    today_iso,
)

log = logging.getLogger(__name__)

STATUS_PENDING = "pending"
STATUS_CONFIRMED = "confirmed"
PAYMENT_METHODS = ("card", "cash")

UNKNOWN_CUSTOMER = "Unknown Customer"
UNKNOWN_SERVICE = "Unknown Service"

UPDATABLE_FIELDS = (
    "customer_id",
    "service_id",
    "date",
    "time",
    "duration",
    "status",
    "notes",
    "payment_status",
    "payment_method",
)

SELECT_WITH_NAMES = """
    SELECT
      a.*,
      c.name AS customer_name,
      s.name AS service_name
    FROM appointments a
    {join} JOIN customers c ON a.customer_id = c.id
    {join} JOIN services s ON a.service_id = s.id
"""


def _appointment(row):
    record = plain(row)
    record["date"] = iso_date(record.get("date"))
    record["time"] = clock_time(record.get("time"))
    if "customer_name" in record:
        record["customer_name"] = record["customer_name"] or UNKNOWN_CUSTOMER
    if "service_name" in record:
        record["service_name"] = record["service_name"] or UNKNOWN_SERVICE
    return record


def get_appointments(store):
    try:
        rows = store.query(
            SELECT_WITH_NAMES.format(join="INNER") + " ORDER BY a.date DESC, a.time ASC"
        )
    except Exception as e:
        log.error(f"get_appointments: error fetching appointments: {e}")
        return []
    log.info(f"get_appointments: retrieved {len(rows)} appointments")
    return [_appointment(row) for row in rows]


def get_appointments_by_date(store, day):
    try:
        rows = store.query(
            SELECT_WITH_NAMES.format(join="INNER") + " WHERE a.date = :date ORDER BY a.time ASC",
            {"date": iso_date(day)},
        )
    except Exception as e:
        log.error(f"get_appointments_by_date: error fetching appointments for {day}: {e}")
        return []
    return [_appointment(row) for row in rows]


def get_appointment_by_id(store, appointment_id):
    try:
        rows = store.query(
            SELECT_WITH_NAMES.format(join="LEFT") + " WHERE a.id = :id",
            {"id": appointment_id},
        )
    except Exception as e:
        log.error(f"get_appointment_by_id: error fetching appointment {appointment_id}: {e}")
        return None
    return _appointment(rows[0]) if rows else None


def _resolve(store, table, row_id):
    """
    The row for ``row_id`` or, when it does not exist, the first row of the
    table. Returns (row, found) where ``found`` says whether the id matched.
    """
    row = first_or_none(store.query(f"SELECT id, name FROM {table} WHERE id = :id", {"id": row_id}))
    if row is not None:
        return row, True
    return first_or_none(store.query(f"SELECT id, name FROM {table} ORDER BY id LIMIT 1")), False


def create_appointment(store, appointment: dict):
    """
    Book an appointment.

    Unknown customer or service ids are replaced by the first existing
    customer/service. The customer's visit count and last visit are only
    updated when the requested customer exists.
    """
    try:
        customer, customer_found = _resolve(store, "customers", appointment.get("customer_id"))
        service, service_found = _resolve(store, "services", appointment.get("service_id"))

        customer_id = customer["id"] if customer else appointment.get("customer_id")
        service_id = service["id"] if service else appointment.get("service_id")
        if not customer_found:
            log.warning(
                f"create_appointment: customer {appointment.get('customer_id')} "
                f"not found, using {customer_id}"
            )
        if not service_found:
            log.warning(
                f"create_appointment: service {appointment.get('service_id')} "
                f"not found, using {service_id}"
            )

        rows = store.query(
            """
            INSERT INTO appointments (
              customer_id, service_id, date, time, duration, status, notes, payment_status
            ) VALUES (
              :customer_id, :service_id, :date, :time, :duration, :status, :notes, 'unpaid'
            )
            RETURNING *
            """,
            {
                "customer_id": customer_id,
                "service_id": service_id,
                "date": iso_date(appointment.get("date")),
                "time": appointment.get("time"),
                "duration": int(appointment.get("duration") or 30),
                "status": appointment.get("status") or STATUS_CONFIRMED,
                "notes": appointment.get("notes") or "",
            },
        )

        if customer_found:
            store.query(
                """
                UPDATE customers
                SET last_visit = :date, visits = visits + 1
                WHERE id = :id
                """,
                {"date": iso_date(appointment.get("date")), "id": customer_id},
            )
    except Exception as e:
        log.error(f"create_appointment: error creating appointment: {e}")
        raise ActionError("An error occurred while creating the appointment.") from e

    if not rows:
        raise ActionError("The appointment was not stored.")
    created = _appointment(rows[0])
    created["customer_name"] = customer["name"] if customer else UNKNOWN_CUSTOMER
    created["service_name"] = service["name"] if service else UNKNOWN_SERVICE
    return created


def _exists(store, appointment_id) -> bool:
    return bool(
        store.query("SELECT id FROM appointments WHERE id = :id", {"id": appointment_id})
    )


def update_appointment(store, appointment_id, changes: dict):
    """Update only the fields present in ``changes``."""
    try:
        if not _exists(store, appointment_id):
            return not_found("Appointment", appointment_id)

        fields = [field for field in UPDATABLE_FIELDS if field in changes]
        if fields:
            params = {field: changes[field] for field in fields}
            if "date" in params:
                params["date"] = iso_date(params["date"])
            params["id"] = appointment_id
            assignments = ", ".join(f"{field} = :{field}" for field in fields)
            store.query(f"UPDATE appointments SET {assignments} WHERE id = :id", params)

        updated = get_appointment_by_id(store, appointment_id)
    except Exception as e:
        log.error(f"update_appointment: error updating appointment {appointment_id}: {e}")
        return failure("An error occurred while updating the appointment.")

    if updated is None:
        return failure("An error occurred while updating the appointment.")
    return {"success": True, "appointment": updated}


def delete_appointment(store, appointment_id):
    try:
        if not _exists(store, appointment_id):
            return not_found("Appointment", appointment_id)
        store.query("DELETE FROM appointments WHERE id = :id", {"id": appointment_id})
    except Exception as e:
        log.error(f"delete_appointment: error deleting appointment {appointment_id}: {e}")
        return failure("An error occurred while deleting the appointment.")

    return {"success": True, "message": "Appointment deleted successfully"}


def process_appointment_payment(store, appointment_id, payment_method, today=None):
    """
    Mark an appointment paid and record the matching service sale.

    The status update and the sale inserts run as separate statements, so
    a failure in between leaves a paid appointment without a sale.
    """
    if payment_method not in PAYMENT_METHODS:
        return failure(f"Unsupported payment method: {payment_method}")

    try:
        rows = store.query(
            """
            SELECT
              a.*,
              c.name AS customer_name,
              s.name AS service_name,
              s.price AS service_price
            FROM appointments a
            LEFT JOIN customers c ON a.customer_id = c.id
            LEFT JOIN services s ON a.service_id = s.id
            WHERE a.id = :id
            """,
            {"id": appointment_id},
        )
        if not rows:
            return failure(f"Appointment with ID {appointment_id} not found.")

        appointment = rows[0]
        if appointment.get("payment_status") == "paid":
            return failure(f"Appointment with ID {appointment_id} is already paid.")

        sale_date = today_iso(today)
        total = money(appointment.get("service_price"))
        service_name = appointment.get("service_name") or UNKNOWN_SERVICE

        store.query(
            """
            UPDATE appointments
            SET payment_status = 'paid', payment_method = :method
            WHERE id = :id
            """,
            {"method": payment_method, "id": appointment_id},
        )

        sale_rows = store.query(
            """
            INSERT INTO sales (customer_id, appointment_id, date, total, payment_method, type)
            VALUES (:customer_id, :appointment_id, :date, :total, :method, 'service')
            RETURNING id
            """,
            {
                "customer_id": appointment.get("customer_id"),
                "appointment_id": appointment_id,
                "date": sale_date,
                "total": total,
                "method": payment_method,
            },
        )
        sale_id = sale_rows[0]["id"]

        store.query(
            """
            INSERT INTO sale_items (sale_id, item_id, item_type, name, price, quantity)
            VALUES (:sale_id, :item_id, 'service', :name, :price, 1)
            """,
            {
                "sale_id": sale_id,
                "item_id": appointment.get("service_id"),
                "name": service_name,
                "price": total,
            },
        )
    except Exception as e:
        log.error(
            f"process_appointment_payment: error processing payment for {appointment_id}: {e}"
        )
        return failure("An error occurred while processing the payment.")

    return {
        "success": True,
        "message": "Payment processed successfully",
        "sale": {
            "id": sale_id,
            "customer_id": appointment.get("customer_id"),
            "appointment_id": appointment_id,
            "date": sale_date,
            "total": total,
            "payment_method": payment_method,
            "type": "service",
            "customer_name": appointment.get("customer_name") or UNKNOWN_CUSTOMER,
        },
    }
