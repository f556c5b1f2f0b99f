import pytest

from barbershop.actions.appointments import (
    create_appointment,
    delete_appointment,
    get_appointment_by_id,
    get_appointments,
    get_appointments_by_date,
    process_appointment_payment,
    update_appointment,
)
from barbershop.actions.common import ActionError
from barbershop.actions.customers import get_customer_by_id
from barbershop.actions.sales import get_sale_by_id


def book(store, **overrides):
    appointment = {
        "customer_id": 2,
        "service_id": 1,
        "date": "2025-04-01",
        "time": "09:30",
        "duration": 30,
        "status": "confirmed",
        "notes": "",
    }
    appointment.update(overrides)
    return create_appointment(store, appointment)


@pytest.mark.appointments
class TestAppointments:
    """Test suite for appointment actions."""

    def test_get_appointments_with_names(self, seeded_store):
        appointments = get_appointments(seeded_store)

        assert len(appointments) == 4
        assert all(a["customer_name"] and a["service_name"] for a in appointments)
        # newest date first, earliest time first within a day
        assert [a["date"] for a in appointments] == [
            "2025-03-30",
            "2025-03-29",
            "2025-03-28",
            "2025-03-28",
        ]
        assert [a["time"] for a in appointments[2:]] == ["10:00", "11:30"]

    def test_get_appointments_by_date(self, seeded_store):
        appointments = get_appointments_by_date(seeded_store, "2025-03-28")

        assert len(appointments) == 2
        assert get_appointments_by_date(seeded_store, "2024-01-01") == []

    def test_create_records_visit(self, seeded_store):
        before = get_customer_by_id(seeded_store, 2)

        created = book(seeded_store)

        after = get_customer_by_id(seeded_store, 2)
        assert created["customer_id"] == 2
        assert created["customer_name"] == "Ayşe Demir"
        assert created["service_name"] == "Haircut"
        assert created["payment_status"] == "unpaid"
        assert after["visits"] == before["visits"] + 1
        assert after["last_visit"] == "2025-04-01"

    def test_unknown_customer_falls_back_without_visit(self, seeded_store):
        first = get_customer_by_id(seeded_store, 1)

        created = book(seeded_store, customer_id=999)

        assert created["customer_id"] == 1
        assert created["customer_name"] == first["name"]
        assert get_customer_by_id(seeded_store, 1)["visits"] == first["visits"]

    def test_unknown_service_falls_back(self, seeded_store):
        created = book(seeded_store, service_id=999)

        assert created["service_id"] == 1
        assert created["service_name"] == "Haircut"

    def test_create_defaults(self, seeded_store):
        created = create_appointment(
            seeded_store,
            {"customer_id": 1, "service_id": 2, "date": "2025-04-02", "time": "12:00"},
        )

        assert created["status"] == "confirmed"
        assert created["duration"] == 30
        assert created["notes"] == ""

    def test_create_failure_raises(self, empty_store):
        with pytest.raises(ActionError):
            book(empty_store)

    def test_update_only_given_fields(self, seeded_store):
        result = update_appointment(seeded_store, 4, {"status": "confirmed", "notes": "Bring photo"})

        assert result["success"] is True
        appointment = result["appointment"]
        assert appointment["status"] == "confirmed"
        assert appointment["notes"] == "Bring photo"
        assert appointment["date"] == "2025-03-30"
        assert appointment["time"] == "15:30"

    def test_update_ignores_unknown_fields(self, seeded_store):
        result = update_appointment(seeded_store, 1, {"id": 77, "customer_name": "Nobody"})

        assert result["success"] is True
        assert result["appointment"]["id"] == 1

    def test_update_missing_appointment(self, seeded_store):
        result = update_appointment(seeded_store, 999, {"status": "confirmed"})

        assert result == {
            "success": False,
            "message": "Appointment with ID 999 not found. The appointment may have been deleted already.",
        }

    def test_delete(self, seeded_store):
        assert delete_appointment(seeded_store, 1)["success"] is True
        assert get_appointment_by_id(seeded_store, 1) is None
        assert delete_appointment(seeded_store, 1)["success"] is False

    def test_mock_store_has_no_appointments(self, memory_store):
        assert get_appointments(memory_store) == []
        assert get_appointment_by_id(memory_store, 1) is None


@pytest.mark.appointments
class TestAppointmentPayment:
    """Test suite for taking payment for an appointment."""

    def test_payment_records_service_sale(self, seeded_store, today):
        result = process_appointment_payment(seeded_store, 1, "card", today=today)

        assert result["success"] is True
        sale = result["sale"]
        assert sale["total"] == 100.0
        assert sale["type"] == "service"
        assert sale["date"] == "2025-04-01"
        assert sale["appointment_id"] == 1

        appointment = get_appointment_by_id(seeded_store, 1)
        assert appointment["payment_status"] == "paid"
        assert appointment["payment_method"] == "card"

        stored = get_sale_by_id(seeded_store, sale["id"])
        assert stored["total"] == 100.0
        assert len(stored["items"]) == 1
        assert stored["items"][0]["item_type"] == "service"
        assert stored["items"][0]["name"] == "Haircut"

    def test_already_paid(self, seeded_store, today):
        process_appointment_payment(seeded_store, 1, "cash", today=today)

        result = process_appointment_payment(seeded_store, 1, "cash", today=today)

        assert result["success"] is False
        assert len(seeded_store.query("SELECT id FROM sales")) == 1

    def test_unsupported_method(self, seeded_store):
        result = process_appointment_payment(seeded_store, 1, "bitcoin")

        assert result["success"] is False
        assert seeded_store.query("SELECT id FROM sales") == []

    def test_missing_appointment(self, seeded_store):
        result = process_appointment_payment(seeded_store, 999, "card")

        assert result == {"success": False, "message": "Appointment with ID 999 not found."}
