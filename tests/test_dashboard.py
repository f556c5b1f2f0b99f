import datetime

import pytest

from barbershop.actions.appointments import create_appointment, process_appointment_payment
from barbershop.actions.dashboard import empty_dashboard_stats, get_dashboard_stats
from barbershop.actions.reports import (
    daily_revenue,
    empty_report,
    get_report_data,
    hourly_distribution,
)
from barbershop.actions.sales import create_product_sale


def book_today(store, today, status, time="10:00"):
    return create_appointment(
        store,
        {
            "customer_id": 1,
            "service_id": 2,
            "date": today.isoformat(),
            "time": time,
            "duration": 20,
            "status": status,
        },
    )


@pytest.mark.dashboard
class TestDashboardStats:
    """Test suite for the dashboard statistics."""

    def test_counts_today_by_status(self, seeded_store, today):
        for status in ("confirmed", "confirmed", "confirmed", "pending", "pending"):
            book_today(seeded_store, today, status)

        stats = get_dashboard_stats(seeded_store, today=today)

        assert stats["todayAppointments"] == {"count": 5, "pending": 2, "confirmed": 3}
        assert stats["totalAppointments"] == 9
        assert stats["totalCustomers"] == 4

    def test_new_customers_visited_this_week(self, seeded_store, today):
        book_today(seeded_store, today, "confirmed")

        stats = get_dashboard_stats(seeded_store, today=today)

        # Zeynep (2025-03-25) and Ahmet, who just booked
        assert stats["newCustomers"] == 2

    def test_weekly_revenue_from_sales(self, seeded_store, today):
        process_appointment_payment(seeded_store, 1, "card", today=today)
        create_product_sale(
            seeded_store, 2, [{"product_id": 2, "quantity": 1}], "cash", today=today
        )
        process_appointment_payment(
            seeded_store, 2, "cash", today=today - datetime.timedelta(days=10)
        )

        stats = get_dashboard_stats(seeded_store, today=today)

        assert stats["weeklyRevenue"] == 185.0

    def test_empty_database(self, store, today):
        stats = get_dashboard_stats(store, today=today)

        assert stats == empty_dashboard_stats()

    def test_query_failure_returns_zeros(self, empty_store):
        assert get_dashboard_stats(empty_store) == empty_dashboard_stats()


@pytest.mark.dashboard
class TestReports:
    """Test suite for the report aggregates."""

    def test_hourly_distribution(self):
        hours = hourly_distribution(["09:15", "09:45", "14:00", datetime.time(20, 30), "07:00"])

        assert list(hours) == list(range(8, 21))
        assert hours[9] == 2
        assert hours[14] == 1
        assert hours[20] == 1
        assert hours[8] == 0

    def test_daily_revenue_fills_missing_days(self, today):
        rows = [{"date": "2025-03-30", "revenue": 40}, {"date": datetime.date(2025, 4, 1), "revenue": 60.5}]

        revenue = daily_revenue(rows, today, days=7)

        assert list(revenue) == [
            "2025-03-26",
            "2025-03-27",
            "2025-03-28",
            "2025-03-29",
            "2025-03-30",
            "2025-03-31",
            "2025-04-01",
        ]
        assert revenue["2025-03-30"] == 40.0
        assert revenue["2025-04-01"] == 60.5
        assert revenue["2025-03-31"] == 0.0

    def test_report_data(self, seeded_store, today):
        process_appointment_payment(seeded_store, 1, "card", today=today)
        create_product_sale(
            seeded_store, 2, [{"product_id": 1, "quantity": 2}], "cash", today=today
        )

        report = get_report_data(seeded_store, today=today)

        assert report["paymentMethods"] == {"card": 1, "cash": 1}
        assert report["monthlyRevenue"] == 340.0
        assert report["dailyRevenue"]["2025-04-01"] == 340.0
        assert len(report["dailyRevenue"]) == 30
        assert report["topProducts"] == [
            {"id": 1, "name": "Styling Wax", "count": 2, "revenue": 240.0}
        ]
        assert len(report["topServices"]) == 5
        assert report["hourlyAppointments"][10] == 1
        assert report["stats"]["appointmentCount"] == 4
        assert report["stats"]["totalCustomersCount"] == 4
        assert report["stats"]["avgServicePrice"] == 124.0

    def test_report_on_missing_tables(self, empty_store):
        assert get_report_data(empty_store) == empty_report()
