import datetime
import logging

from .appointments import STATUS_CONFIRMED, STATUS_PENDING
from .common import money, scalar_count, today_iso

log = logging.getLogger(__name__)


def empty_dashboard_stats():
    return {
        "todayAppointments": {"count": 0, "pending": 0, "confirmed": 0},
        "totalAppointments": 0,
        "totalCustomers": 0,
        "newCustomers": 0,
        "weeklyRevenue": 0.0,
    }


def get_dashboard_stats(store, today=None):
    """Counts for the dashboard. Falls back to zeros if any query fails."""
    today = today or datetime.date.today()
    week_ago = (today - datetime.timedelta(days=7)).isoformat()

    try:
        by_status = store.query(
            """
            SELECT status, COUNT(*) AS count
            FROM appointments
            WHERE date = :today
            GROUP BY status
            """,
            {"today": today_iso(today)},
        )
        counts = {row["status"]: int(row["count"]) for row in by_status}

        total_appointments = scalar_count(store.query("SELECT COUNT(*) AS count FROM appointments"))
        total_customers = scalar_count(store.query("SELECT COUNT(*) AS count FROM customers"))
        new_customers = scalar_count(
            store.query(
                "SELECT COUNT(*) AS count FROM customers WHERE last_visit >= :since",
                {"since": week_ago},
            )
        )
        revenue_rows = store.query(
            "SELECT COALESCE(SUM(total), 0) AS revenue FROM sales WHERE date >= :since",
            {"since": week_ago},
        )
    except Exception as e:
        log.error(f"get_dashboard_stats: error fetching statistics: {e}")
        return empty_dashboard_stats()

    return {
        "todayAppointments": {
            "count": sum(counts.values()),
            "pending": counts.get(STATUS_PENDING, 0),
            "confirmed": counts.get(STATUS_CONFIRMED, 0),
        },
        "totalAppointments": total_appointments,
        "totalCustomers": total_customers,
        "newCustomers": new_customers,
        "weeklyRevenue": round(money(revenue_rows[0]["revenue"]) if revenue_rows else 0.0, 2),
    }
