import datetime
import logging

import pandas as pd

from .common import iso_date, money, scalar_count

log = logging.getLogger(__name__)

REPORT_DAYS = 30
REPORT_HOURS = range(8, 21)
TOP_LIMIT = 5


def empty_report():
    return {
        "topServices": [],
        "topProducts": [],
        "paymentMethods": {"card": 0, "cash": 0},
        "dailyRevenue": {},
        "monthlyRevenue": 0.0,
        "hourlyAppointments": {},
        "stats": {
            "appointmentCount": 0,
            "newCustomersCount": 0,
            "totalCustomersCount": 0,
            "avgServicePrice": 0.0,
        },
    }


def _hour_of(value):
    if isinstance(value, datetime.time):
        return value.hour
    try:
        return int(str(value).split(":")[0])
    except ValueError:
        return None


def hourly_distribution(times):
    """Appointments per opening hour (8 to 20), zero-filled."""
    hours = pd.Series(
        [hour for hour in map(_hour_of, times) if hour is not None], dtype="int64"
    )
    counts = hours.value_counts().reindex(REPORT_HOURS, fill_value=0)
    return {int(hour): int(count) for hour, count in counts.items()}


def daily_revenue(rows, today, days=REPORT_DAYS):
    """Revenue per day for the ``days`` days ending ``today``, zero-filled."""
    window = pd.date_range(end=pd.Timestamp(today), periods=days, freq="D").strftime("%Y-%m-%d")
    revenue = pd.Series(
        {iso_date(row["date"]): money(row["revenue"]) for row in rows}, dtype="float64"
    )
    revenue = revenue.reindex(window, fill_value=0.0)
    return {day: round(float(amount), 2) for day, amount in revenue.items()}


def get_report_data(store, today=None):
    today = today or datetime.date.today()
    since = (today - datetime.timedelta(days=REPORT_DAYS - 1)).isoformat()

    try:
        appointment_count = scalar_count(store.query("SELECT COUNT(*) AS count FROM appointments"))
        total_customers = scalar_count(store.query("SELECT COUNT(*) AS count FROM customers"))
        new_customers = scalar_count(
            store.query(
                "SELECT COUNT(*) AS count FROM customers WHERE created_at >= :since",
                {"since": since},
            )
        )

        times = [row["time"] for row in store.query("SELECT time FROM appointments")]

        avg_rows = store.query("SELECT AVG(price) AS avg_price FROM services")
        avg_service_price = round(money(avg_rows[0]["avg_price"]) if avg_rows else 0.0, 2)

        top_services = [
            {
                "id": row["id"],
                "name": row["name"],
                "count": int(row["appointment_count"]),
                "revenue": round(int(row["appointment_count"]) * money(row["price"]), 2),
            }
            for row in store.query(
                """
                SELECT s.id, s.name, s.price, COUNT(a.id) AS appointment_count
                FROM services s
                LEFT JOIN appointments a ON s.id = a.service_id
                GROUP BY s.id, s.name, s.price
                ORDER BY appointment_count DESC, s.id ASC
                LIMIT :limit
                """,
                {"limit": TOP_LIMIT},
            )
        ]

        top_products = [
            {
                "id": row["id"],
                "name": row["name"],
                "count": int(row["units"] or 0),
                "revenue": round(money(row["revenue"]), 2),
            }
            for row in store.query(
                """
                SELECT item_id AS id, name, SUM(quantity) AS units, SUM(price * quantity) AS revenue
                FROM sale_items
                WHERE item_type = 'product'
                GROUP BY item_id, name
                ORDER BY units DESC, revenue DESC
                LIMIT :limit
                """,
                {"limit": TOP_LIMIT},
            )
        ]

        payment_methods = {"card": 0, "cash": 0}
        for row in store.query(
            "SELECT payment_method, COUNT(*) AS count FROM sales GROUP BY payment_method"
        ):
            payment_methods[row["payment_method"]] = int(row["count"])

        revenue_rows = store.query(
            """
            SELECT date, SUM(total) AS revenue
            FROM sales
            WHERE date >= :since
            GROUP BY date
            """,
            {"since": since},
        )
    except Exception as e:
        log.error(f"get_report_data: error fetching report data: {e}")
        return empty_report()

    revenue_by_day = daily_revenue(revenue_rows, today)
    return {
        "topServices": top_services,
        "topProducts": top_products,
        "paymentMethods": payment_methods,
        "dailyRevenue": revenue_by_day,
        "monthlyRevenue": round(sum(revenue_by_day.values()), 2),
        "hourlyAppointments": hourly_distribution(times),
        "stats": {
            "appointmentCount": appointment_count,
            "newCustomersCount": new_customers,
            "totalCustomersCount": total_customers,
            "avgServicePrice": avg_service_price,
        },
    }
