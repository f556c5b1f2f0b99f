import datetime
from decimal import Decimal


class ActionError(Exception):
    """Raised when a create action cannot write its row."""


def failure(message: str) -> dict:
    return {"success": False, "message": message}


def not_found(entity: str, entity_id) -> dict:
    return failure(
        f"{entity} with ID {entity_id} not found. "
        f"The {entity.lower()} may have been deleted already."
    )


def iso_date(value):
    """Dates as YYYY-MM-DD whether the driver returns date objects or strings."""
    if value is None:
        return None
    if isinstance(value, datetime.datetime):
        return value.date().isoformat()
    if isinstance(value, datetime.date):
        return value.isoformat()
    return str(value)[:10]


def clock_time(value):
    if isinstance(value, datetime.time):
        return value.strftime("%H:%M")
    return value


def money(value) -> float:
    if value is None:
        return 0.0
    return float(value)


def today_iso(today=None) -> str:
    return (today or datetime.date.today()).isoformat()


def plain(row: dict) -> dict:
    """Make a row JSON friendly: Decimals to floats, timestamps to ISO strings."""
    record = {}
    for key, value in row.items():
        if isinstance(value, Decimal):
            value = float(value)
        elif isinstance(value, datetime.datetime):
            value = value.isoformat()
        record[key] = value
    return record


def first_or_none(rows):
    return rows[0] if rows else None


def scalar_count(rows, key="count") -> int:
    if not rows or rows[0].get(key) is None:
        return 0
    return int(rows[0][key])
