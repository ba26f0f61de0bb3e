# inventory_manager/utils/date_utils.py
from datetime import date, datetime, timedelta
from typing import List, Optional, Union

DateLike = Union[date, datetime, str]

def convert_to_date(value: DateLike) -> date:
    """Convert a date, datetime or ISO string to a date.

    Args:
        value: Date value; strings may be 'YYYY-MM-DD' or a full ISO timestamp

    Returns:
        Date object

    Raises:
        ValueError if the value cannot be converted
    """
    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            raise ValueError(f"Invalid date: {value}")

    raise ValueError(f"Cannot convert {type(value).__name__} to date")

def to_iso_date(value: DateLike) -> str:
    """Format a date-like value as 'YYYY-MM-DD'."""
    return convert_to_date(value).isoformat()

def days_ago(days: int, today: Optional[date] = None) -> date:
    """Get the date a number of days before today."""
    today = today or date.today()
    return today - timedelta(days=days)

def last_n_days(days: int, today: Optional[date] = None) -> List[str]:
    """Get ISO dates for the last `days` days, oldest first, ending today.

    Args:
        days: Number of days in the window
        today: Optional reference date

    Returns:
        List of 'YYYY-MM-DD' strings
    """
    today = today or date.today()
    return [(today - timedelta(days=offset)).isoformat() for offset in range(days - 1, -1, -1)]
