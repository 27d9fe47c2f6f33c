import re
from datetime import date

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def is_valid_date(date_str: str) -> bool:
    if not isinstance(date_str, str) or not DATE_RE.match(date_str):
        return False
    try:
        date.fromisoformat(date_str)
    except ValueError:
        return False
    return True


def is_valid_time(time_str: str) -> bool:
    return isinstance(time_str, str) and bool(TIME_RE.match(time_str))


def is_blank(text) -> bool:
    return not text or not str(text).strip()


def is_rating(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= 5
