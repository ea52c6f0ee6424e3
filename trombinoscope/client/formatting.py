"""
Formatage des dates à la française
"""
from datetime import date, datetime
from typing import Optional, Union

from trombinoscope.utils.dates import MOIS, MOIS_COURTS

DateLike = Union[str, date, datetime, None]

EMPTY = "-"


def _parse(value: DateLike):
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    return value


def format_date(value: DateLike) -> str:
    """19 octobre 2026"""
    parsed = _parse(value)
    if not parsed:
        return EMPTY
    return f"{parsed.day} {MOIS[parsed.month - 1].lower()} {parsed.year}"


def format_datetime(value: DateLike) -> str:
    """19 oct. 2026 à 14:30"""
    parsed = _parse(value)
    if not parsed:
        return EMPTY
    text = f"{parsed.day} {MOIS_COURTS[parsed.month - 1]} {parsed.year}"
    if isinstance(parsed, datetime):
        text += f" à {parsed.hour:02d}:{parsed.minute:02d}"
    return text


def calculate_age(birth_date: DateLike, today: date = None) -> Optional[int]:
    parsed = _parse(birth_date)
    if not parsed:
        return None
    if isinstance(parsed, datetime):
        parsed = parsed.date()
    today = today or date.today()
    age = today.year - parsed.year
    if (today.month, today.day) < (parsed.month, parsed.day):
        age -= 1
    return age
