from datetime import date
from typing import Callable, Optional

_today_provider: Callable[[], date] = date.today


def today() -> date:
    return _today_provider()


def set_today_provider(provider: Optional[Callable[[], date]]):
    """Swap the source of "today" (tests, back-dated data entry). None restores the system clock."""
    global _today_provider
    _today_provider = provider or date.today


def resolve(value=None) -> date:
    """Return `value` as a date, falling back to the current provider."""
    from Dojodesk.core.utils import parse_date
    if value is None:
        return today()
    return parse_date(value)
