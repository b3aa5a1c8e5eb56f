# tests/test_utils.py

from datetime import date, datetime

import pytest

from Dojodesk.core import clock
from Dojodesk.core.errors import ValidationError
from Dojodesk.core.utils import hash_password, parse_date, validate_day_of_week, validate_time


def test_parse_date_accepts_iso_and_dates():
    assert parse_date("2025-01-01") == date(2025, 1, 1)
    assert parse_date(datetime(2025, 1, 1, 12, 30)) == date(2025, 1, 1)
    with pytest.raises(ValidationError):
        parse_date("2025-02-30")


def test_validate_time():
    assert validate_time(" 09:05 ") == "09:05"
    for bad in ("9:05", "24:00", "12:60", None):
        with pytest.raises(ValidationError):
            validate_time(bad)


def test_validate_day_of_week():
    assert validate_day_of_week("6") == 6
    with pytest.raises(ValidationError):
        validate_day_of_week(-1)


def test_hash_password_is_stable_sha256():
    assert hash_password("abc") == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"


def test_clock_provider_can_be_swapped():
    clock.set_today_provider(lambda: date(2030, 1, 1))
    try:
        assert clock.resolve() == date(2030, 1, 1)
        assert clock.resolve("2025-05-05") == date(2025, 5, 5)
    finally:
        clock.set_today_provider(None)
    assert clock.today() == date.today()
