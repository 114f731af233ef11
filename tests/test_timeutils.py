from datetime import date, datetime, timedelta, timezone

import pytest

from hah_erp.core.timeutils import month_bounds, parse_time_12h, relative_time


@pytest.mark.parametrize(
    "value,expected",
    [
        ("8:00 AM", "08:00"),
        ("12:15 am", "00:15"),
        ("12:30 PM", "12:30"),
        ("07:45 pm", "19:45"),
        ("14:05", "14:05"),
        ("09:10:00", "09:10"),
    ],
)
def test_parse_time_12h(value, expected):
    assert parse_time_12h(value) == expected


@pytest.mark.parametrize("value", ["13:00 PM", "25:00", "8 AM", "abc"])
def test_parse_time_12h_invalid(value):
    with pytest.raises(ValueError):
        parse_time_12h(value)


def test_month_bounds_december():
    assert month_bounds(date(2025, 12, 17)) == (date(2025, 12, 1), date(2026, 1, 1))


def test_relative_time():
    now = datetime(2025, 6, 10, 12, 0, tzinfo=timezone.utc)

    assert relative_time(now - timedelta(days=1), now) == "Hace 1 día"
    assert relative_time(now - timedelta(days=3), now) == "Hace 3 días"
    assert relative_time(now - timedelta(hours=2), now) == "Hace 2 horas"
    assert relative_time(now - timedelta(minutes=5), now) == "Hace unos minutos"
    assert relative_time(now + timedelta(hours=1), now) == "Hace unos minutos"
