"""
Tests del parser de listas de fechas de las planillas de cuidados en casa.
"""

from datetime import date

import pytest

from hah_erp.services.date_lists import (
    coerce_date_list,
    format_date_list,
    parse_date_list,
    parse_pause_hours,
    parse_single_date,
)


@pytest.mark.parametrize("raw", [None, "", "  ", "0"])
def test_empty_values(raw):
    assert parse_date_list(raw) == []


def test_iso_and_slash_formats():
    assert parse_date_list("2025-07-23, 3/7/2025") == [date(2025, 7, 3), date(2025, 7, 23)]


def test_multiple_days_same_month():
    assert parse_date_list("23-28-29/07/2025") == [
        date(2025, 7, 23),
        date(2025, 7, 28),
        date(2025, 7, 29),
    ]


def test_bare_days_take_following_month():
    assert parse_date_list("08 Y 09/12/2025") == [date(2025, 12, 8), date(2025, 12, 9)]


def test_bare_days_keep_previous_month():
    assert parse_date_list("28-29/07/2025, 05, 09/12/2025") == [
        date(2025, 7, 5),
        date(2025, 7, 28),
        date(2025, 7, 29),
        date(2025, 12, 9),
    ]
    assert parse_date_list("10/03/2025; 12; 2025-04-01") == [
        date(2025, 3, 10),
        date(2025, 3, 12),
        date(2025, 4, 1),
    ]


def test_duplicates_and_invalid_dates_are_dropped():
    result = parse_date_list("31/02/2025; 01/03/2025; 2025-03-01; 15/06/1999")
    assert result == [date(2025, 3, 1)]


def test_bare_days_without_reference_are_ignored():
    assert parse_date_list("12 Y 13") == []


def test_parse_single_date():
    assert parse_single_date("2025-01-05") == date(2025, 1, 5)
    assert parse_single_date("05/01/2025") == date(2025, 1, 5)
    assert parse_single_date("05-06/01/2025") is None
    assert parse_single_date("mañana") is None


def test_coerce_date_list_mixed_input():
    result = coerce_date_list([date(2025, 5, 1), "02/05/2025", None, date(2040, 1, 1)])
    assert result == [date(2025, 5, 1), date(2025, 5, 2)]


def test_format_date_list():
    assert format_date_list([date(2025, 5, 1), date(2025, 5, 2)]) == "2025-05-01, 2025-05-02"


@pytest.mark.parametrize(
    "value,expected",
    [(None, 0), (6, 6), (-3, 0), ("12 horas", 12), ("sin pausa", 0)],
)
def test_parse_pause_hours(value, expected):
    assert parse_pause_hours(value) == expected
