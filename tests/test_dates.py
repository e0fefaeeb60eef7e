from datetime import datetime

import pandas as pd

from analysis.dates import is_date_like, is_date_string, parse_date


def local_ms(*args):
    return datetime(*args).timestamp() * 1000


def test_year_month_is_first_of_month():
    assert parse_date("1991-10") == local_ms(1991, 10, 1)
    assert parse_date("1991/10") == local_ms(1991, 10, 1)


def test_year_month_day():
    assert parse_date("1991-10-01") == local_ms(1991, 10, 1)
    assert parse_date("2021/3/5") == local_ms(2021, 3, 5)


def test_day_overflow_rolls_over():
    assert parse_date("2021-02-31") == local_ms(2021, 3, 3)


def test_invalid_dates():
    assert parse_date("not-a-date") is None
    assert parse_date("1991-13") is None
    assert parse_date("2020-01-32") is None
    assert parse_date("") is None
    assert parse_date(None) is None
    assert parse_date(True) is None


def test_numbers_pass_through():
    assert parse_date(1577836800000) == 1577836800000
    assert parse_date(2.5) == 2.5
    assert parse_date("1577836800000") == 1577836800000.0


def test_datetime_objects():
    assert parse_date(datetime(2020, 5, 1)) == local_ms(2020, 5, 1)
    assert parse_date(pd.Timestamp(2020, 5, 1)) == local_ms(2020, 5, 1)


def test_generic_text():
    assert parse_date("1 March 2020") == local_ms(2020, 3, 1)
    assert parse_date("March") is None


def test_is_date_string():
    assert is_date_string("2020-01")
    assert is_date_string("2020-01-15")
    assert not is_date_string("2020")
    assert not is_date_string(2020)
    assert not is_date_string("Bedok")
    assert not is_date_string("")


def test_is_date_like():
    assert is_date_like(datetime(2020, 1, 1))
    assert is_date_like("2020-01")
    assert not is_date_like(2020)
    assert not is_date_like(None)


def test_out_of_range_years_are_not_dates():
    assert parse_date("0000-01") is None
    assert parse_date("0000-05-10") is None
    assert not is_date_string("0000-01")
