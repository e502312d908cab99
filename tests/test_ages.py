"""
Unit tests for the age calculator.
"""

from datetime import date

from cinequiz.ages import age_at, calculate_age


def test_day_before_birthday():
	assert calculate_age(date(1990, 6, 15), date(2020, 6, 14)) == 29


def test_on_birthday():
	assert calculate_age(date(1990, 6, 15), date(2020, 6, 15)) == 30


def test_earlier_month_counts_as_not_yet():
	assert calculate_age(date(1980, 12, 31), date(2010, 1, 1)) == 29


def test_leap_day_birthday():
	birth = date(2000, 2, 29)
	assert calculate_age(birth, date(2021, 2, 28)) == 20
	assert calculate_age(birth, date(2021, 3, 1)) == 21
	assert calculate_age(birth, date(2024, 2, 29)) == 24


def test_same_day_is_zero():
	assert calculate_age(date(2001, 5, 5), date(2001, 5, 5)) == 0


def test_age_at_missing_dates():
	assert age_at(None, date(2020, 1, 1)) is None
	assert age_at(date(1990, 1, 1), None) is None
	assert age_at(date(1990, 1, 1), date(2020, 1, 1)) == 30
