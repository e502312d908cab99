"""Age arithmetic on calendar dates."""

from datetime import date
from typing import Optional


def calculate_age(birth: date, as_of: date) -> int:
	"""Completed years between two calendar dates (birthday anniversaries passed)."""
	age = as_of.year - birth.year
	if (as_of.month, as_of.day) < (birth.month, birth.day):
		age -= 1
	return age


def age_at(birth: Optional[date], as_of: Optional[date]) -> Optional[int]:
	"""calculate_age that yields None when either date is unknown."""
	if birth is None or as_of is None:
		return None
	return calculate_age(birth, as_of)
