"""
Filter context module.
Holds the active year/genre/franchise constraints and the per-game memory of
facts already asked.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional, Set, Tuple

from loguru import logger

from .models import Production, QuestionKey

# Used when no production carries a parseable release year
DEFAULT_YEAR_BOUNDS: Tuple[int, int] = (1900, 2100)


def derive_year_bounds(productions: Iterable[Production]) -> Tuple[int, int]:
	"""Scan release years once at load time; fall back to a default span."""
	years = [p.release_year for p in productions if p.release_year is not None]
	if not years:
		logger.warning(f"[Filters] No parseable release year, using default span {DEFAULT_YEAR_BOUNDS}")
		return DEFAULT_YEAR_BOUNDS
	return min(years), max(years)


class FilterContext:
	"""
	Active constraints narrowing candidate sampling.
	- min_year/max_year: inclusive range, clamped to the absolute bounds
	- genres: empty means every genre
	- franchises: empty means every franchise; '' admits productions without one
	The player-chosen range is kept as a baseline so that in-round widening can
	be reverted.
	"""

	def __init__(
		self,
		absolute_min: int,
		absolute_max: int,
		min_year: Optional[int] = None,
		max_year: Optional[int] = None,
		genres: Optional[Iterable[str]] = None,
		franchises: Optional[Iterable[str]] = None,
	):
		if absolute_min > absolute_max:
			absolute_min, absolute_max = absolute_max, absolute_min
		self.absolute_min = absolute_min
		self.absolute_max = absolute_max
		self.genres: Set[str] = set(genres or [])
		self.franchises: Set[str] = set(franchises or [])
		self.set_range(
			absolute_min if min_year is None else min_year,
			absolute_max if max_year is None else max_year,
		)

	@classmethod
	def for_productions(cls, productions: Iterable[Production], **kwargs) -> 'FilterContext':
		"""Build a context whose absolute bounds come from the productions' release years."""
		lo, hi = derive_year_bounds(productions)
		return cls(lo, hi, **kwargs)

	def _clamp(self, year: int) -> int:
		return max(self.absolute_min, min(self.absolute_max, year))

	def set_range(self, min_year: int, max_year: int) -> None:
		"""Set the player-chosen range (also becomes the new baseline)."""
		lo, hi = self._clamp(min_year), self._clamp(max_year)
		if lo > hi:
			lo, hi = hi, lo
		self.min_year, self.max_year = lo, hi
		self._baseline = (lo, hi)

	@property
	def baseline(self) -> Tuple[int, int]:
		return self._baseline

	def year_in_range(self, year: Optional[int]) -> bool:
		return year is not None and self.min_year <= year <= self.max_year

	def matches(self, production: Production) -> bool:
		"""True if the production passes year, genre and franchise constraints."""
		if not self.year_in_range(production.release_year):
			return False
		if self.genres and not self.genres.intersection(production.genre_ids):
			return False
		if self.franchises and production.franchise not in self.franchises:
			return False
		return True

	def at_absolute_bounds(self) -> bool:
		return self.min_year <= self.absolute_min and self.max_year >= self.absolute_max

	def widen(self, step: int = 2) -> bool:
		"""Widen both ends by `step` years. Returns False when nothing is left to widen."""
		if self.at_absolute_bounds():
			return False
		self.min_year = self._clamp(self.min_year - step)
		self.max_year = self._clamp(self.max_year + step)
		logger.info(f"[Filters] Widened year range to {self.min_year}-{self.max_year}")
		return True

	def widen_to_absolute(self) -> None:
		self.min_year, self.max_year = self.absolute_min, self.absolute_max

	def reset_bounds(self) -> None:
		"""Revert any widening to the player-chosen baseline."""
		self.min_year, self.max_year = self._baseline


@dataclass
class UsedMemory:
	"""Facts already issued: question identities for the whole game, ranking groups per round."""
	questions: Set[QuestionKey] = field(default_factory=set)
	franchises: Set[str] = field(default_factory=set)
	ranking_actors: Set[str] = field(default_factory=set)

	def reset_ranking(self) -> None:
		self.franchises.clear()
		self.ranking_actors.clear()

	def reset(self) -> None:
		self.questions.clear()
		self.reset_ranking()
