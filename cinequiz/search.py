"""
Role search.
Finds roles by free text and by the actor's age during filming, the lookup
behind the "who was how old in what" browser page.
"""

from dataclasses import dataclass
from typing import List, Optional, Set, Tuple

from loguru import logger

from .ages import calculate_age
from .models import Dataset, QuestionKey

SORT_KEYS = ('actor_name', 'production_title', 'character', 'age_at_start')


@dataclass
class RoleSearchResult:
	actor_name: str
	production_title: str
	character: str
	age_at_start: int
	age_at_end: int

	@property
	def age_display(self) -> str:
		if self.age_at_start == self.age_at_end:
			return str(self.age_at_start)
		return f"{self.age_at_start}-{self.age_at_end}"


def normalize_age_window(lower: Optional[int], upper: Optional[int]) -> Tuple[float, float]:
	"""
	One bound given -> exact age; both given -> ordered range; none -> everything.
	"""
	if lower is not None and upper is None:
		return lower, lower
	if lower is None and upper is not None:
		return upper, upper
	if lower is not None and upper is not None:
		return (upper, lower) if lower > upper else (lower, upper)
	return 0, float('inf')


class RoleSearch:
	"""Searches the roles table; only roles with an actor birthday and a filming start are searchable."""

	def __init__(self, dataset: Dataset):
		self.dataset = dataset

	def search(
		self,
		query: str = '',
		age_lower: Optional[int] = None,
		age_upper: Optional[int] = None,
		sort_by: str = 'actor_name',
		order: str = 'asc',
	) -> List[RoleSearchResult]:
		if sort_by not in SORT_KEYS:
			raise ValueError(f"sort_by must be one of {SORT_KEYS}, got '{sort_by}'")
		if order not in ('asc', 'desc'):
			raise ValueError(f"order must be 'asc' or 'desc', got '{order}'")

		needle = (query or '').strip().lower()
		lower, upper = normalize_age_window(age_lower, age_upper)

		results: List[RoleSearchResult] = []
		seen: Set[QuestionKey] = set()
		for role in self.dataset.roles:
			actor = self.dataset.actor_for(role)
			production = self.dataset.production(role.production_id)
			if actor is None or production is None or actor.birthday is None or production.production_start is None:
				continue

			if needle:
				haystack = f"{actor.name} {role.character} {production.franchise} {production.title}".lower()
				if needle not in haystack:
					continue

			age_at_start = calculate_age(actor.birthday, production.production_start)
			age_at_end = calculate_age(actor.birthday, production.production_end or production.production_start)

			# the filming window overlaps the requested ages
			if not (lower <= age_at_end and age_at_start <= upper):
				continue

			if role.question_key in seen:
				continue
			seen.add(role.question_key)
			results.append(RoleSearchResult(
				actor_name=role.actor_name,
				production_title=role.production_title,
				character=role.character,
				age_at_start=age_at_start,
				age_at_end=age_at_end,
			))

		if sort_by == 'age_at_start':
			results.sort(key=lambda r: r.age_at_start, reverse=(order == 'desc'))
		else:
			results.sort(key=lambda r: getattr(r, sort_by).lower(), reverse=(order == 'desc'))
		logger.debug(f"[Search] query='{needle}' ages={lower}-{upper} -> {len(results)} results")
		return results
