"""
Distractor generators.
Each generator returns up to `count` plausible-but-wrong alternatives; callers
compare the returned length with what they asked for and reject the candidate
question when it comes up short.
"""

import random
from typing import List, Optional, Set, Tuple

from rapidfuzz import fuzz  # near-duplicate character names

from .ages import age_at
from .models import Actor, Dataset, Production, Role

# Character names scoring above this are treated as the same character
CHARACTER_SIMILARITY_THRESHOLD = 80


def actor_distractors(
	dataset: Dataset,
	correct_role: Role,
	correct_age: int,
	count: int,
) -> List[Tuple[Actor, Role, int]]:
	"""
	Other actors of the same production, closest age first.
	Only actors whose age at the production start differs from the correct age
	by more than one year qualify, so that no distractor also reads as correct.
	"""
	production = dataset.production(correct_role.production_id)
	if production is None or production.production_start is None:
		return []

	seen: Set[str] = {correct_role.actor_id}
	candidates: List[Tuple[Actor, Role, int]] = []
	for role in dataset.roles_in(production.imdb_id):
		if role.actor_id in seen:
			continue
		actor = dataset.actor_for(role)
		if actor is None:
			continue
		age = age_at(actor.birthday, production.production_start)
		if age is None or abs(age - correct_age) <= 1:
			continue
		seen.add(role.actor_id)
		candidates.append((actor, role, age))

	candidates.sort(key=lambda c: (abs(c[2] - correct_age), c[0].name))
	return candidates[:count]


def production_distractors(
	dataset: Dataset,
	actor_id: str,
	correct_production_id: str,
	count: int,
	min_year: int,
	max_year: int,
	rng: Optional[random.Random] = None,
	character: Optional[str] = None,
) -> List[Production]:
	"""
	Other productions of the same actor released within the year bounds, sampled at random.
	With `character` given, productions where the actor played that character
	(or a near-duplicate of it) are left out: they would answer the question too.
	"""
	rng = rng or random.Random()
	pool = {}
	repeats: Set[str] = set()  # productions where the asked character recurs
	for role in dataset.roles_of(actor_id):
		if character and _is_near_duplicate(role.character, character):
			repeats.add(role.production_id)
		if role.production_id == correct_production_id or role.production_id in pool:
			continue
		production = dataset.production(role.production_id)
		if production is None or production.release_year is None:
			continue
		if min_year <= production.release_year <= max_year:
			pool[production.imdb_id] = production
	# sorted ids keep sampling reproducible for a seeded rng
	ordered = [pool[k] for k in sorted(pool) if k not in repeats]
	return rng.sample(ordered, min(count, len(ordered)))


def clean_character(name: str) -> str:
	"""Drop alias suffixes ("Bruce Wayne / Batman", "Joker (voice)") before comparing."""
	cleaned = name.split('/')[0]
	cleaned = cleaned.split('(')[0]
	return cleaned.strip().lower()


def _is_near_duplicate(a: str, b: str) -> bool:
	return fuzz.ratio(clean_character(a), clean_character(b)) > CHARACTER_SIMILARITY_THRESHOLD


def character_distractors(
	dataset: Dataset,
	production_id: str,
	correct_character: str,
	count: int,
	rng: Optional[random.Random] = None,
	actor_id: Optional[str] = None,
) -> List[Role]:
	"""
	Other characters of the same production, skipping near-duplicates of each other and of the answer.
	Characters played by `actor_id` are skipped as well.
	"""
	rng = rng or random.Random()
	pool: List[Role] = []
	seen: Set[str] = set()
	for role in dataset.roles_in(production_id):
		if actor_id is not None and role.actor_id == actor_id:
			continue
		name = role.character.strip()
		if not name or name.lower() in seen:
			continue
		seen.add(name.lower())
		if _is_near_duplicate(name, correct_character):
			continue
		pool.append(role)

	rng.shuffle(pool)
	picked: List[Role] = []
	for role in pool:
		if any(_is_near_duplicate(role.character, p.character) for p in picked):
			continue
		picked.append(role)
		if len(picked) == count:
			break
	return picked


def numeric_age_distractors(
	correct_age: int,
	count: int,
	rng: Optional[random.Random] = None,
	spread: int = 6,
	floor: int = 18,
	min_gap: int = 2,
	max_attempts: int = 100,
) -> List[int]:
	"""
	Random ages within +/- spread of the correct age (never below floor), each at
	least `min_gap` away from the answer and from one another.
	Bounded rejection sampling: may return fewer than `count`.
	"""
	rng = rng or random.Random()
	lo, hi = max(floor, correct_age - spread), correct_age + spread
	if lo > hi:
		return []
	picked: List[int] = []
	for _ in range(max_attempts):
		if len(picked) == count:
			break
		value = rng.randint(lo, hi)
		if all(abs(value - other) >= min_gap for other in picked + [correct_age]):
			picked.append(value)
	return picked


def age_ladder(
	correct_age: int,
	rng: Optional[random.Random] = None,
	size: int = 4,
	floor: int = 18,
) -> List[int]:
	"""
	Strictly increasing ages containing the correct one at a random slot.
	Neighbours are spaced by random gaps of 2-4. When the lowest rung would drop
	below `floor`, the answer moves to a lower slot so the ladder climbs instead.
	"""
	rng = rng or random.Random()
	gaps = [rng.randint(2, 4) for _ in range(size - 1)]
	slot = rng.randrange(size)
	while True:
		values = [0] * size
		values[slot] = correct_age
		for i in range(slot - 1, -1, -1):
			values[i] = values[i + 1] - gaps[i]
		for i in range(slot + 1, size):
			values[i] = values[i - 1] + gaps[i - 1]
		if values[0] >= floor or slot == 0:
			return values
		slot -= 1
