"""
Question generator module.
Samples candidate facts under the active filters, asks the matching distractor
generator for wrong answers, and relaxes the year range when the filters are
too tight to yield anything.
"""

import random
from typing import Callable, Dict, List, Optional, Set, Tuple

from loguru import logger

from .ages import calculate_age
from .distractors import (
	actor_distractors,
	age_ladder,
	character_distractors,
	numeric_age_distractors,
	production_distractors,
)
from .filters import FilterContext, UsedMemory
from .models import (
	Actor,
	Archetype,
	ChoiceItem,
	Dataset,
	MultipleChoiceQuestion,
	OrderingQuestion,
	OrderItem,
	PlaceholderQuestion,
	Production,
	Question,
	Role,
	RoundSpec,
	SliderQuestion,
)

# Archetypes that need both a birthday and a production start date
AGE_ARCHETYPES = {Archetype.ACTOR_BY_AGE, Archetype.AGE_CHOICE, Archetype.AGE_SLIDER}

DISTRACTOR_COUNT = 3  # wrong answers per multiple-choice question
RANKING_SIZE = 4  # items per ordering question


def placeholder_question(reason: str = '') -> PlaceholderQuestion:
	"""A single dismissible "Continue" question used when generation gives up."""
	return PlaceholderQuestion(
		prompt="We couldn't find a question for these filters. Press continue to move on.",
		reason=reason,
	)


class QuestionGenerator:
	"""
	Produces one Question per call for the given round.
	Reads and writes the shared used memory; may widen the filter's year range
	(the orchestrator resets it at the next round boundary).
	"""

	def __init__(
		self,
		dataset: Dataset,
		filters: FilterContext,
		used: Optional[UsedMemory] = None,
		rng: Optional[random.Random] = None,
		widen_step: int = 2,
	):
		self.dataset = dataset
		self.filters = filters
		self.used = used if used is not None else UsedMemory()
		self.rng = rng or random.Random()
		self.widen_step = widen_step

		self._builders: Dict[Archetype, Callable[[Role, Actor, Production, int], Optional[Question]]] = {
			Archetype.ACTOR_BY_AGE: self._build_actor_by_age,
			Archetype.PRODUCTION_BY_ROLE: self._build_production_by_role,
			Archetype.CHARACTER_BY_ACTOR: self._build_character_by_actor,
			Archetype.AGE_CHOICE: self._build_age_choice,
			Archetype.AGE_SLIDER: self._build_age_slider,
		}

	def generate(self, round_spec: RoundSpec) -> Optional[Question]:
		"""Return a question for the round, or None when the search is exhausted."""
		if round_spec.archetype == Archetype.RANKING:
			return self._generate_ranking(round_spec.points)
		return self._generate_standard(round_spec.archetype, round_spec.points)

	# ------------------------------------------------------------------
	# Standard rounds
	# ------------------------------------------------------------------

	def _generate_standard(self, archetype: Archetype, points: int) -> Optional[Question]:
		roles = self.dataset.roles
		if not roles:
			logger.warning("[Generator] Dataset has no roles, nothing to ask")
			return None

		builder = self._builders[archetype]
		cap = 2 * len(roles)
		attempts = 0
		filter_rejections = 0  # rejections that a wider year range could cure

		while True:
			if attempts >= cap:
				if filter_rejections == 0:
					logger.warning(f"[Generator] No {archetype.value} question: distractors exhausted")
					return None
				if not self.filters.widen(self.widen_step):
					logger.warning(
						f"[Generator] No {archetype.value} question within absolute bounds "
						f"{self.filters.absolute_min}-{self.filters.absolute_max}"
					)
					return None
				attempts = 0
				filter_rejections = 0
				continue

			attempts += 1
			role = self.rng.choice(roles)
			resolved, reason = self._resolve(role, archetype)
			if resolved is None:
				if reason in ('filtered', 'used'):
					filter_rejections += 1
				logger.debug(f"[Generator] Rejected role {role.question_key} | reason={reason}")
				continue

			actor, production = resolved
			question = builder(role, actor, production, points)
			if question is None:
				logger.debug(f"[Generator] Too few distractors for {role.question_key}")
				continue

			self.used.questions.add(role.question_key)
			logger.debug(f"[Generator] Issued {archetype.value} question for {role.question_key}")
			return question

	def _resolve(self, role: Role, archetype: Archetype) -> Tuple[Optional[Tuple[Actor, Production]], str]:
		"""Validate a sampled role; returns ((actor, production), '') or (None, reason)."""
		actor = self.dataset.actor_for(role)
		production = self.dataset.production(role.production_id)
		if actor is None or production is None or not role.character.strip():
			return None, 'missing'
		if archetype in AGE_ARCHETYPES:
			if actor.birthday is None or production.production_start is None:
				return None, 'missing'
			if calculate_age(actor.birthday, production.production_start) < 0:
				return None, 'missing'
		if not self.filters.matches(production):
			return None, 'filtered'
		if role.question_key in self.used.questions:
			return None, 'used'
		return (actor, production), ''

	def _character_in(self, actor_id: str, production_id: str) -> Optional[str]:
		"""The character the actor played in a production (first listed), if any."""
		for role in self.dataset.roles_of(actor_id):
			if role.production_id == production_id and role.character.strip():
				return role.character
		return None

	def _shuffled_choices(self, correct: ChoiceItem, wrong: List[ChoiceItem]) -> Tuple[List[ChoiceItem], int]:
		choices = [correct] + wrong
		self.rng.shuffle(choices)
		return choices, choices.index(correct)

	def _build_actor_by_age(self, role: Role, actor: Actor, production: Production, points: int) -> Optional[Question]:
		age = calculate_age(actor.birthday, production.production_start)
		others = actor_distractors(self.dataset, role, age, DISTRACTOR_COUNT)
		if len(others) < DISTRACTOR_COUNT:
			return None
		correct = ChoiceItem(
			label=actor.name, age=age, actor_name=actor.name,
			character=role.character, production_title=production.title,
		)
		wrong = [
			ChoiceItem(
				label=other.name, age=other_age, actor_name=other.name,
				character=other_role.character, production_title=production.title,
			)
			for other, other_role, other_age in others
		]
		choices, index = self._shuffled_choices(correct, wrong)
		return MultipleChoiceQuestion(
			prompt=f"Which actor was {age} years old when filming started on {production.title}?",
			choices=choices,
			correct_index=index,
			points=points,
			key=role.question_key,
			poster=production.poster,
		)

	def _build_production_by_role(self, role: Role, actor: Actor, production: Production, points: int) -> Optional[Question]:
		pool = production_distractors(
			self.dataset, role.actor_id, production.imdb_id,
			count=len(self.dataset.roles_of(role.actor_id)),
			min_year=self.filters.min_year, max_year=self.filters.max_year, rng=self.rng,
			character=role.character,
		)
		# titles must read differently from the answer and from one another
		titles: Set[str] = {production.title.lower()}
		others: List[Production] = []
		for other in pool:
			if other.title.lower() in titles:
				continue
			titles.add(other.title.lower())
			others.append(other)
			if len(others) == DISTRACTOR_COUNT:
				break
		if len(others) < DISTRACTOR_COUNT:
			return None
		correct = ChoiceItem(label=production.title, actor_name=actor.name, character=role.character, production_title=production.title)
		wrong = [
			ChoiceItem(label=p.title, actor_name=actor.name, character=self._character_in(role.actor_id, p.imdb_id), production_title=p.title)
			for p in others
		]
		choices, index = self._shuffled_choices(correct, wrong)
		return MultipleChoiceQuestion(
			prompt=f"In which production did {actor.name} play {role.character}?",
			choices=choices,
			correct_index=index,
			points=points,
			key=role.question_key,
		)

	def _build_character_by_actor(self, role: Role, actor: Actor, production: Production, points: int) -> Optional[Question]:
		others = character_distractors(
			self.dataset, production.imdb_id, role.character, DISTRACTOR_COUNT, self.rng, actor_id=role.actor_id,
		)
		if len(others) < DISTRACTOR_COUNT:
			return None
		correct = ChoiceItem(label=role.character, actor_name=actor.name, character=role.character, production_title=production.title)
		wrong = [
			ChoiceItem(label=r.character, actor_name=r.actor_name, character=r.character, production_title=production.title)
			for r in others
		]
		choices, index = self._shuffled_choices(correct, wrong)
		return MultipleChoiceQuestion(
			prompt=f"Who did {actor.name} play in {production.title}?",
			choices=choices,
			correct_index=index,
			points=points,
			key=role.question_key,
			poster=production.poster,
		)

	def _build_age_choice(self, role: Role, actor: Actor, production: Production, points: int) -> Optional[Question]:
		age = calculate_age(actor.birthday, production.production_start)
		wrong = numeric_age_distractors(age, DISTRACTOR_COUNT, self.rng)
		if len(wrong) < DISTRACTOR_COUNT:
			# rejection sampling can box itself in near the floor; the ladder never does
			wrong = [v for v in age_ladder(age, self.rng, size=DISTRACTOR_COUNT + 1) if v != age]
		values = sorted(wrong + [age])
		choices = [ChoiceItem(label=str(v), age=v) for v in values]
		return MultipleChoiceQuestion(
			prompt=f"How old was {actor.name} when filming started on {production.title}?",
			choices=choices,
			correct_index=values.index(age),
			points=points,
			key=role.question_key,
			poster=production.poster,
		)

	def _build_age_slider(self, role: Role, actor: Actor, production: Production, points: int) -> Optional[Question]:
		age = calculate_age(actor.birthday, production.production_start)
		pad_low = self.rng.randint(3, 10)
		pad_high = self.rng.choice([p for p in range(3, 11) if p != pad_low])
		return SliderQuestion(
			prompt=f"How old was {actor.name} when filming started on {production.title}?",
			correct_value=age,
			min_value=max(0, age - pad_low),
			max_value=age + pad_high,
			points=points,
			key=role.question_key,
			poster=production.poster,
		)

	# ------------------------------------------------------------------
	# Ranking rounds
	# ------------------------------------------------------------------

	def _generate_ranking(self, points: int) -> Optional[Question]:
		if self.rng.random() < 0.5:
			return self._ranking(
				metric='box_office',
				groups_fn=self._franchise_groups,
				used=self.used.franchises,
				points=points,
			)
		return self._ranking(
			metric='rating',
			groups_fn=self._actor_groups,
			used=self.used.ranking_actors,
			points=points,
		)

	@staticmethod
	def _metric_value(production: Production, metric: str) -> Optional[float]:
		return production.box_office if metric == 'box_office' else production.rating

	def _franchise_groups(self) -> Dict[str, Tuple[str, List[Production]]]:
		"""franchise -> (label, productions with box office passing the filters)"""
		groups: Dict[str, Tuple[str, List[Production]]] = {}
		for franchise, productions in self.dataset.franchises().items():
			eligible = [p for p in productions if p.box_office is not None and self.filters.matches(p)]
			if len(eligible) >= RANKING_SIZE:
				groups[franchise] = (franchise, eligible)
		return groups

	def _actor_groups(self) -> Dict[str, Tuple[str, List[Production]]]:
		"""actor id -> (actor name, rated productions passing the filters)"""
		filmographies: Dict[str, Dict[str, Production]] = {}
		names: Dict[str, str] = {}
		for role in self.dataset.roles:
			production = self.dataset.production(role.production_id)
			if production is None or production.rating is None or not self.filters.matches(production):
				continue
			filmographies.setdefault(role.actor_id, {})[production.imdb_id] = production
			names.setdefault(role.actor_id, role.actor_name)
		return {
			actor_id: (names[actor_id], list(films.values()))
			for actor_id, films in filmographies.items()
			if len(films) >= RANKING_SIZE
		}

	def _pick_distinct(self, productions: List[Production], metric: str) -> List[Production]:
		"""Random productions whose metric values are pairwise distinct, so the order is unambiguous."""
		pool = sorted(productions, key=lambda p: p.imdb_id)
		self.rng.shuffle(pool)
		picked: List[Production] = []
		values: Set[float] = set()
		for production in pool:
			value = self._metric_value(production, metric)
			if value is None or value in values:
				continue
			values.add(value)
			picked.append(production)
			if len(picked) == RANKING_SIZE:
				break
		return picked

	def _pick_group(self, groups, used: Set[str], metric: str):
		keys = sorted(groups)
		self.rng.shuffle(keys)
		for key in keys:
			if key in used:
				continue
			label, productions = groups[key]
			picked = self._pick_distinct(productions, metric)
			if len(picked) == RANKING_SIZE:
				return key, label, picked
		return None

	def _ranking(self, metric: str, groups_fn, used: Set[str], points: int) -> Optional[Question]:
		picked = self._pick_group(groups_fn(), used, metric)
		while picked is None and self.filters.widen(self.widen_step):
			picked = self._pick_group(groups_fn(), used, metric)

		repeat = False
		if picked is None and used:
			# every distinct group is spent: allow repeats, flagged as such
			logger.info(f"[Generator] All {metric} groups used, clearing memory of {len(used)}")
			used.clear()
			repeat = True
			self.filters.widen_to_absolute()
			picked = self._pick_group(groups_fn(), used, metric)

		if picked is not None:
			key, label, productions = picked
			used.add(key)
			return self._build_ordering(productions, metric, points, label, repeat)

		logger.info(f"[Generator] No {metric} group qualifies, falling back to ungrouped productions")
		pool = [
			p for p in self.dataset.productions
			if self._metric_value(p, metric) is not None and self.filters.matches(p)
		]
		productions = self._pick_distinct(pool, metric)
		if len(productions) < RANKING_SIZE:
			logger.warning(f"[Generator] Only {len(productions)} productions carry {metric}, cannot rank")
			return None
		return self._build_ordering(productions, metric, points, None, False)

	def _build_ordering(
		self,
		productions: List[Production],
		metric: str,
		points: int,
		group_label: Optional[str],
		repeat: bool,
	) -> OrderingQuestion:
		items = []
		for p in productions:
			value = self._metric_value(p, metric)
			display = f"${int(value):,}" if metric == 'box_office' else f"{value:.1f}"
			items.append(OrderItem(id=p.imdb_id, label=p.title, value=value, display=display, poster=p.poster))

		ranked = sorted(items, key=lambda i: i.value)
		correct_order = [i.id for i in ranked]
		drag_order = [i.id for i in sorted(items, key=lambda i: (i.label.lower(), i.id))]
		if drag_order == correct_order:
			drag_order = drag_order[1:] + drag_order[:1]

		measure = 'US box office' if metric == 'box_office' else 'rating'
		if group_label and metric == 'box_office':
			prompt = f"Order these {group_label} films by {measure}, lowest first."
		elif group_label:
			prompt = f"Order these productions starring {group_label} by {measure}, lowest first."
		else:
			prompt = f"Order these productions by {measure}, lowest first."

		return OrderingQuestion(
			prompt=prompt,
			items=items,
			drag_order=drag_order,
			targets=[i.display for i in ranked],
			correct_order=correct_order,
			points=points,
			metric=metric,
			group_label=group_label,
			is_repeat=repeat,
		)
