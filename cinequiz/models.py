"""
Data models for CineQuiz.
Defines the loaded tables (actors, productions, roles, genres) and the question
variants produced for each game round.
"""

# Import dataclass to define simple "record-like" classes without boilerplate
from dataclasses import dataclass, field  # auto-generates __init__, __repr__, etc.
from datetime import date  # calendar dates for birthdays and filming
from enum import Enum  # fixed archetype tags
# Import typing helpers for precise and self-documenting types
from typing import Dict, List, NamedTuple, Optional, Tuple, Union


class ActorKey(NamedTuple):
	"""Composite actor identity: catalog ids collide across name variants."""
	imdb_id: str
	name: str


class QuestionKey(NamedTuple):
	"""Identity of a fact asked about: who played which character where."""
	actor_id: str
	production_id: str
	character: str


@dataclass(frozen=True)
class Actor:
	"""A performer from actors.csv."""
	imdb_id: str  # external catalog id
	name: str  # display name
	birthday: Optional[date] = None  # missing birthday excludes the actor from age questions

	@property
	def key(self) -> ActorKey:
		return ActorKey(self.imdb_id, self.name)


@dataclass(frozen=True)
class Production:
	"""
	A film or series from productions.csv.
	Release date buckets the production into year filters; production start/end
	are the filming window used for age-at-filming questions.
	"""
	imdb_id: str  # unique catalog id
	title: str  # display title
	type: str = ''  # movie / series, free text
	franchise: str = ''  # empty when the production belongs to no franchise
	genre_ids: Tuple[str, ...] = ()  # genre ids (pipe-separated in the CSV)
	release_date: Optional[date] = None
	production_start: Optional[date] = None
	production_end: Optional[date] = None
	box_office: Optional[int] = None  # US box office in dollars
	rating: Optional[float] = None  # critic rating, 1-10
	poster: Optional[str] = None  # poster URL for the UI

	@property
	def release_year(self) -> Optional[int]:
		return self.release_date.year if self.release_date else None


@dataclass(frozen=True)
class Role:
	"""Join record between an actor and a production."""
	actor_id: str
	actor_name: str
	production_id: str
	production_title: str
	character: str

	@property
	def actor_key(self) -> ActorKey:
		return ActorKey(self.actor_id, self.actor_name)

	@property
	def question_key(self) -> QuestionKey:
		return QuestionKey(self.actor_id, self.production_id, self.character)


@dataclass(frozen=True)
class Genre:
	id: str
	name: str


class Dataset:
	"""
	Read-only view over the loaded tables with the lookups the game needs.
	Indexes are built once at construction.
	"""

	def __init__(
		self,
		actors: List[Actor],
		productions: List[Production],
		roles: List[Role],
		genres: Optional[List[Genre]] = None,
	):
		self.actors = list(actors)
		self.productions = list(productions)
		self.roles = list(roles)
		self.genres = list(genres or [])

		# Composite-key index plus a fallback index by bare id
		self._actors_by_key: Dict[ActorKey, Actor] = {a.key: a for a in self.actors}
		self._actors_by_id: Dict[str, Actor] = {}
		for actor in self.actors:
			self._actors_by_id.setdefault(actor.imdb_id, actor)

		self._productions: Dict[str, Production] = {p.imdb_id: p for p in self.productions}

		self._roles_by_production: Dict[str, List[Role]] = {}
		self._roles_by_actor: Dict[str, List[Role]] = {}
		for role in self.roles:
			self._roles_by_production.setdefault(role.production_id, []).append(role)
			self._roles_by_actor.setdefault(role.actor_id, []).append(role)

		self.genre_names: Dict[str, str] = {g.id: g.name for g in self.genres}

	def actor_for(self, role: Role) -> Optional[Actor]:
		"""Resolve the actor of a role by composite key, then by id alone."""
		actor = self._actors_by_key.get(role.actor_key)
		if actor is None:
			actor = self._actors_by_id.get(role.actor_id)
		return actor

	def production(self, imdb_id: str) -> Optional[Production]:
		return self._productions.get(imdb_id)

	def roles_in(self, production_id: str) -> List[Role]:
		return self._roles_by_production.get(production_id, [])

	def roles_of(self, actor_id: str) -> List[Role]:
		return self._roles_by_actor.get(actor_id, [])

	def franchises(self) -> Dict[str, List[Production]]:
		"""Group productions by their non-empty franchise label."""
		groups: Dict[str, List[Production]] = {}
		for production in self.productions:
			if production.franchise:
				groups.setdefault(production.franchise, []).append(production)
		return groups

	def is_empty(self) -> bool:
		return not self.roles


class Archetype(str, Enum):
	"""Question shapes; each round uses exactly one."""
	ACTOR_BY_AGE = 'actor_by_age'
	PRODUCTION_BY_ROLE = 'production_by_role'
	CHARACTER_BY_ACTOR = 'character_by_actor'
	AGE_CHOICE = 'age_choice'
	AGE_SLIDER = 'age_slider'
	RANKING = 'ranking'


@dataclass(frozen=True)
class ChoiceItem:
	"""One multiple-choice option with the facts revealed after answering."""
	label: str
	age: Optional[int] = None
	actor_name: Optional[str] = None
	character: Optional[str] = None
	production_title: Optional[str] = None


@dataclass(frozen=True)
class MultipleChoiceQuestion:
	prompt: str
	choices: List[ChoiceItem]
	correct_index: int
	points: int
	key: Optional[QuestionKey] = None
	poster: Optional[str] = None
	kind: str = field(default='multiple_choice', init=False)

	@property
	def correct_choice(self) -> ChoiceItem:
		return self.choices[self.correct_index]


@dataclass(frozen=True)
class SliderQuestion:
	prompt: str
	correct_value: int
	min_value: int
	max_value: int
	points: int
	key: Optional[QuestionKey] = None
	poster: Optional[str] = None
	kind: str = field(default='slider', init=False)


@dataclass(frozen=True)
class OrderItem:
	id: str  # production imdb id
	label: str  # production title
	value: float  # sort key (box office or rating)
	display: str  # formatted sort key shown in the target column
	poster: Optional[str] = None


@dataclass(frozen=True)
class OrderingQuestion:
	prompt: str
	items: List[OrderItem]
	drag_order: List[str]  # item ids in the order they are presented
	targets: List[str]  # sorted display values, lowest first
	correct_order: List[str]  # item ids sorted ascending by value
	points: int
	metric: str  # 'box_office' or 'rating'
	group_label: Optional[str] = None  # franchise name or actor name
	is_repeat: bool = False  # drawn after the used memory had to be cleared
	kind: str = field(default='ordering', init=False)


@dataclass(frozen=True)
class PlaceholderQuestion:
	"""Neutral question issued when nothing valid could be generated."""
	prompt: str
	reason: str = ''
	choices: Tuple[str, ...] = ('Continue',)
	points: int = 0
	kind: str = field(default='placeholder', init=False)


Question = Union[MultipleChoiceQuestion, SliderQuestion, OrderingQuestion, PlaceholderQuestion]


@dataclass(frozen=True)
class RoundSpec:
	"""One game round: a fixed archetype and a fixed point value."""
	number: int
	archetype: Archetype
	points: int
	title: str = ''
