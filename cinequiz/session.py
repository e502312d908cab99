"""
Session orchestration.
Drives a multi-player game through its rounds: the UI sends intents
(NextRequested, AnswerSubmitted) and receives events back, so the game can be
played from any front-end or straight from tests.
"""

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Sequence, Union

from loguru import logger

from .filters import FilterContext, UsedMemory
from .models import Archetype, Dataset, PlaceholderQuestion, Question, RoundSpec
from .question_generator import QuestionGenerator, placeholder_question
from .scoring import Scorer, ScoreResult

# Six rounds of escalating points
DEFAULT_ROUNDS: List[RoundSpec] = [
	RoundSpec(1, Archetype.ACTOR_BY_AGE, 1, 'Who was that age?'),
	RoundSpec(2, Archetype.PRODUCTION_BY_ROLE, 3, 'Name the production'),
	RoundSpec(3, Archetype.CHARACTER_BY_ACTOR, 4, 'Name the character'),
	RoundSpec(4, Archetype.AGE_CHOICE, 5, 'How old were they?'),
	RoundSpec(5, Archetype.AGE_SLIDER, 10, 'Guess the age'),
	RoundSpec(6, Archetype.RANKING, 10, 'Put them in order'),
]

# Five-round variant
CLASSIC_ROUNDS: List[RoundSpec] = [
	RoundSpec(1, Archetype.ACTOR_BY_AGE, 1, 'Who was that age?'),
	RoundSpec(2, Archetype.PRODUCTION_BY_ROLE, 3, 'Name the production'),
	RoundSpec(3, Archetype.AGE_CHOICE, 5, 'How old were they?'),
	RoundSpec(4, Archetype.AGE_SLIDER, 10, 'Guess the age'),
	RoundSpec(5, Archetype.RANKING, 10, 'Put them in order'),
]

ROUND_SETS = {'default': DEFAULT_ROUNDS, 'classic': CLASSIC_ROUNDS}

PLAYER_COLORS = ['#e63946', '#457b9d', '#2a9d8f', '#f4a261', '#9b5de5', '#ffb703', '#06d6a0', '#8d99ae']


class ConfigurationError(ValueError):
	"""Setup input that blocks the game from starting (bad player names, empty data)."""


class InvalidTransition(RuntimeError):
	"""An intent arrived in a phase that cannot handle it."""


class Phase(str, Enum):
	SETUP = 'setup'
	ROUND_INTRO = 'round_intro'
	QUESTION = 'question'
	FEEDBACK = 'feedback'
	FINISHED = 'finished'


@dataclass
class Player:
	name: str
	color: str
	score: int = 0


# ---- intents (UI -> orchestrator) ----

@dataclass(frozen=True)
class NextRequested:
	pass


@dataclass(frozen=True)
class AnswerSubmitted:
	answer: Any


Intent = Union[NextRequested, AnswerSubmitted]


# ---- events (orchestrator -> UI) ----

@dataclass(frozen=True)
class RoundStarted:
	round: RoundSpec
	total_rounds: int


@dataclass(frozen=True)
class QuestionIssued:
	question: Question
	player: str
	round_number: int
	question_number: int  # 1-based within the round


@dataclass(frozen=True)
class GenerationFailed:
	round_number: int
	reason: str


@dataclass(frozen=True)
class AnswerScored:
	player: str
	result: ScoreResult
	total: int


@dataclass(frozen=True)
class GameFinished:
	ranking: List[Player]


Event = Union[RoundStarted, QuestionIssued, GenerationFailed, AnswerScored, GameFinished]


@dataclass
class Session:
	"""All mutable game state; only GameOrchestrator methods change it."""
	players: List[Player]
	rounds: List[RoundSpec]
	questions_per_round: int = 1
	current_player_index: int = 0
	round_index: int = 0
	questions_in_round: int = 0
	phase: Phase = Phase.SETUP
	current_question: Optional[Question] = None
	used: UsedMemory = field(default_factory=UsedMemory)

	@property
	def current_round(self) -> RoundSpec:
		return self.rounds[self.round_index]

	@property
	def current_player(self) -> Player:
		return self.players[self.current_player_index]

	@property
	def questions_per_round_total(self) -> int:
		return self.questions_per_round * len(self.players)


def validate_player_names(names: Sequence[str]) -> List[str]:
	"""Trimmed names; raises ConfigurationError on empty input, blanks or duplicates."""
	cleaned = [n.strip() for n in names]
	if not cleaned:
		raise ConfigurationError("At least one player is required")
	if any(not n for n in cleaned):
		raise ConfigurationError("Player names cannot be empty")
	lowered = [n.lower() for n in cleaned]
	duplicates = sorted({n for n in cleaned if lowered.count(n.lower()) > 1})
	if duplicates:
		raise ConfigurationError(f"Player names must be unique: {', '.join(duplicates)}")
	return cleaned


class GameOrchestrator:
	"""
	Runs the game state machine:
	SETUP -> ROUND_INTRO -> QUESTION -> FEEDBACK -> ... -> FINISHED
	Each round asks questions_per_round questions of every player in strict
	rotation. Year-range widening done while searching for questions is undone
	at every round boundary.
	"""

	def __init__(
		self,
		dataset: Dataset,
		filters: FilterContext,
		rounds: Optional[List[RoundSpec]] = None,
		questions_per_round: int = 1,
		rng: Optional[random.Random] = None,
	):
		self.dataset = dataset
		self.filters = filters
		self.rounds = list(rounds or DEFAULT_ROUNDS)
		if questions_per_round < 1:
			raise ConfigurationError("questions_per_round must be at least 1")
		self.questions_per_round = questions_per_round
		self.rng = rng or random.Random()
		self.scorer = Scorer()
		self.session: Optional[Session] = None
		self.generator: Optional[QuestionGenerator] = None

	def setup(self, player_names: Sequence[str]) -> List[Event]:
		"""Validate configuration and start a new game at the first round intro."""
		names = validate_player_names(player_names)
		if self.dataset.is_empty():
			raise ConfigurationError("No valid data rows were loaded")
		if not self.rounds:
			raise ConfigurationError("A game needs at least one round")

		players = [Player(name=n, color=PLAYER_COLORS[i % len(PLAYER_COLORS)]) for i, n in enumerate(names)]
		self.session = Session(players=players, rounds=self.rounds, questions_per_round=self.questions_per_round)
		self.session.used.reset()
		self.generator = QuestionGenerator(self.dataset, self.filters, self.session.used, self.rng)
		logger.info(f"[Orchestrator] New game | players={names} | rounds={len(self.rounds)}")
		return self._start_round(0)

	def handle(self, intent: Intent) -> List[Event]:
		"""Consume one UI intent and return the events it produced."""
		session = self._require_session()
		if isinstance(intent, NextRequested):
			if session.phase == Phase.ROUND_INTRO:
				return self._issue_question()
			if session.phase == Phase.FEEDBACK:
				return self._advance()
		elif isinstance(intent, AnswerSubmitted):
			if session.phase == Phase.QUESTION:
				return self._score(intent.answer)
		raise InvalidTransition(f"{type(intent).__name__} not allowed during {session.phase.value}")

	def final_ranking(self) -> List[Player]:
		session = self._require_session()
		return sorted(session.players, key=lambda p: p.score, reverse=True)

	def _require_session(self) -> Session:
		if self.session is None:
			raise InvalidTransition("Game has not been set up")
		return self.session

	def _start_round(self, index: int) -> List[Event]:
		session = self.session
		session.round_index = index
		session.questions_in_round = 0
		session.current_question = None
		session.phase = Phase.ROUND_INTRO
		self.filters.reset_bounds()
		if session.current_round.archetype == Archetype.RANKING:
			session.used.reset_ranking()
		logger.info(f"[Orchestrator] Round {session.current_round.number}: {session.current_round.archetype.value}")
		return [RoundStarted(round=session.current_round, total_rounds=len(session.rounds))]

	def _issue_question(self) -> List[Event]:
		session = self.session
		events: List[Event] = []
		question = self.generator.generate(session.current_round)
		if question is None:
			reason = f"No {session.current_round.archetype.value} question fits the current filters"
			logger.warning(f"[Orchestrator] {reason}; issuing placeholder")
			question = placeholder_question(reason)
			events.append(GenerationFailed(round_number=session.current_round.number, reason=reason))
		session.current_question = question
		session.phase = Phase.QUESTION
		events.append(QuestionIssued(
			question=question,
			player=session.current_player.name,
			round_number=session.current_round.number,
			question_number=session.questions_in_round + 1,
		))
		return events

	def _score(self, answer: Any) -> List[Event]:
		session = self.session
		player = session.current_player
		if isinstance(session.current_question, PlaceholderQuestion):
			result = ScoreResult(points=0, correct=True, detail={'placeholder': True})
		else:
			result = self.scorer.score(session.current_question, answer)
		player.score += result.points
		session.questions_in_round += 1
		session.phase = Phase.FEEDBACK
		logger.debug(f"[Orchestrator] {player.name} scored {result.points} (total {player.score})")
		return [AnswerScored(player=player.name, result=result, total=player.score)]

	def _advance(self) -> List[Event]:
		session = self.session
		session.current_player_index = (session.current_player_index + 1) % len(session.players)
		if session.questions_in_round < session.questions_per_round_total:
			return self._issue_question()
		if session.round_index + 1 < len(session.rounds):
			return self._start_round(session.round_index + 1)
		session.phase = Phase.FINISHED
		session.current_question = None
		ranking = self.final_ranking()
		logger.info(f"[Orchestrator] Game over | {[(p.name, p.score) for p in ranking]}")
		return [GameFinished(ranking=ranking)]
