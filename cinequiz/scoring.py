"""
Scoring module.
Turns a submitted answer into points, one rule per question archetype:
- multiple choice: all or nothing
- slider: banded by distance from the correct value
- ordering: positional matches minus the swaps needed to fix the order
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from .models import (
	MultipleChoiceQuestion,
	OrderingQuestion,
	PlaceholderQuestion,
	Question,
	SliderQuestion,
)

# distance -> share of the question's points
SLIDER_BANDS: Dict[int, float] = {0: 1.0, 1: 0.7, 2: 0.3}


@dataclass
class ScoreResult:
	points: int
	correct: bool
	detail: Dict[str, Any] = field(default_factory=dict)


def score_slider(submitted: int, correct: int, points: int = 10) -> int:
	"""Full points for an exact hit, 70% one off, 30% two off, nothing beyond."""
	share = SLIDER_BANDS.get(abs(int(submitted) - int(correct)), 0.0)
	return int(round(points * share))


def count_inversions(submitted: Sequence[str], correct: Sequence[str]) -> int:
	"""Adjacent swaps needed to turn `submitted` into `correct` (bubble-sort inversion count)."""
	rank = {item: i for i, item in enumerate(correct)}
	positions: List[int] = [rank[item] for item in submitted]
	swaps = 0
	for i in range(len(positions)):
		for j in range(i + 1, len(positions)):
			if positions[i] > positions[j]:
				swaps += 1
	return swaps


def score_ordering(submitted: Sequence[str], correct: Sequence[str]) -> Dict[str, int]:
	"""
	Score a drag-to-order answer.
	Returns the positional matches, the swap count and the floored score
	`correct_answers * 2 - swaps + 2`.
	"""
	if sorted(submitted) != sorted(correct):
		raise ValueError(f"Submitted order {list(submitted)} is not a permutation of {list(correct)}")
	correct_answers = sum(1 for a, b in zip(submitted, correct) if a == b)
	swaps = count_inversions(submitted, correct)
	return {
		'correct_answers': correct_answers,
		'swaps': swaps,
		'score': max(0, correct_answers * 2 - swaps + 2),
	}


class Scorer:
	"""Dispatches an answer to the rule matching the question's archetype."""

	def score(self, question: Question, answer: Any) -> ScoreResult:
		if isinstance(question, MultipleChoiceQuestion):
			return self._score_choice(question, answer)
		if isinstance(question, SliderQuestion):
			return self._score_slider(question, answer)
		if isinstance(question, OrderingQuestion):
			return self._score_ordering(question, answer)
		if isinstance(question, PlaceholderQuestion):
			return ScoreResult(points=0, correct=True, detail={'placeholder': True})
		raise TypeError(f"Unsupported question type: {type(question).__name__}")

	def _score_choice(self, question: MultipleChoiceQuestion, answer: Any) -> ScoreResult:
		try:
			index = int(answer)
		except (TypeError, ValueError):
			raise ValueError(f"Choice answer must be an index, got {answer!r}")
		if not 0 <= index < len(question.choices):
			raise ValueError(f"Choice index {index} out of range 0..{len(question.choices) - 1}")
		correct = index == question.correct_index
		return ScoreResult(
			points=question.points if correct else 0,
			correct=correct,
			detail={'selected': index, 'correct_index': question.correct_index},
		)

	def _score_slider(self, question: SliderQuestion, answer: Any) -> ScoreResult:
		try:
			value = int(answer)
		except (TypeError, ValueError):
			raise ValueError(f"Slider answer must be an integer, got {answer!r}")
		points = score_slider(value, question.correct_value, question.points)
		return ScoreResult(
			points=points,
			correct=value == question.correct_value,
			detail={'difference': abs(value - question.correct_value), 'correct_value': question.correct_value},
		)

	def _score_ordering(self, question: OrderingQuestion, answer: Any) -> ScoreResult:
		if isinstance(answer, str) or not isinstance(answer, Sequence):
			raise ValueError(f"Ordering answer must be a list of item ids, got {answer!r}")
		result = score_ordering(list(answer), question.correct_order)
		return ScoreResult(
			points=result['score'],
			correct=result['swaps'] == 0,
			detail=result,
		)
