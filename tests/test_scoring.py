"""
Tests for the scoring rules.
"""

import pytest

from cinequiz.models import (
	ChoiceItem,
	MultipleChoiceQuestion,
	OrderingQuestion,
	OrderItem,
	SliderQuestion,
)
from cinequiz.question_generator import placeholder_question
from cinequiz.scoring import Scorer, count_inversions, score_ordering, score_slider

CORRECT = ['a', 'b', 'c', 'd']


@pytest.mark.parametrize('submitted, expected', [(40, 10), (41, 7), (38, 3), (43, 0), (20, 0)])
def test_slider_bands(submitted, expected):
	assert score_slider(submitted, 40, 10) == expected


def test_count_inversions():
	assert count_inversions(CORRECT, CORRECT) == 0
	assert count_inversions(['b', 'a', 'c', 'd'], CORRECT) == 1
	assert count_inversions(['d', 'c', 'b', 'a'], CORRECT) == 6


def test_exact_order_scores_ten():
	assert score_ordering(CORRECT, CORRECT) == {'correct_answers': 4, 'swaps': 0, 'score': 10}


def test_one_adjacent_swap():
	result = score_ordering(['b', 'a', 'c', 'd'], CORRECT)
	assert result == {'correct_answers': 2, 'swaps': 1, 'score': 5}


def test_reversed_order_floors_at_zero():
	assert score_ordering(['d', 'c', 'b', 'a'], CORRECT)['score'] == 0


def test_ordering_rejects_non_permutations():
	with pytest.raises(ValueError):
		score_ordering(['a', 'b', 'c'], CORRECT)
	with pytest.raises(ValueError):
		score_ordering(['a', 'a', 'b', 'c'], CORRECT)


@pytest.fixture
def choice_question():
	return MultipleChoiceQuestion(
		prompt='Who?',
		choices=[ChoiceItem(label=name) for name in ('W', 'X', 'Y', 'Z')],
		correct_index=2,
		points=3,
	)


def test_choice_scoring(choice_question):
	scorer = Scorer()
	right = scorer.score(choice_question, 2)
	assert (right.points, right.correct) == (3, True)
	wrong = scorer.score(choice_question, '0')
	assert (wrong.points, wrong.correct) == (0, False)


@pytest.mark.parametrize('answer', [4, -1, 'x', None])
def test_choice_rejects_bad_answers(choice_question, answer):
	with pytest.raises(ValueError):
		Scorer().score(choice_question, answer)


def test_slider_question_scoring():
	question = SliderQuestion(prompt='How old?', correct_value=30, min_value=25, max_value=38, points=10)
	result = Scorer().score(question, 31)
	assert result.points == 7
	assert not result.correct
	assert result.detail['difference'] == 1


def test_ordering_question_scoring():
	items = [OrderItem(id=i, label=i.upper(), value=n, display=str(n)) for n, i in enumerate(CORRECT)]
	question = OrderingQuestion(
		prompt='Order',
		items=items,
		drag_order=list(reversed(CORRECT)),
		targets=[i.display for i in items],
		correct_order=CORRECT,
		points=10,
		metric='rating',
	)
	scorer = Scorer()
	assert scorer.score(question, CORRECT).correct
	assert scorer.score(question, ('b', 'a', 'c', 'd')).points == 5
	with pytest.raises(ValueError):
		scorer.score(question, 'abcd')


def test_placeholder_scores_nothing():
	result = Scorer().score(placeholder_question(), None)
	assert result.points == 0


def test_unknown_question_type():
	with pytest.raises(TypeError):
		Scorer().score(object(), 1)
