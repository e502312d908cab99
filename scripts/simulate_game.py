"""
Play a scripted game against the CSV tables and log every event.

This script:
1) Loads actors/productions/roles/genres from data/ (or CINEQUIZ_DATA_DIR)
2) Builds the filter context from the release years found
3) Plays every round with answers drawn at random
4) Logs how many questions could not be generated

Usage:
	python -m scripts.simulate_game [players...] [--seed N] [--rounds classic]

Useful for checking that a dataset is rich enough for every round type.
"""

import argparse  # command line options
import os  # data directory override
import random  # answer picking and seeding
from pathlib import Path  # filesystem-safe paths

from loguru import logger  # console logging

from cinequiz.data_loader import DataLoader  # data ingestion
from cinequiz.filters import FilterContext  # year/genre/franchise constraints
from cinequiz.models import MultipleChoiceQuestion, OrderingQuestion, SliderQuestion
from cinequiz.session import (
	ROUND_SETS,
	AnswerScored,
	AnswerSubmitted,
	GameFinished,
	GameOrchestrator,
	GenerationFailed,
	NextRequested,
	QuestionIssued,
	RoundStarted,
)


def random_answer(question, rng: random.Random):
	"""Pick a plausible answer for any question type."""
	if isinstance(question, MultipleChoiceQuestion):
		return rng.randrange(len(question.choices))
	if isinstance(question, SliderQuestion):
		return rng.randint(question.min_value, question.max_value)
	if isinstance(question, OrderingQuestion):
		order = list(question.drag_order)
		rng.shuffle(order)
		return order
	return None  # placeholder


def main():
	parser = argparse.ArgumentParser(description="Simulate a CineQuiz game")
	parser.add_argument('players', nargs='*', default=['Alice', 'Bob'])
	parser.add_argument('--seed', type=int, default=None)
	parser.add_argument('--rounds', choices=sorted(ROUND_SETS), default='default')
	parser.add_argument('--questions-per-round', type=int, default=1)
	args = parser.parse_args()

	# Headline banner for visibility in console
	logger.info("=" * 60)
	logger.info("CineQuiz game simulation")
	logger.info("=" * 60)

	root = Path(__file__).resolve().parents[1]  # project root
	data_dir = Path(os.getenv('CINEQUIZ_DATA_DIR', root / 'data'))  # input tables

	# 1) Load data
	logger.info("[1/3] Loading tables...")
	dataset = DataLoader().load_dataset(str(data_dir))
	logger.info(f"[OK] {len(dataset.roles)} roles ready")

	# 2) Filters
	filters = FilterContext.for_productions(dataset.productions)
	logger.info(f"[2/3] Year bounds {filters.absolute_min}-{filters.absolute_max}")

	# 3) Play
	logger.info("[3/3] Playing...")
	rng = random.Random(args.seed)
	game = GameOrchestrator(
		dataset, filters,
		rounds=ROUND_SETS[args.rounds],
		questions_per_round=args.questions_per_round,
		rng=random.Random(args.seed),
	)
	events = game.setup(args.players)
	failures = 0
	finished = False
	while not finished:
		for event in events:
			if isinstance(event, RoundStarted):
				logger.info(f"--- Round {event.round.number}/{event.total_rounds}: {event.round.title} ({event.round.points} pts)")
			elif isinstance(event, GenerationFailed):
				failures += 1
				logger.warning(f"Round {event.round_number}: {event.reason}")
			elif isinstance(event, QuestionIssued):
				logger.info(f"{event.player}: {event.question.prompt}")
			elif isinstance(event, AnswerScored):
				logger.info(f"  -> +{event.result.points} (total {event.total})")
			elif isinstance(event, GameFinished):
				finished = True
				for i, player in enumerate(event.ranking, start=1):
					logger.info(f"{i}. {player.name}: {player.score}")
		if finished:
			break
		question = game.session.current_question
		if game.session.phase.value == 'question':
			events = game.handle(AnswerSubmitted(random_answer(question, rng)))
		else:
			events = game.handle(NextRequested())

	# Footer
	logger.info(f"Done. {failures} placeholder question(s) issued.")
	logger.info("=" * 60)


if __name__ == '__main__':
	main()  # invoke simulation
