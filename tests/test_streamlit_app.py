"""
Tests for the Streamlit page, driven through streamlit's AppTest harness.
"""

import random

from conftest import DATA_DIR, ROOT
from streamlit.testing.v1 import AppTest

from cinequiz.models import Archetype, OrderingQuestion, RoundSpec
from cinequiz.session import GameOrchestrator, NextRequested, Phase

APP = str(ROOT / 'streamlit_app.py')


def ranking_game(sample_dataset, sample_filters):
	game = GameOrchestrator(sample_dataset, sample_filters, rounds=[RoundSpec(1, Archetype.RANKING, 10)], rng=random.Random(3))
	game.setup(['Ann'])
	game.handle(NextRequested())
	return game


def test_rejected_answer_warning_survives_rerun(sample_dataset, sample_filters, monkeypatch):
	monkeypatch.setenv('CINEQUIZ_DATA_DIR', str(DATA_DIR))
	game = ranking_game(sample_dataset, sample_filters)
	question = game.session.current_question
	assert isinstance(question, OrderingQuestion)

	at = AppTest.from_file(APP, default_timeout=30)
	at.session_state['game'] = game
	at.run()
	assert not at.warning

	# the same item in the first two positions
	at.selectbox[1].set_value(question.drag_order[0])
	next(b for b in at.button if b.label == 'Submit').click()
	at.run()

	assert game.session.phase == Phase.QUESTION
	assert at.warning
	assert 'permutation' in at.warning[0].value


def test_start_page_without_game(monkeypatch):
	monkeypatch.setenv('CINEQUIZ_DATA_DIR', str(DATA_DIR))
	at = AppTest.from_file(APP, default_timeout=30)
	at.run()
	assert not at.exception
	assert 'start a game' in at.info[0].value
