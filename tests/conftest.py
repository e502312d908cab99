"""
Shared fixtures: the sample CSV dataset under data/ and small hand-built datasets.
"""

import random
import sys
from datetime import date
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

from cinequiz.data_loader import DataLoader
from cinequiz.filters import FilterContext
from cinequiz.models import Actor, Dataset, Production, Role

DATA_DIR = ROOT / 'data'


class FixedCoin(random.Random):
	"""Seeded Random whose coin flips always land the same way (shuffles stay random)."""

	def __init__(self, value: float, seed: int = 7):
		super().__init__(seed)
		self.value = value

	def random(self):
		return self.value

	def getrandbits(self, k):
		# integer draws (shuffle, choice, randint) keep using the seeded stream
		return super().getrandbits(k)


def make_production(imdb_id, title=None, year=2011, start=None, **kwargs):
	return Production(
		imdb_id=imdb_id,
		title=title or imdb_id,
		release_date=date(year, 6, 1) if year else None,
		production_start=start,
		**kwargs,
	)


def cast_dataset(production, cast):
	"""Dataset with one production; cast is a list of (actor_id, name, birthday, character)."""
	actors = [Actor(imdb_id=a, name=n, birthday=b) for a, n, b, _ in cast]
	roles = [Role(a, n, production.imdb_id, production.title, c) for a, n, _, c in cast]
	return Dataset(actors, [production], roles)


@pytest.fixture
def rng():
	return random.Random(1234)


@pytest.fixture(scope='session')
def sample_dataset():
	return DataLoader().load_dataset(str(DATA_DIR))


@pytest.fixture
def sample_filters(sample_dataset):
	return FilterContext.for_productions(sample_dataset.productions)


@pytest.fixture
def ensemble():
	"""
	One production whose filming started 2010-01-01.
	Ages at that date: A 30, B 25, C 29, D 20, E 50, F 40.
	"""
	production = make_production('tt100', 'The Ensemble', year=2011, start=date(2010, 1, 1))
	return cast_dataset(production, [
		('nm1', 'Actor A', date(1980, 1, 1), 'Lead'),
		('nm2', 'Actor B', date(1985, 1, 1), 'Sidekick'),
		('nm3', 'Actor C', date(1980, 6, 1), 'Rival'),
		('nm4', 'Actor D', date(1990, 1, 1), 'Kid'),
		('nm5', 'Actor E', date(1960, 1, 1), 'Mentor'),
		('nm6', 'Actor F', date(1970, 1, 1), 'Villain'),
	])
