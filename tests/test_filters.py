"""
Unit tests for FilterContext and UsedMemory.
"""

from datetime import date

from cinequiz.filters import DEFAULT_YEAR_BOUNDS, FilterContext, UsedMemory, derive_year_bounds
from cinequiz.models import Production, QuestionKey


def production(year, genres=(), franchise=''):
	return Production(
		imdb_id=f"tt{year}",
		title=str(year),
		release_date=date(year, 1, 1) if year else None,
		genre_ids=tuple(genres),
		franchise=franchise,
	)


def test_derive_year_bounds():
	assert derive_year_bounds([production(1999), production(2005), production(None)]) == (1999, 2005)


def test_derive_year_bounds_default_when_no_years():
	assert derive_year_bounds([production(None)]) == DEFAULT_YEAR_BOUNDS
	assert derive_year_bounds([]) == DEFAULT_YEAR_BOUNDS


def test_range_is_clamped_and_ordered():
	ctx = FilterContext(1990, 2020, min_year=2030, max_year=1980)
	assert (ctx.min_year, ctx.max_year) == (1990, 2020)
	ctx.set_range(2015, 2001)
	assert (ctx.min_year, ctx.max_year) == (2001, 2015)
	assert ctx.baseline == (2001, 2015)


def test_defaults_to_absolute_bounds():
	ctx = FilterContext.for_productions([production(1995), production(2010)])
	assert (ctx.min_year, ctx.max_year) == (1995, 2010)
	assert ctx.at_absolute_bounds()


def test_matches_year_range_inclusive():
	ctx = FilterContext(1990, 2020, min_year=2000, max_year=2005)
	assert ctx.matches(production(2000))
	assert ctx.matches(production(2005))
	assert not ctx.matches(production(1999))
	assert not ctx.matches(production(None))


def test_matches_genres_any_of():
	ctx = FilterContext(1990, 2020, genres={'28', '35'})
	assert ctx.matches(production(2000, genres=['18', '35']))
	assert not ctx.matches(production(2000, genres=['18']))
	assert not ctx.matches(production(2000))


def test_matches_franchises_with_no_franchise_sentinel():
	ctx = FilterContext(1990, 2020, franchises={'Harry Potter'})
	assert ctx.matches(production(2000, franchise='Harry Potter'))
	assert not ctx.matches(production(2000))

	ctx = FilterContext(1990, 2020, franchises={''})
	assert ctx.matches(production(2000))
	assert not ctx.matches(production(2000, franchise='Harry Potter'))


def test_widen_clamps_and_stops():
	ctx = FilterContext(1990, 2000, min_year=1995, max_year=1995)
	assert ctx.widen(2)
	assert (ctx.min_year, ctx.max_year) == (1993, 1997)
	steps = 1
	while ctx.widen(2):
		steps += 1
	assert (ctx.min_year, ctx.max_year) == (1990, 2000)
	assert steps == 3
	assert not ctx.widen(2)


def test_reset_bounds_restores_baseline():
	ctx = FilterContext(1990, 2000, min_year=1995, max_year=1996)
	ctx.widen()
	ctx.widen_to_absolute()
	ctx.reset_bounds()
	assert (ctx.min_year, ctx.max_year) == (1995, 1996)


def test_used_memory_resets():
	used = UsedMemory()
	used.questions.add(QuestionKey('nm1', 'tt1', 'Hero'))
	used.franchises.add('Harry Potter')
	used.ranking_actors.add('nm1')

	used.reset_ranking()
	assert used.questions and not used.franchises and not used.ranking_actors

	used.reset()
	assert not used.questions


def test_question_keys_do_not_collide_on_delimiters():
	a = QuestionKey('nm1', 'tt1-x', 'Hero')
	b = QuestionKey('nm1-tt1', 'x', 'Hero')
	assert a != b
	assert len({a, b}) == 2
