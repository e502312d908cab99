"""
Tests for CSV ingestion and value normalization.
"""

from datetime import date

import pytest

from cinequiz.data_loader import DataLoader


def test_sample_tables_load(sample_dataset):
	assert len(sample_dataset.actors) == 15
	assert len(sample_dataset.productions) == 14
	assert len(sample_dataset.roles) == 46
	assert len(sample_dataset.genres) == 10


def test_parsed_values(sample_dataset):
	stone = sample_dataset.production('tt0241527')
	assert stone.franchise == 'Harry Potter'
	assert stone.genre_ids == ('12', '14', '10751')
	assert stone.production_start == date(2000, 10, 2)
	assert stone.release_year == 2001
	assert stone.box_office == 317575550
	assert stone.rating == 7.6
	assert stone.poster is None

	radcliffe = next(a for a in sample_dataset.actors if a.name == 'Daniel Radcliffe')
	assert radcliffe.birthday == date(1989, 7, 23)


def test_placeholder_values_become_none(sample_dataset):
	untitled = sample_dataset.production('tt0000001')
	assert untitled.release_date is None
	assert untitled.production_start is None
	assert untitled.box_office is None
	assert untitled.rating is None
	assert untitled.genre_ids == ()


@pytest.mark.parametrize('raw, expected', [
	('$1,234,567', 1234567),
	('N/A', None),
	('', None),
	(None, None),
])
def test_parse_currency(raw, expected):
	assert DataLoader().parse_currency(raw) == expected


@pytest.mark.parametrize('raw, expected', [('7.8', 7.8), ('7.8/10', 7.8), ('0', None), ('11', None), ('n/a', None)])
def test_parse_rating(raw, expected):
	assert DataLoader().parse_rating(raw) == expected


def test_parse_date():
	loader = DataLoader()
	assert loader.parse_date('1999-03-31') == date(1999, 3, 31)
	assert loader.parse_date('1999-03-31T00:00:00') == date(1999, 3, 31)
	assert loader.parse_date('March 1999') is None


def test_malformed_rows_are_skipped(tmp_path):
	(tmp_path / 'actors.csv').write_text(
		'\ufeff"imdb_id","name","birthday (YYYY-MM-DD)"\n'
		'"nm1","Good Row","1980-01-01"\n'
		'"nm2","Too","Many","Fields"\n'
		'\n'
		'"nm3","No Birthday","N/A"\n',
		encoding='utf-8',
	)
	actors = DataLoader().load_actors(tmp_path / 'actors.csv')
	assert [a.imdb_id for a in actors] == ['nm1', 'nm3']
	assert actors[1].birthday is None


def test_missing_file_raises(tmp_path):
	with pytest.raises(FileNotFoundError):
		DataLoader().load_dataset(str(tmp_path))


def test_genres_file_is_optional(tmp_path):
	(tmp_path / 'actors.csv').write_text('imdb_id,name,birthday\nnm1,A,1980-01-01\n')
	(tmp_path / 'productions.csv').write_text('imdb_id,title,genre_ids,release_date\ntt1,Film,99,2001-01-01\n')
	(tmp_path / 'roles.csv').write_text(
		'actor_imdb_id,actor_name,production_imdb_id,production_title,character\nnm1,A,tt1,Film,Hero\n'
	)
	dataset = DataLoader().load_dataset(str(tmp_path))
	assert dataset.genres == []
	assert dataset.actors[0].birthday == date(1980, 1, 1)

	major, minor = DataLoader().classify_genres(dataset)
	assert major == []
	assert [(g.id, g.name) for g in minor] == [('99', '99')]


def test_classify_genres(sample_dataset):
	loader = DataLoader()
	loader.MAJOR_GENRE_THRESHOLD = 8
	major, minor = loader.classify_genres(sample_dataset)
	assert [g.name for g in major] == ['Adventure']
	assert 'Science Fiction' in [g.name for g in minor]
