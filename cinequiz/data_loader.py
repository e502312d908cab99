"""
Data loading and preprocessing module.
Handles loading actors, productions, roles and genres from CSV and
cleaning/normalizing the values.
"""

# Standard libs for CSV parsing, regex, dates, typing, and paths
import csv  # quoted, comma-separated tables
import re  # currency cleanup
from datetime import date  # ISO calendar dates
from typing import Dict, List, Optional, Tuple  # type hints
from pathlib import Path  # filesystem-safe paths

# Import our data classes used across the project
from .models import Actor, Dataset, Genre, Production, Role  # structured records

# Console logging
from loguru import logger  # console logger


class DataLoader:
	"""
	Handles loading and preprocessing of the quiz tables.
	"""

	# File names inside the data directory
	ACTORS_FILE = 'actors.csv'
	PRODUCTIONS_FILE = 'productions.csv'
	ROLES_FILE = 'roles.csv'
	GENRES_FILE = 'genres.csv'  # optional

	# Header names as written by the data-entry tooling
	ACTOR_BIRTHDAY_COLUMN = 'birthday (YYYY-MM-DD)'

	# Genres used by at least this many productions are "major" in the filter UI
	MAJOR_GENRE_THRESHOLD = 10

	# Placeholder values meaning "no data"
	MISSING_VALUES = {'', 'n/a', 'na', 'none', 'null'}

	def load_dataset(self, directory: str) -> Dataset:
		"""
		Load every table from a directory and join them into a Dataset.
		actors/productions/roles are required; genres.csv is optional.
		"""
		directory = Path(directory)  # normalize path
		logger.info(f"[DataLoader] Loading dataset from {directory}...")  # log action

		actors = self.load_actors(directory / self.ACTORS_FILE)
		productions = self.load_productions(directory / self.PRODUCTIONS_FILE)
		roles = self.load_roles(directory / self.ROLES_FILE)

		genres_path = directory / self.GENRES_FILE
		genres = self.load_genres(genres_path) if genres_path.exists() else []

		logger.info(
			f"[DataLoader] Loaded {len(actors)} actors, {len(productions)} productions, "
			f"{len(roles)} roles, {len(genres)} genres."
		)  # summary
		return Dataset(actors, productions, roles, genres)

	def _read_rows(self, filepath: Path) -> List[Dict[str, str]]:
		"""
		Read a CSV file into dicts keyed by trimmed header names.
		Rows whose field count does not match the header are skipped.
		"""
		filepath = Path(filepath)  # normalize path

		# Validate the file presence early to give clear error messages
		if not filepath.exists():
			raise FileNotFoundError(f"Data file not found: {filepath}")

		rows = []  # accumulator for parsed rows
		with open(filepath, 'r', encoding='utf-8-sig', newline='') as f:
			reader = csv.reader(f)
			header = next(reader, None)  # first row names the columns
			if header is None:
				logger.warning(f"[DataLoader] {filepath.name} is empty")  # nothing to parse
				return rows
			header = [h.strip() for h in header]  # tolerate padding (utf-8-sig drops any BOM)
			for line_num, values in enumerate(reader, 2):  # keep track of line number for diagnostics
				if not any(v.strip() for v in values):
					continue  # blank line
				if len(values) != len(header):
					logger.warning(
						f"[DataLoader] Skipping malformed row at {filepath.name}:{line_num} "
						f"({len(values)} fields, expected {len(header)})"
					)
					continue  # move on
				rows.append({h: v.strip() for h, v in zip(header, values)})
		return rows

	def load_actors(self, filepath: Path) -> List[Actor]:
		actors = []
		for row in self._read_rows(filepath):
			imdb_id = row.get('imdb_id', '')
			name = row.get('name', '')
			if not imdb_id or not name:
				continue  # identity is required
			birthday = self.parse_date(row.get(self.ACTOR_BIRTHDAY_COLUMN) or row.get('birthday'))
			actors.append(Actor(imdb_id=imdb_id, name=name, birthday=birthday))
		return actors

	def load_productions(self, filepath: Path) -> List[Production]:
		productions = []
		seen = set()  # ids are unique; first row wins
		for row in self._read_rows(filepath):
			imdb_id = row.get('imdb_id', '')
			if not imdb_id or imdb_id in seen:
				continue
			seen.add(imdb_id)
			productions.append(Production(
				imdb_id=imdb_id,
				title=row.get('title', ''),
				type=row.get('type', ''),
				franchise=self._clean(row.get('franchise')),
				genre_ids=self.parse_genre_ids(row.get('genre_ids')),
				release_date=self.parse_date(row.get('release_date')),
				production_start=self.parse_date(row.get('production_start')),
				production_end=self.parse_date(row.get('production_end')),
				box_office=self.parse_currency(row.get('box_office_us') or row.get('box_office')),
				rating=self.parse_rating(row.get('imdb_rating') or row.get('rating')),
				poster=self._clean(row.get('poster')) or None,
			))
		return productions

	def load_roles(self, filepath: Path) -> List[Role]:
		roles = []
		for row in self._read_rows(filepath):
			actor_id = row.get('actor_imdb_id', '')
			production_id = row.get('production_imdb_id', '')
			if not actor_id or not production_id:
				continue  # dangling join row
			roles.append(Role(
				actor_id=actor_id,
				actor_name=row.get('actor_name', ''),
				production_id=production_id,
				production_title=row.get('production_title', ''),
				character=row.get('character', ''),
			))
		return roles

	def load_genres(self, filepath: Path) -> List[Genre]:
		return [
			Genre(id=row['id'], name=row.get('name', ''))
			for row in self._read_rows(filepath)
			if row.get('id')
		]

	def _clean(self, value: Optional[str]) -> str:
		"""Trim and map placeholder values ("N/A", "") to an empty string."""
		if value is None:
			return ''
		value = value.strip()
		return '' if value.lower() in self.MISSING_VALUES else value

	def parse_date(self, value: Optional[str]) -> Optional[date]:
		"""Parse an ISO YYYY-MM-DD date; anything else becomes None."""
		value = self._clean(value)
		if not value:
			return None
		try:
			return date.fromisoformat(value[:10])
		except ValueError:
			logger.debug(f"[DataLoader] Unparseable date '{value}'")
			return None

	def parse_currency(self, value: Optional[str]) -> Optional[int]:
		"""'$1,234,567' -> 1234567; 'N/A' or junk -> None."""
		value = self._clean(value)
		digits = re.sub(r'[^\d.]', '', value)  # drop currency symbols and separators
		if not digits:
			return None
		try:
			return int(float(digits))
		except ValueError:
			return None

	def parse_rating(self, value: Optional[str]) -> Optional[float]:
		"""Critic rating on the 1-10 scale; out-of-range or missing -> None."""
		value = self._clean(value)
		if not value:
			return None
		try:
			rating = float(value.split('/')[0])  # tolerate "7.8/10"
		except ValueError:
			return None
		return rating if 0 < rating <= 10 else None

	def parse_genre_ids(self, value: Optional[str]) -> Tuple[str, ...]:
		"""Pipe-separated genre ids -> tuple of clean ids."""
		value = self._clean(value)
		return tuple(g.strip() for g in value.split('|') if g.strip())

	def classify_genres(self, dataset: Dataset) -> Tuple[List[Genre], List[Genre]]:
		"""
		Split genres into (major, minor) by how many productions use them.
		Genres referenced by productions but absent from genres.csv are named by id.
		"""
		counts: Dict[str, int] = {}
		for production in dataset.productions:
			for gid in production.genre_ids:
				counts[gid] = counts.get(gid, 0) + 1

		known = {g.id: g for g in dataset.genres}
		for gid in counts:
			known.setdefault(gid, Genre(id=gid, name=gid))

		major, minor = [], []
		for genre in sorted(known.values(), key=lambda g: g.name.lower()):
			if counts.get(genre.id, 0) >= self.MAJOR_GENRE_THRESHOLD:
				major.append(genre)
			else:
				minor.append(genre)
		return major, minor
