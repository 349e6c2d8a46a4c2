"""
Shared fixtures: sample movies, an in-memory repository that records saves, and a loaded store.
"""

import json

import pytest

from movie_catalog.errors import PersistenceFailure
from movie_catalog.models import Movie
from movie_catalog.store import MovieStore


def movie_dict(**overrides):
	data = {
		'title': 'Untitled',
		'release_date': '2020-01-01',
		'poster_path': 'https://image.tmdb.org/t/p/w500/poster.jpg',
		'overview': 'An overview.',
		'runtime': 100,
		'genres': ['Drama'],
	}
	data.update(overrides)
	return data


class RecordingRepository:
	"""load_all/save_all collaborator kept in memory; can be told to fail on save."""

	def __init__(self, movies=None):
		self.movies = list(movies or [])
		self.saves = []  # one entry (list of Movie) per save_all call
		self.fail_on_save = False

	def load_all(self):
		return list(self.movies)

	def save_all(self, movies):
		if self.fail_on_save:
			raise PersistenceFailure('disk full')
		self.saves.append(list(movies))
		self.movies = list(movies)


@pytest.fixture
def make_movie():
	"""Factory for valid Movie records; keyword arguments override the defaults."""
	def _make(**overrides):
		return Movie.model_validate(movie_dict(**overrides))
	return _make


@pytest.fixture
def sample_movies(make_movie):
	return [
		make_movie(id=1, title='La La Land', genres=['Drama', 'Comedy'], runtime=128, budget=30000000),
		make_movie(id=2, title='Whiplash', genres=['Drama'], runtime=105, budget=3300000),
	]


@pytest.fixture
def repository(sample_movies):
	return RecordingRepository(sample_movies)


@pytest.fixture
def store(repository):
	movie_store = MovieStore(repository)
	movie_store.load()
	return movie_store


@pytest.fixture
def catalog_file(tmp_path, sample_movies):
	"""A JSON catalog file holding the sample movies."""
	path = tmp_path / 'movies.json'
	path.write_text(json.dumps([m.to_dict() for m in sample_movies], indent=2), encoding='utf-8')
	return path
