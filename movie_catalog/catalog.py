"""
High-level catalog API combining the store and the query engine.
"""

from typing import Any, Mapping, Optional

from .models import Movie, MovieFilter, Page
from .query_engine import QueryEngine
from .store import MovieStore


class MovieCatalog:
	"""Entry point used by the transport layer."""

	def __init__(self, store: MovieStore, engine: Optional[QueryEngine] = None):
		self.store = store
		self.engine = engine or QueryEngine()

	def find_all(self, movie_filter: MovieFilter) -> Page:
		"""Run a query against a snapshot taken now; later mutations are not visible to it."""
		return self.engine.apply(self.store.snapshot(), movie_filter)

	def find_one(self, movie_id: int) -> Optional[Movie]:
		return self.store.find_by_id(movie_id)

	def create(self, data: Mapping[str, Any]) -> None:
		self.store.create(data)

	def update(self, movie_id: int, patch: Mapping[str, Any]) -> Movie:
		return self.store.update(movie_id, patch)

	def delete(self, movie_id: int) -> Optional[Movie]:
		return self.store.delete(movie_id)
