"""
Movie store module.
Owns the authoritative in-memory record set and keeps the persisted copy in step with it.
"""

import threading  # single mutation boundary
import time  # id generation
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from .errors import MovieNotFoundError, PersistenceFailure, ValidationError
from .models import Movie, MovieCreate

from loguru import logger  # console logger


class MovieStore:
	"""
	The record set plus its persistence collaborator.

	`repository` only needs `load_all()` and `save_all(movies)`. Every mutation runs under
	one lock and is not reported as done until `save_all` has returned; if the save
	fails the in-memory record set is restored to what it was before the mutation.
	"""

	def __init__(self, repository):
		self.repository = repository  # load_all / save_all collaborator
		self._movies: List[Movie] = []  # canonical record set
		self._lock = threading.RLock()  # guards _movies and the save that follows a change
		self._last_id = 0  # highest id handed out or loaded

	def __len__(self) -> int:
		with self._lock:
			return len(self._movies)

	def load(self) -> None:
		"""Replace the record set with the persisted one. PersistenceFailure propagates."""
		movies = self.repository.load_all()
		with self._lock:
			self._movies = list(movies)
			self._last_id = max((m.id for m in self._movies), default=0)
		logger.info(f"[Store] Loaded {len(movies)} movies")

	def snapshot(self) -> Tuple[Movie, ...]:
		"""Read-only copy of all records. Records are frozen, so the copy cannot change later."""
		with self._lock:
			return tuple(self._movies)

	def find_by_id(self, movie_id: int) -> Optional[Movie]:
		"""Return the record with this id, or None."""
		with self._lock:
			return next((m for m in self._movies if m.id == movie_id), None)

	def create(self, data: Mapping[str, Any]) -> None:
		"""
		Validate `data`, assign a fresh id, append, and persist.
		Any id in `data` is ignored. Raises ValidationError before anything is changed.
		"""
		try:
			payload = MovieCreate.model_validate(dict(data))
		except PydanticValidationError as e:
			logger.warning(f"[Store] Rejected movie payload: {len(e.errors())} validation error(s)")
			raise ValidationError.from_pydantic(e) from e

		with self._lock:
			movie = Movie(id=self._next_id(), **payload.model_dump())
			self._commit(self._movies + [movie])
		logger.info(f"[Store] Created movie {movie.id} '{movie.title}'")

	def update(self, movie_id: int, patch: Mapping[str, Any]) -> Movie:
		"""
		Shallow-merge `patch` onto the record and persist. Unknown keys and `id` are dropped.
		Raises MovieNotFoundError if the id is unknown, ValidationError if the merged
		record no longer fits the schema (e.g. a required field set to None).
		"""
		changes = self._clean_patch(patch)
		with self._lock:
			index = self._index_of(movie_id)
			if index is None:
				raise MovieNotFoundError(movie_id)
			current = self._movies[index]
			try:
				updated = Movie.model_validate({**current.model_dump(), **changes})
			except PydanticValidationError as e:
				logger.warning(f"[Store] Rejected update of movie {movie_id}: {len(e.errors())} validation error(s)")
				raise ValidationError.from_pydantic(e) from e
			movies = list(self._movies)
			movies[index] = updated
			self._commit(movies)
		logger.info(f"[Store] Updated movie {movie_id} ({', '.join(sorted(changes)) or 'no fields'})")
		return updated

	def delete(self, movie_id: int) -> Optional[Movie]:
		"""Remove the record and persist. Returns the removed record, or None if absent."""
		with self._lock:
			index = self._index_of(movie_id)
			if index is None:
				return None
			removed = self._movies[index]
			self._commit(self._movies[:index] + self._movies[index + 1:])
		logger.info(f"[Store] Deleted movie {movie_id}")
		return removed

	def _commit(self, movies: List[Movie]) -> None:
		# caller holds the lock
		previous = self._movies
		self._movies = movies
		try:
			self.repository.save_all(movies)
		except Exception as e:
			self._movies = previous
			logger.error(f"[Store] Save failed, rolled back to {len(previous)} movies: {e}")
			if isinstance(e, PersistenceFailure):
				raise
			raise PersistenceFailure(f"Cannot save movies: {e}") from e

	def _index_of(self, movie_id: int) -> Optional[int]:
		for i, movie in enumerate(self._movies):
			if movie.id == movie_id:
				return i
		return None

	def _next_id(self) -> int:
		# epoch milliseconds, bumped past the highest id seen so it never repeats
		new_id = max(int(time.time() * 1000), self._last_id + 1)
		self._last_id = new_id
		return new_id

	@staticmethod
	def _clean_patch(patch: Mapping[str, Any]) -> Dict[str, Any]:
		return {k: v for k, v in patch.items() if k in Movie.model_fields and k != 'id'}
