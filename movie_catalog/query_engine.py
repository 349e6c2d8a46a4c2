"""
Query engine module.
Runs the read pipeline over a snapshot of the catalog:
search -> genre filter -> sort -> count -> paginate.
"""

from typing import List, Optional, Sequence

# Import project modules for data structures and filter rules
from .models import Movie, MovieFilter, Page  # core data classes
from .filters import SORT_ACCESSORS, validate_filter

# Import loguru for console logging
from loguru import logger  # simple structured logger


class QueryEngine:
	"""
	Stateless query pipeline. The same records and filter always give the same Page.
	Stages run in a fixed order and each one only sees the previous stage's output.
	"""

	def apply(self, records: Sequence[Movie], movie_filter: MovieFilter) -> Page:
		"""Validate the filter, run every stage, and return the requested page."""
		validate_filter(movie_filter)  # reject before any stage runs

		movies = list(records)  # never reorder the caller's sequence
		movies = self.filter_by_search(movies, movie_filter.search, movie_filter.search_by)
		movies = self.filter_by_genre(movies, movie_filter.filter)
		movies = self.sort_by_field(movies, movie_filter.sort_by, movie_filter.sort_order)
		total_amount = len(movies)  # count before pagination
		page = self.paginate(movies, movie_filter.offset, movie_filter.limit)

		logger.debug(
			f"[Engine] {len(records)} records -> {total_amount} matches -> page of {len(page)} "
			f"(offset={movie_filter.offset}, limit={movie_filter.limit})"
		)
		return Page(data=page, total_amount=total_amount, offset=movie_filter.offset, limit=movie_filter.limit)

	def filter_by_search(self, movies: List[Movie], search: Optional[str], search_by: Optional[str]) -> List[Movie]:
		"""Case-insensitive substring match on the title or on any genre. Needs both arguments."""
		if not search or not search_by:
			return movies
		needle = search.lower()

		if search_by == 'title':
			return [m for m in movies if needle in m.title.lower()]
		if search_by == 'genres':
			return [m for m in movies if any(needle in genre.lower() for genre in m.genres)]
		return movies

	def filter_by_genre(self, movies: List[Movie], genres: Optional[List[str]]) -> List[Movie]:
		"""Keep movies having at least one of the requested genres (case-insensitive, exact name)."""
		if not genres:
			return movies
		wanted = {g.lower() for g in genres}
		return [m for m in movies if any(g.lower() in wanted for g in m.genres)]

	def sort_by_field(self, movies: List[Movie], sort_by: Optional[str], sort_order: str = 'asc') -> List[Movie]:
		"""
		Stable sort on one field. Records missing the field keep their relative order
		and go after the others in both directions.
		"""
		if not sort_by:
			return movies
		accessor = SORT_ACCESSORS[sort_by]

		present = [m for m in movies if accessor(m) is not None]
		missing = [m for m in movies if accessor(m) is None]
		present.sort(key=accessor, reverse=(sort_order == 'desc'))  # reverse=True stays stable
		return present + missing

	def paginate(self, movies: List[Movie], offset: int, limit: int) -> List[Movie]:
		"""Slice [offset, offset + limit); past-the-end offsets give an empty page."""
		return movies[offset:offset + limit]
