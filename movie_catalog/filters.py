"""
Query filter parsing.
Turns loosely-typed request parameters into a MovieFilter and rejects values
outside their allowed range or set before any pipeline stage runs.
"""

from typing import Any, Callable, Dict, Iterable, Optional, Union

from loguru import logger  # console logging

from .errors import MalformedFilter
from .models import DEFAULT_LIMIT, DEFAULT_OFFSET, Movie, MovieFilter, split_comma_separated

SORT_ORDERS = ('asc', 'desc')
SEARCH_FIELDS = ('title', 'genres')

# Sortable field name -> accessor. Genres are a list and have no natural order.
SORT_ACCESSORS: Dict[str, Callable[[Movie], Any]] = {
	'id': lambda m: m.id,
	'title': lambda m: m.title,
	'tagline': lambda m: m.tagline,
	'vote_average': lambda m: m.vote_average,
	'vote_count': lambda m: m.vote_count,
	'release_date': lambda m: m.release_date,
	'poster_path': lambda m: m.poster_path,
	'overview': lambda m: m.overview,
	'budget': lambda m: m.budget,
	'revenue': lambda m: m.revenue,
	'runtime': lambda m: m.runtime,
}


def parse_filter(
	sort_by: Optional[str] = None,
	sort_order: Optional[str] = None,
	search: Optional[str] = None,
	search_by: Optional[str] = None,
	filter: Union[str, Iterable[str], None] = None,
	offset: Optional[int] = None,
	limit: Optional[int] = None,
) -> MovieFilter:
	"""
	Build a validated MovieFilter from raw parameters.
	None means "not supplied" for every argument; defaults are filled in here.
	A genre filter may be a list, a single name, or a comma-separated string.
	"""
	genres = split_comma_separated(filter)  # list of genre names

	parsed = MovieFilter(
		sort_by=sort_by or None,
		sort_order=sort_order.lower() if sort_order else 'asc',
		search=search or None,  # empty string disables search
		search_by=search_by or None,
		filter=genres or None,
		offset=DEFAULT_OFFSET if offset is None else offset,
		limit=DEFAULT_LIMIT if limit is None else limit,
	)
	validate_filter(parsed)
	logger.debug(f"[Filter] Parsed {parsed}")
	return parsed


def validate_filter(movie_filter: MovieFilter) -> None:
	"""Raise MalformedFilter for the first value outside its allowed range or set."""
	if not isinstance(movie_filter.offset, int) or isinstance(movie_filter.offset, bool) or movie_filter.offset < 0:
		raise MalformedFilter('offset', f"must be a non-negative integer, got {movie_filter.offset!r}")
	if not isinstance(movie_filter.limit, int) or isinstance(movie_filter.limit, bool) or movie_filter.limit < 0:
		raise MalformedFilter('limit', f"must be a non-negative integer, got {movie_filter.limit!r}")
	if movie_filter.sort_order not in SORT_ORDERS:
		raise MalformedFilter('sortOrder', f"must be one of {', '.join(SORT_ORDERS)}, got {movie_filter.sort_order!r}")
	if movie_filter.search_by is not None and movie_filter.search_by not in SEARCH_FIELDS:
		raise MalformedFilter('searchBy', f"must be one of {', '.join(SEARCH_FIELDS)}, got {movie_filter.search_by!r}")
	if movie_filter.sort_by is not None and movie_filter.sort_by not in SORT_ACCESSORS:
		raise MalformedFilter('sortBy', f"unknown or non-sortable field {movie_filter.sort_by!r}")
