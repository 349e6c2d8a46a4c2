"""
Data models for the Movie Catalog.
Defines the movie record schema (validated with pydantic) and the query/result value objects.
"""

# Import dataclass for the plain value objects that need no validation
from dataclasses import dataclass, field  # auto-generates __init__, __repr__, etc.
# Import typing helpers for precise and self-documenting types
from typing import Any, Dict, List, Optional

# pydantic validates incoming payloads against the record schema
from pydantic import BaseModel, ConfigDict, HttpUrl, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

DEFAULT_OFFSET = 0
DEFAULT_LIMIT = 10

_HTTP_URL = TypeAdapter(HttpUrl)  # reused URL checker for poster_path


def split_comma_separated(value) -> List[str]:
	"""
	Normalize a value that may be None, a list, or a comma-separated string
	into a list of clean strings.
	"""
	if value is None:  # missing field
		return []
	if isinstance(value, (list, tuple, set)):  # already a collection
		# each item may itself be comma-separated, e.g. ?filter=Comedy,Action
		return [part.strip() for item in value if item is not None for part in str(item).split(',') if part.strip()]
	if isinstance(value, str):  # comma-separated string
		return [item.strip() for item in value.split(',') if item.strip()]
	return [str(value).strip()]  # scalar becomes a one-element list


def _check_url(value: Optional[str]) -> Optional[str]:
	if value is None:
		return value
	try:
		_HTTP_URL.validate_python(value)
	except PydanticValidationError:
		raise ValueError('must be a well-formed URL') from None
	return value  # keep the caller's spelling, pydantic would normalize it


class MovieCreate(BaseModel):
	"""
	Payload for creating a movie. Every field except the id, which the store assigns.
	Unknown keys are ignored.
	"""
	model_config = ConfigDict(extra='ignore')

	title: str  # human-readable title
	tagline: Optional[str] = None  # optional one-line pitch
	vote_average: Optional[float] = None  # average rating, 0..10
	vote_count: Optional[int] = None  # number of votes behind vote_average
	release_date: str  # ISO date, e.g. "2016-12-29"
	poster_path: str  # absolute URL of the poster image
	overview: str  # synopsis
	budget: Optional[int] = None  # production budget if known
	revenue: Optional[int] = None  # box-office revenue if known
	runtime: int  # duration in minutes
	genres: List[str]  # ordered genre names, e.g. ["Comedy", "Drama"]

	@field_validator('poster_path')
	@classmethod
	def _poster_path_is_url(cls, value: str) -> str:
		return _check_url(value)

	@field_validator('genres', mode='before')
	@classmethod
	def _split_genres(cls, value):
		# hand-edited data files sometimes carry "Comedy, Drama"
		if isinstance(value, str):
			return split_comma_separated(value)
		return value


class Movie(MovieCreate):
	"""
	A stored movie record. Frozen: updates replace the instance instead of mutating it,
	so references held by an earlier snapshot never change underneath the reader.
	"""
	model_config = ConfigDict(extra='ignore', frozen=True)

	id: int  # unique, assigned at creation and never changed

	def to_dict(self) -> Dict[str, Any]:
		"""Serialize with the id first, matching the layout of the data file."""
		data = self.model_dump()
		return {'id': data.pop('id'), **data}


class MovieUpdate(BaseModel):
	"""Partial payload for an update; only the fields actually sent are merged."""
	model_config = ConfigDict(extra='ignore')

	id: Optional[int] = None  # ignored by the merge
	title: Optional[str] = None
	tagline: Optional[str] = None
	vote_average: Optional[float] = None
	vote_count: Optional[int] = None
	release_date: Optional[str] = None
	poster_path: Optional[str] = None
	overview: Optional[str] = None
	budget: Optional[int] = None
	revenue: Optional[int] = None
	runtime: Optional[int] = None
	genres: Optional[List[str]] = None

	@field_validator('poster_path')
	@classmethod
	def _poster_path_is_url(cls, value: Optional[str]) -> Optional[str]:
		return _check_url(value)

	def to_patch(self) -> Dict[str, Any]:
		"""Return only the fields the client supplied."""
		return self.model_dump(exclude_unset=True)


@dataclass
class MovieFilter:
	"""
	One query request against the catalog.
	Offset and limit always hold the effective values, so they can be echoed back as-is.
	"""
	sort_by: Optional[str] = None  # field name to order by
	sort_order: str = 'asc'  # 'asc' or 'desc'
	search: Optional[str] = None  # substring to look for
	search_by: Optional[str] = None  # 'title' or 'genres'
	filter: Optional[List[str]] = None  # genre names, OR-matched
	offset: int = DEFAULT_OFFSET
	limit: int = DEFAULT_LIMIT


@dataclass
class Page:
	"""One page of query results plus the match count before pagination."""
	data: List[Movie] = field(default_factory=list)
	total_amount: int = 0
	offset: int = DEFAULT_OFFSET
	limit: int = DEFAULT_LIMIT

	def to_dict(self) -> Dict[str, Any]:
		return {
			'data': [movie.to_dict() for movie in self.data],
			'totalAmount': self.total_amount,
			'offset': self.offset,
			'limit': self.limit,
		}
