"""
Error kinds raised by the catalog core.
They propagate unchanged up to the transport layer, which maps them to status codes.
"""

from typing import Any, Dict, List, Optional


class CatalogError(Exception):
	"""Base class for every error raised by the catalog."""


class ValidationError(CatalogError):
	"""
	A movie payload failed schema validation.
	`errors` holds one entry per offending field: {"field": ..., "message": ...}.
	"""

	def __init__(self, errors: List[Dict[str, Any]]):
		self.errors = errors  # field-level details
		fields = ', '.join(e['field'] for e in errors) or 'unknown'
		super().__init__(f"Validation failed for field(s): {fields}")

	@classmethod
	def from_pydantic(cls, exc) -> 'ValidationError':
		"""Build from a pydantic.ValidationError, flattening each error location to a dotted field name."""
		errors = [
			{
				'field': '.'.join(str(part) for part in err.get('loc', ())),
				'message': err.get('msg', ''),
			}
			for err in exc.errors()
		]
		return cls(errors)


class MovieNotFoundError(CatalogError):
	"""No record with the given id exists."""

	def __init__(self, movie_id: int):
		self.movie_id = movie_id
		super().__init__(f"Movie with ID {movie_id} not found")


class MalformedFilter(CatalogError):
	"""A query filter holds a value outside its allowed range or set."""

	def __init__(self, field: str, message: str):
		self.field = field
		super().__init__(f"Invalid '{field}': {message}")


class PersistenceFailure(CatalogError):
	"""The persistence collaborator could not load or save the record set."""

	def __init__(self, message: str, path: Optional[str] = None):
		self.path = path
		super().__init__(message)
