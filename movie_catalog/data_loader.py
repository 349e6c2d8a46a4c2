"""
Persistence of the movie record set.
Loads the full catalog from a JSON (array) or JSONL (one record per line) file and
writes it back atomically after every mutation.
"""

# Standard libs for JSON parsing, atomic file replacement, typing, and paths
import json  # read/write JSON
import os  # fsync + atomic replace
import tempfile  # sibling temp file for atomic writes
from pathlib import Path  # filesystem-safe paths
from typing import List, Sequence, Union

from pydantic import ValidationError as PydanticValidationError

# Import our Movie model used across the project
from .models import Movie  # structured movie record
from .errors import PersistenceFailure

# Console logging
from loguru import logger  # console logger


class MovieRepository:
	"""
	Load-all / save-all access to the catalog file.
	The format follows the suffix: `.jsonl` is one record per line, anything else a JSON array.
	"""

	def __init__(self, filepath: Union[str, Path], create_if_missing: bool = False):
		self.filepath = Path(filepath)  # normalize path
		self.create_if_missing = create_if_missing  # treat a missing file as an empty catalog
		self.is_jsonl = self.filepath.suffix.lower() == '.jsonl'

	def load_all(self) -> List[Movie]:
		"""
		Read every record from the file. Any problem, from a missing file to a single
		record failing the schema, raises PersistenceFailure: no partial catalog is returned.
		"""
		if not self.filepath.exists():
			if self.create_if_missing:
				logger.warning(f"[Repository] {self.filepath} not found, starting with an empty catalog")
				return []
			raise PersistenceFailure(f"Movie data file not found: {self.filepath}", path=str(self.filepath))

		logger.info(f"[Repository] Loading movies from {self.filepath}...")  # log action
		try:
			with open(self.filepath, 'r', encoding='utf-8') as f:
				raw_records = self._read_jsonl(f) if self.is_jsonl else self._read_json(f)
		except OSError as e:
			raise PersistenceFailure(f"Cannot read {self.filepath}: {e}", path=str(self.filepath)) from e

		movies = []
		for position, data in raw_records:
			try:
				movies.append(Movie.model_validate(data))  # dict -> Movie
			except PydanticValidationError as e:
				logger.error(f"[Repository] Invalid movie record at {position} in {self.filepath}")
				raise PersistenceFailure(
					f"Invalid movie record at {position} in {self.filepath}: {e}", path=str(self.filepath)
				) from e

		logger.info(f"[Repository] Successfully loaded {len(movies)} movies.")  # summary
		return movies

	def _read_json(self, f) -> List[tuple]:
		try:
			data = json.load(f)
		except json.JSONDecodeError as e:
			raise PersistenceFailure(f"Invalid JSON in {self.filepath}: {e}", path=str(self.filepath)) from e
		if not isinstance(data, list):
			raise PersistenceFailure(
				f"Expected a JSON array of movies in {self.filepath}, got {type(data).__name__}",
				path=str(self.filepath),
			)
		return [(f"index {i}", item) for i, item in enumerate(data)]

	def _read_jsonl(self, f) -> List[tuple]:
		records = []
		for line_num, line in enumerate(f, 1):  # keep track of line number for diagnostics
			if not line.strip():  # tolerate blank lines
				continue
			try:
				records.append((f"line {line_num}", json.loads(line)))
			except json.JSONDecodeError as e:
				raise PersistenceFailure(
					f"Invalid JSON at line {line_num} in {self.filepath}: {e}", path=str(self.filepath)
				) from e
		return records

	def save_all(self, movies: Sequence[Movie]) -> None:
		"""
		Write the whole record set. The data goes to a temp file in the same directory
		which then replaces the target, so readers only ever see a complete file.
		"""
		payload = [movie.to_dict() for movie in movies]
		if self.is_jsonl:
			text = ''.join(json.dumps(item, ensure_ascii=False) + '\n' for item in payload)
		else:
			text = json.dumps(payload, indent=2, ensure_ascii=False)

		tmp_path = None
		try:
			self.filepath.parent.mkdir(parents=True, exist_ok=True)
			fd, tmp_path = tempfile.mkstemp(dir=str(self.filepath.parent), prefix=f".{self.filepath.name}.", suffix='.tmp')
			with os.fdopen(fd, 'w', encoding='utf-8') as f:
				f.write(text)
				f.flush()
				os.fsync(f.fileno())
			os.replace(tmp_path, self.filepath)
		except OSError as e:
			logger.error(f"[Repository] Failed to save {len(payload)} movies to {self.filepath}: {e}")
			if tmp_path and os.path.exists(tmp_path):
				os.unlink(tmp_path)
			raise PersistenceFailure(f"Cannot write {self.filepath}: {e}", path=str(self.filepath)) from e

		logger.debug(f"[Repository] Saved {len(payload)} movies to {self.filepath}")


def get_all_genres(movies: Sequence[Movie]) -> List[str]:
	"""Return a sorted list of all unique genres in the dataset."""
	genres = set()  # unique genres
	for movie in movies:  # iterate
		genres.update(movie.genres)
	return sorted(genres)  # sorted output
