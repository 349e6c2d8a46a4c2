"""
Configuration read from environment variables.

Environment variables must be set before this module is imported, since the
module-level ``settings`` instance reads them once.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def _env_bool(name: str, default: str = "false") -> bool:
	return os.getenv(name, default).lower() in {"1", "true", "yes"}


def _env_list(name: str, default: str) -> List[str]:
	return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


@dataclass
class Settings:
	"""Application settings loaded from environment variables."""

	project_name: str = os.getenv("PROJECT_NAME", "Movie Catalog API")
	api_version: str = os.getenv("API_VERSION", "1.0.0")
	log_level: str = os.getenv("LOG_LEVEL", "INFO")

	# Catalog file; relative paths are resolved against the project root.
	# A ``.jsonl`` suffix switches to one-record-per-line format.
	data_path: str = os.getenv("CATALOG_DATA_PATH", "data/movies.json")

	# Start with an empty catalog instead of failing when the file is absent.
	create_if_missing: bool = _env_bool("CATALOG_CREATE_IF_MISSING")

	cors_origins: List[str] = field(
		default_factory=lambda: _env_list("CORS_ORIGINS", "http://localhost:3000")
	)

	def resolved_data_path(self) -> Path:
		path = Path(self.data_path)
		if path.is_absolute():
			return path
		return (PROJECT_ROOT / path).resolve()


settings = Settings()
