"""
Logging setup for the catalog service.

``setup_logging`` swaps loguru's default sink for one at the configured level,
optionally adding a file sink. Repeated calls are ignored.
"""

import sys
from typing import Optional

from loguru import logger

_configured = False


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
	"""Configure loguru sinks once.

	Parameters
	----------
	level : str
		Level name (e.g. ``"DEBUG"``, ``"INFO"``). Case insensitive.
	logfile : Optional[str]
		Path of a file to log to as well. Omitted means console only.
	"""
	global _configured
	if _configured:
		return

	level = level.upper()
	logger.remove()
	logger.add(sys.stderr, level=level)
	if logfile:
		logger.add(logfile, level=level, encoding="utf-8")
	_configured = True
