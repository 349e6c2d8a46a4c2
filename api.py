"""
FastAPI server exposing the movie catalog.
Endpoints:
- GET /health: basic health check
- GET /movies?sortBy=...&sortOrder=...&search=...&searchBy=...&filter=...&offset=0&limit=10
- GET /movies/{id}, POST /movies, PUT /movies, DELETE /movies/{id}
- GET /genres: every genre present in the catalog

Startup loads the catalog file; if it cannot be read the server does not start.
"""

# Import standard libraries for timing
import time  # measure startup and request latencies
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

# Import FastAPI for building the web API
from fastapi import Body, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError as PydanticValidationError

# Import our internal modules for persistence, storage, and queries
from movie_catalog.catalog import MovieCatalog
from movie_catalog.config import Settings, settings as default_settings
from movie_catalog.data_loader import MovieRepository, get_all_genres
from movie_catalog.errors import (
	CatalogError,
	MalformedFilter,
	MovieNotFoundError,
	PersistenceFailure,
	ValidationError,
)
from movie_catalog.filters import parse_filter
from movie_catalog.logging_config import setup_logging
from movie_catalog.models import MovieUpdate
from movie_catalog.store import MovieStore

# Import loguru for simple, structured console logging
from loguru import logger

# Error kind -> HTTP status
STATUS_BY_ERROR = {
	ValidationError: 400,
	MalformedFilter: 400,
	MovieNotFoundError: 404,
	PersistenceFailure: 500,
}


def _error_body(exc: CatalogError) -> Dict[str, Any]:
	body: Dict[str, Any] = {'detail': str(exc)}
	if isinstance(exc, ValidationError):
		body['errors'] = exc.errors  # field-level details
	return body


def _parse_id(raw: Any) -> int:
	try:
		return int(raw)
	except (TypeError, ValueError):
		raise HTTPException(status_code=400, detail="ID must be a number") from None


def create_app(settings: Optional[Settings] = None) -> FastAPI:
	"""Build the application; the catalog is loaded when the lifespan starts."""
	settings = settings or default_settings
	setup_logging(settings.log_level)

	repository = MovieRepository(settings.resolved_data_path(), create_if_missing=settings.create_if_missing)
	catalog = MovieCatalog(MovieStore(repository))

	@asynccontextmanager
	async def lifespan(app: FastAPI):
		"""Load the catalog before serving. A PersistenceFailure here aborts startup."""
		start = time.time()
		logger.info(f"[API] Startup: loading catalog from {repository.filepath}...")
		catalog.store.load()
		app.state.startup_seconds = time.time() - start
		logger.info(f"[API] Startup complete in {app.state.startup_seconds:.2f}s with {len(catalog.store)} movies.")
		yield

	app = FastAPI(title=settings.project_name, version=settings.api_version, lifespan=lifespan)
	app.add_middleware(CORSMiddleware, allow_origins=settings.cors_origins, allow_methods=["*"], allow_headers=["*"])
	app.state.catalog = catalog
	app.state.startup_seconds = 0.0

	@app.exception_handler(CatalogError)
	async def catalog_error_handler(request: Request, exc: CatalogError):
		status = STATUS_BY_ERROR.get(type(exc), 500)
		if status >= 500:
			logger.error(f"[API] {request.method} {request.url.path} failed: {exc}")
		else:
			logger.debug(f"[API] {request.method} {request.url.path} -> {status}: {exc}")
		return JSONResponse(status_code=status, content=_error_body(exc))

	@app.get("/health")
	async def health():
		"""Return minimal health info for liveness/readiness probes."""
		return {
			"status": "ok",
			"movies": len(catalog.store),
			"startup_seconds": round(app.state.startup_seconds, 2),
		}

	@app.get("/movies")
	def get_movies(
		sort_by: Optional[str] = Query(None, alias='sortBy', description="Field to sort by"),
		sort_order: Optional[str] = Query(None, alias='sortOrder', description="asc or desc"),
		search: Optional[str] = Query(None, description="Search value"),
		search_by: Optional[str] = Query(None, alias='searchBy', description="title or genres"),
		filter: Optional[List[str]] = Query(None, description="Genres to keep (repeatable or comma-separated)"),
		offset: Optional[int] = Query(None, description="Offset in result array for pagination"),
		limit: Optional[int] = Query(None, description="Limit amount of items in result array for pagination"),
	):
		"""Search, filter, sort and paginate the catalog."""
		start = time.time()
		movie_filter = parse_filter(
			sort_by=sort_by,
			sort_order=sort_order,
			search=search,
			search_by=search_by,
			filter=filter,
			offset=offset,
			limit=limit,
		)
		page = catalog.find_all(movie_filter)
		logger.info(
			f"[API] /movies served {len(page.data)} of {page.total_amount} in {(time.time() - start) * 1000:.2f} ms"
		)
		return page.to_dict()

	@app.get("/movies/{movie_id}")
	def get_movie(movie_id: str):
		movie_id = _parse_id(movie_id)
		movie = catalog.find_one(movie_id)
		if movie is None:
			raise MovieNotFoundError(movie_id)
		return movie.to_dict()

	@app.post("/movies", status_code=201)
	def create_movie(movie: Dict[str, Any] = Body(...)):
		catalog.create(movie)
		return {"detail": "created"}

	@app.put("/movies")
	def update_movie(movie: Dict[str, Any] = Body(...)):
		movie_id = _parse_id(movie.get('id'))
		try:
			patch = MovieUpdate.model_validate(movie).to_patch()
		except PydanticValidationError as e:
			raise ValidationError.from_pydantic(e) from e
		return catalog.update(movie_id, patch).to_dict()

	@app.delete("/movies/{movie_id}", status_code=204)
	def delete_movie(movie_id: str):
		movie_id = _parse_id(movie_id)
		if catalog.delete(movie_id) is None:
			raise MovieNotFoundError(movie_id)
		return Response(status_code=204)

	@app.get("/genres")
	def get_genres():
		return get_all_genres(catalog.store.snapshot())

	return app


# Application instance for uvicorn: `uvicorn api:app`
app = create_app()
