"""
FastAPI application for the movie catalog API.

Public routes handle registration and sessions; everything else requires
an access token. Operator tasks (indexes, seeding, promotion) are handled
via the movie_catalog CLI.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from api.auth import identity_from_request
from api.dependencies import get_db
from api.exceptions import (
    APIError,
    api_error_handler,
    catalog_error_handler,
    generic_exception_handler,
    request_validation_handler,
)
from api.logging_config import (
    logger,
    generate_request_id,
    set_request_id,
    set_user_id,
)
from movie_catalog.config import allowed_origins_from_env
from movie_catalog.errors import CatalogError, ContextMissingError

# Import routers
from api.routers import auth, genres, movies, recommendations, users


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Verify the store is reachable before serving; failure is fatal."""
    db = app.dependency_overrides.get(get_db, get_db)()
    try:
        db.ping()
    except CatalogError as e:
        logger.critical(f"Could not connect to the database: {e.message}")
        raise
    logger.info("Connected to MongoDB successfully")
    yield


# Create FastAPI app
app = FastAPI(
    title="Movie Catalog API",
    description="REST API for the movie catalog: users, movies, reviews and recommendations",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# Register exception handlers
app.add_exception_handler(APIError, api_error_handler)
app.add_exception_handler(CatalogError, catalog_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Add CORS middleware (must be done before app starts)
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins_from_env(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["Origin", "Content-Type", "Accept", "Authorization"],
    expose_headers=["Content-Length", "X-Request-ID"],
    max_age=12 * 3600,
)


@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    """Log all HTTP requests with timing and response status."""
    request_id = generate_request_id()
    set_request_id(request_id)
    set_user_id(None)

    # Skip logging for health checks and docs
    skip_paths = {"/health", "/", "/api/docs", "/api/redoc", "/api/openapi.json"}
    if request.url.path in skip_paths:
        return await call_next(request)

    start_time = time.time()
    client_ip = request.client.host if request.client else "unknown"

    logger.info(
        f"Request started: {request.method} {request.url.path} "
        f"from {client_ip}"
    )

    try:
        response = await call_next(request)
        duration_ms = (time.time() - start_time) * 1000

        try:
            set_user_id(identity_from_request(request).user_id)
        except ContextMissingError:
            pass  # public route or rejected before authentication

        log_msg = (
            f"Request completed: {request.method} {request.url.path} "
            f"status={response.status_code} duration={duration_ms:.2f}ms"
        )

        if response.status_code >= 500:
            logger.error(log_msg)
        elif response.status_code >= 400:
            logger.warning(log_msg)
        else:
            logger.info(log_msg)

        # Add request ID to response headers for debugging
        response.headers["X-Request-ID"] = request_id
        return response

    except Exception as e:
        duration_ms = (time.time() - start_time) * 1000
        logger.error(
            f"Request failed: {request.method} {request.url.path} "
            f"duration={duration_ms:.2f}ms error={str(e)}"
        )
        raise


# Mount routers
app.include_router(auth.router, prefix="/api/v1", tags=["Auth"])
app.include_router(users.router, prefix="/api/v1", tags=["Users"])
app.include_router(movies.router, prefix="/api/v1", tags=["Movies"])
app.include_router(genres.router, prefix="/api/v1", tags=["Genres"])
app.include_router(recommendations.router, prefix="/api/v1", tags=["Recommendations"])


@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint."""
    return {
        "message": "Movie Catalog API",
        "docs": "/api/docs",
    }


@app.get("/health", include_in_schema=False)
async def health():
    """Simple health check endpoint."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    from api.dependencies import get_config

    config = get_config()
    uvicorn.run("api.main:app", host=config.api_host, port=config.api_port, reload=config.api_debug)
