"""Entry point for the update catalog service."""

import sqlite3
import time
import uuid
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from common.logging_config import setup_logging
from catalog.config import (
    BASKET_NOTIFY_SCOPE,
    CATALOG_HOST,
    CATALOG_PORT,
    METADATA_JSON_PATH,
    UPLOAD_DIR,
    UPLOAD_REALM,
)
from catalog.database import get_db_connection, init_database
from catalog.exceptions import (
    CatalogException,
    InvalidCredentialsError,
    UpdateNotFoundError,
    UploadFailedError,
)
from catalog.notifier import BasketNotifier, NotificationScope
from catalog.persistence import FanOutMetadataWriter, JsonBackupWriter, SqliteMetadataWriter
from catalog.repositories.basket_repository import BasketRepository
from catalog.repositories.metadata_repository import MetadataRepository
from catalog.routes.basket_routes import router as basket_router
from catalog.routes.update_routes import router as update_router
from catalog.services.basket_service import BasketStore
from catalog.services.catalog_service import CatalogService

logger = setup_logging('catalog')

app = FastAPI(
    title="Update Catalog",
    description="Self-hosted update file catalog with session baskets",
    version="1.0.0"
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    logger.info(f"Request started: {request.method} {request.url.path} [request_id={request_id}]")

    response = await call_next(request)

    duration = time.time() - start_time

    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
    )

    response.headers["X-Request-ID"] = request_id

    return response


@app.on_event("startup")
async def startup_event():
    """
    Initialize storage and wire the catalog and basket services.
    """
    logger.info("Catalog service starting up...")

    try:
        init_database()
        logger.info("Database initialized")
    except (sqlite3.Error, OSError) as e:
        logger.error(f"Database initialization failed, baskets will be served from memory: {e}", exc_info=True)

    upload_dir = Path(UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)

    metadata_repository = MetadataRepository()
    writer = FanOutMetadataWriter(
        primary=SqliteMetadataWriter(metadata_repository),
        secondaries=[JsonBackupWriter(METADATA_JSON_PATH)],
    )
    app.state.catalog_service = CatalogService(
        upload_dir=upload_dir,
        writer=writer,
        repository=metadata_repository,
    )

    notifier = BasketNotifier(scope=NotificationScope.parse(BASKET_NOTIFY_SCOPE))
    basket_store = BasketStore(repository=BasketRepository(), notifier=notifier)
    await basket_store.load_from_database()

    app.state.basket_notifier = notifier
    app.state.basket_store = basket_store

    logger.info(f"Catalog service ready [upload_dir={upload_dir}] [notify_scope={notifier.scope.value}]")


@app.on_event("shutdown")
async def shutdown_event():
    """
    Flush outstanding basket writes on application shutdown.
    """
    logger.info("Catalog service shutting down...")

    basket_store = getattr(app.state, "basket_store", None)
    if basket_store:
        await basket_store.drain()
        logger.info("Basket writes flushed")


@app.exception_handler(InvalidCredentialsError)
async def invalid_credentials_handler(request: Request, exc: InvalidCredentialsError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Invalid credentials error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": str(exc), "code": "INVALID_CREDENTIALS"},
        headers={"WWW-Authenticate": f'Basic realm="{UPLOAD_REALM}"'}
    )


@app.exception_handler(UpdateNotFoundError)
async def update_not_found_handler(request: Request, exc: UpdateNotFoundError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Update not found error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": str(exc), "code": "UPDATE_NOT_FOUND"}
    )


@app.exception_handler(UploadFailedError)
async def upload_failed_handler(request: Request, exc: UploadFailedError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Upload failed error: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc), "code": "UPLOAD_FAILED"}
    )


@app.exception_handler(CatalogException)
async def catalog_exception_handler(request: Request, exc: CatalogException):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Catalog exception: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc), "code": "INTERNAL_ERROR"}
    )


app.include_router(update_router)
app.include_router(basket_router)


@app.get("/")
async def root():
    """
    Root endpoint for health check.
    """
    return {"message": "Update Catalog API", "status": "running"}


@app.get("/health")
async def health_check():
    """
    Health check endpoint for Docker healthcheck.
    Returns 200 if service is alive.
    """
    return {"status": "healthy", "service": "catalog"}


@app.get("/ready")
async def ready_check():
    """
    Readiness check endpoint.
    Verifies database connectivity and the upload directory.
    """
    try:
        with get_db_connection() as conn:
            conn.execute("SELECT 1 FROM metadata LIMIT 1")
        db_status = "ok"
    except Exception as e:
        db_status = f"error: {str(e)}"

    upload_status = "ok" if Path(UPLOAD_DIR).is_dir() else "error: upload directory missing"

    ready = db_status == "ok" and upload_status == "ok"
    status_code = status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE

    return JSONResponse(
        status_code=status_code,
        content={
            "ready": ready,
            "database": db_status,
            "uploads": upload_status
        }
    )


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run(
        "catalog.main:app",
        host=CATALOG_HOST,
        port=CATALOG_PORT,
    )


if __name__ == "__main__":
    main()
