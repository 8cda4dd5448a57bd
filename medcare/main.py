import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from medcare.config import CORS_ORIGINS, PORT, configure_logging
from medcare.errors import BookingServiceError, ValidationError
from medcare.routers import bookings
from medcare.services.database import Database

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    await app.state.database.connect()
    logger.info(f"Server is starting on port {PORT}")

    yield

    # Shutdown
    await app.state.database.close()


def describe_validation_errors(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"] if part != "body")
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(messages)


def create_app(database: Optional[Database] = None) -> FastAPI:
    """Build the application around a database, a fresh one when none is given"""
    configure_logging()

    app = FastAPI(
        title="MedCare Bookings API",
        description="A FastAPI backend for ambulance and medical transport bookings",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.database = database or Database()

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials="*" not in CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(BookingServiceError)
    async def booking_error_handler(request: Request, exc: BookingServiceError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        error = ValidationError(describe_validation_errors(exc))
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        kind = "not_found" if exc.status_code == 404 else "http"
        return JSONResponse(
            status_code=exc.status_code,
            content={"kind": kind, "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        error = BookingServiceError(str(exc))
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    # Include routers
    app.include_router(bookings.router)

    # Health check endpoint
    @app.get("/api/health")
    async def health_check():
        return {"message": "Server is running", "status": "OK"}

    # Root endpoint
    @app.get("/")
    async def root():
        return {"message": "Welcome to MedCare Bookings API", "docs": "/docs"}

    return app


app = create_app()
