# Application entrypoint: configures middleware, error handlers, startup routines and API routers.
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import os

from .config import split_csv
from .db import Base, engine
from .routes.auth import router as auth_router
from .routes.bookings import router as bookings_router
from .routes.properties import router as properties_router
from .routes.upload import router as upload_router
from .routes.users import router as users_router

logger = logging.getLogger("yallambee")


# Parse CORS origins from a comma-separated env var.
# '*' cannot be combined with allow_credentials=True, so it maps to the local dev origins.
def _parse_cors_origins(env_value: str | None) -> list[str]:
    default_dev_origins = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    origins = split_csv(env_value)
    if not origins or "*" in origins:
        return default_dev_origins
    return origins


app = FastAPI(title="Yallambee Tiny Homes API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=_parse_cors_origins(os.getenv("CORS_ORIGINS")),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Malformed request bodies are client errors: report every failing field with 400
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"errors": jsonable_encoder(exc.errors())},
    )


# Anything that escapes a handler is logged with its traceback and reported without details
@app.exception_handler(Exception)
async def unexpected_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Unexpected error, please try again later"},
    )


@app.on_event("startup")
def on_startup() -> None:
    # For local SQLite, auto-create tables; server databases rely on Alembic migrations.
    if engine.dialect.name == "sqlite":
        Base.metadata.create_all(bind=engine)


# Liveness endpoint for container orchestrators and uptime checks
@app.get("/healthz")
def healthz() -> dict:
    return {"status": "ok"}


@app.get("/")
def home() -> dict:
    return {"message": "Welcome to Yallambee Tiny Homes"}


app.include_router(auth_router, prefix="", tags=["auth"])
app.include_router(users_router, prefix="/api/v1", tags=["users"])
app.include_router(properties_router, prefix="/api/v1", tags=["properties"])
app.include_router(bookings_router, prefix="/api/v1", tags=["bookings"])
app.include_router(upload_router, prefix="/api/v1", tags=["upload"])
