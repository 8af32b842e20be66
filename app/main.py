import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core import redis_config
from app.core.logging import AccessLogMiddleware, configure_logging
from app.database import db as database
from app.routes import admin, auth, events, health, registrations, reports
from app.services.auth import seed_default_admin

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.ENVIRONMENT)
    try:
        database.init_db()
        with database.SessionLocal() as db:
            seed_default_admin(db, settings.DEFAULT_ADMIN_EMAIL, settings.DEFAULT_ADMIN_PASSWORD)
    except Exception:
        # Never serve with a datastore we could not verify
        logger.exception("Startup failed")
        raise
    logger.info("Campus events API started (%s)", settings.ENVIRONMENT)
    yield
    database.engine.dispose()
    redis_config.redis_client.close()
    logger.info("Database and Redis connections closed")


app = FastAPI(title="Campus Events API", lifespan=lifespan)

# Configure CORS
origins = settings.cors_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if "*" in origins else origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(AccessLogMiddleware)

UNROUTED = ((404, "Not Found"), (405, "Method Not Allowed"))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if (exc.status_code, exc.detail) in UNROUTED:
        # Unknown path and unsupported method look the same to clients
        return JSONResponse(
            status_code=404, content={"error": f"Route {request.method} {request.url.path} not found"}
        )
    if isinstance(exc.detail, list):
        content = {"errors": exc.detail}
    else:
        content = {"error": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


def _describe(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
    return f"{location}: {error['msg']}" if location else error["msg"]


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"errors": [_describe(error) for error in exc.errors()]})


@app.exception_handler(OperationalError)
async def datastore_unavailable_handler(request: Request, exc: OperationalError):
    logger.error("Datastore error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"error": "Service temporarily unavailable, please retry"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# Include the routers
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(events.router)
app.include_router(registrations.router)
app.include_router(admin.router)
app.include_router(reports.router)


def run():
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)
