import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

access_logger = logging.getLogger("app.access")

_handler: logging.Handler | None = None


def configure_logging(environment: str) -> None:
    level = logging.INFO if environment == "production" else logging.DEBUG
    global _handler
    root = logging.getLogger()
    # Reconfiguring (tests, reloads) replaces our handler instead of stacking.
    if _handler is not None:
        root.removeHandler(_handler)
    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(_handler)
    root.setLevel(level)
    # SQL echo is noisy even in development
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Log one line per request: method, path, status and duration."""

    async def dispatch(self, request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        access_logger.info(
            "%s %s -> %s (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response
