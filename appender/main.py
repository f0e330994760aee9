"""Appender service - FastAPI application that appends the instance name to a string.

The result is optionally POSTed to ``TARGET_URL`` and the downstream outcome
is reported back to the caller. The service also answers a liveness probe
and serves static files (``sender.html`` among them) from ``STATIC_DIR``.
"""
import asyncio
import sys
import uuid
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles

from common.logging import REQUEST_ID, configure_logging, get_logger
from common.tracing import configure_tracing

from .config import Settings
from .forwarder import Forwarder, HttpxForwarder
from .handlers import AppendHandler, health
from .models import HandlerResponse

SERVICE_NAME = "appender"

logger = get_logger(SERVICE_NAME)


def to_json_response(resp: HandlerResponse) -> JSONResponse:
    return JSONResponse(status_code=resp.status_code, content=resp.payload)


def create_app(settings: Settings | None = None, forwarder: Forwarder | None = None) -> FastAPI:
    """Build the application around an explicit ``Settings`` and ``Forwarder``.

    When no forwarder is given an ``HttpxForwarder`` is created and closed
    again when the application shuts down.
    """
    settings = settings or Settings.from_environment()
    owned_forwarder = None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting server on %s", settings.listen_addr)
        if not settings.forwarding_enabled:
            logger.warning("TARGET_URL environment variable not set. The service will not forward requests.")
        try:
            yield
        finally:
            logger.info("Shutting down server...")
            if owned_forwarder is not None:
                await owned_forwarder.aclose()
            logger.info("Server exiting")

    app = FastAPI(title=SERVICE_NAME, lifespan=lifespan)
    configure_tracing(app, SERVICE_NAME, settings.otel_exporter)

    if forwarder is None:
        forwarder = owned_forwarder = HttpxForwarder(timeout=settings.forward_timeout)
    append_handler = AppendHandler(settings, forwarder)
    app.state.settings = settings
    app.state.append_handler = append_handler

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        """Bind a request ID to the logging context and echo it in the response.

        An incoming ``X-Request-ID`` is reused so ids correlate across services.
        """
        req_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = req_id
        request.state.logger = get_logger(SERVICE_NAME, request_id=req_id)
        token = REQUEST_ID.set(req_id)
        try:
            request.state.logger.debug("request.start")
            response = await call_next(request)
        finally:
            REQUEST_ID.reset(token)
        response.headers["X-Request-ID"] = req_id
        return response

    @app.get("/")
    async def root():
        return RedirectResponse("/sender.html", status_code=301)

    @app.get("/health")
    async def health_check():
        return to_json_response(health())

    @app.post("/append")
    async def append(request: Request):
        raw_body = await request.body()
        return to_json_response(await append_handler.handle(raw_body))

    # mounted last so the routes above win over files of the same name
    app.mount("/", StaticFiles(directory=settings.static_dir), name="static")
    return app


class DrainingServer(uvicorn.Server):
    """uvicorn server that remembers whether the graceful drain ran out of time."""

    drain_timed_out = False

    async def _wait_tasks_to_complete(self) -> None:
        try:
            await super()._wait_tasks_to_complete()
        except asyncio.CancelledError:
            # cancelled by the timeout_graceful_shutdown bound
            self.drain_timed_out = True
            raise


def main() -> None:
    settings = Settings.from_environment()
    configure_logging(settings.log_level)
    app = create_app(settings)
    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        timeout_graceful_shutdown=int(settings.shutdown_timeout),
    )
    server = DrainingServer(config)
    try:
        server.run()
    except SystemExit as exc:
        if exc.code:
            logger.critical("Server failed to start on %s", settings.listen_addr)
        raise
    if server.drain_timed_out or server.force_exit:
        logger.critical("Server forced to shutdown before in-flight requests completed")
        sys.exit(1)


if __name__ == "__main__":
    main()
