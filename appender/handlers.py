"""Request handlers, independent of the web framework.

Each handler takes plain values and returns a ``HandlerResponse`` so it can be
exercised directly without routing.
"""
from __future__ import annotations

import logging

from opentelemetry import trace
from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from .config import Settings
from .forwarder import Forwarder
from .models import AppendRequest, AppendResult, HandlerResponse

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

MSG_PROCESSED = "Request processed"
MSG_FORWARDED = "Request processed and forwarded"
ERR_PROCESS = "Failed to process request"
ERR_FORWARD = "Failed to forward request to target service"


def describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)


def health() -> HandlerResponse:
    return HandlerResponse(200, {"status": "UP"})


class AppendHandler:
    def __init__(self, settings: Settings, forwarder: Forwarder):
        self.settings = settings
        self.forwarder = forwarder

    async def handle(self, raw_body: bytes) -> HandlerResponse:
        """Append the instance suffix to ``input`` and forward it if a target is set."""
        try:
            req = AppendRequest.model_validate_json(raw_body)
        except ValidationError as exc:
            message = describe_validation_error(exc)
            logger.error("Failed to bind JSON", extra={"error": message})
            return HandlerResponse(400, {"error": message})

        result = AppendResult.build(req.input, self.settings.pod_name)
        logger.info("Appended string", extra={"result": result.result})

        if not self.settings.forwarding_enabled:
            return HandlerResponse(200, {"message": MSG_PROCESSED})
        return await self._forward(result)

    async def _forward(self, result: AppendResult) -> HandlerResponse:
        target_url = self.settings.target_url
        try:
            payload = result.model_dump_json().encode("utf-8")
        except PydanticSerializationError as exc:
            logger.error("Failed to marshal JSON payload for target URL", extra={"error": str(exc)})
            return HandlerResponse(500, {"error": ERR_PROCESS})

        with tracer.start_as_current_span("appender.forward") as span:
            span.set_attribute("appender.target_url", target_url)
            outcome = await self.forwarder.post(target_url, payload)
            if outcome.transport_error is None:
                span.set_attribute("http.response.status_code", outcome.status_code)

        if outcome.transport_error is not None:
            logger.error(
                "Failed to send POST request to target URL",
                extra={"target_url": target_url, "error": repr(outcome.transport_error)},
            )
            return HandlerResponse(500, {"error": ERR_FORWARD})

        fields = {"target_url": target_url, "status_code": outcome.status_code}
        if outcome.ok:
            logger.info("Successfully forwarded request to target URL", extra=fields)
            return HandlerResponse(200, {"message": MSG_FORWARDED})

        # downstream body is dropped, only the status is reported
        logger.error("Target URL returned non-OK status code", extra=fields)
        return HandlerResponse(502, {"error": f"Target service returned status code {outcome.status_code}"})
