from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, StrictStr, field_validator

SEPARATOR = " I am Java instance "


class AppendRequest(BaseModel):
    """Body accepted by ``POST /append``."""

    model_config = ConfigDict(extra="ignore")

    input: StrictStr = ""

    @field_validator("input", mode="before")
    @classmethod
    def null_is_empty(cls, value):
        # absent and null inputs both read as ""
        return "" if value is None else value


class AppendResult(BaseModel):
    """Payload forwarded to the target service."""

    result: str

    @classmethod
    def build(cls, text: str, pod_name: str) -> AppendResult:
        return cls(result=f"{text}{SEPARATOR}{pod_name}")


@dataclass(frozen=True)
class ForwardOutcome:
    """Result of POSTing to the target service.

    Either ``transport_error`` is set, or ``status_code`` and ``body`` are.
    """

    status_code: int | None = None
    body: bytes | None = None
    transport_error: Exception | None = None

    def __post_init__(self):
        received = self.status_code is not None and self.body is not None
        if (self.transport_error is not None) == received:
            raise ValueError("ForwardOutcome needs either a transport error or a status code and body")

    @property
    def ok(self) -> bool:
        return self.transport_error is None and 200 <= self.status_code < 300


@dataclass(frozen=True)
class HandlerResponse:
    status_code: int
    payload: dict[str, Any] = field(default_factory=dict)
