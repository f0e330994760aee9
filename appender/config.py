"""Service configuration.

Everything is controlled by environment variables, read once at startup into
an immutable ``Settings`` value that is handed to the app factory.
"""
from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_POD_NAME = "default-instance"
DEFAULT_LISTEN_ADDR = ":8080"
SHUTDOWN_TIMEOUT = 5.0

# aliases accepted on top of the stdlib level names
LOG_LEVEL_ALIASES = {"WARN": "WARNING", "FATAL": "CRITICAL"}
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def normalize_log_level(value: str) -> str:
    level = value.strip().upper() or "INFO"
    level = LOG_LEVEL_ALIASES.get(level, level)
    if level not in LOG_LEVELS:
        raise ValueError(f"invalid LOG_LEVEL {value!r}, expected one of {LOG_LEVELS}")
    return level


@dataclass(frozen=True)
class Settings:
    """Immutable configuration from environment variables."""

    pod_name: str = DEFAULT_POD_NAME
    target_url: str = ""
    listen_addr: str = DEFAULT_LISTEN_ADDR
    static_dir: str = "."
    forward_timeout: float = 10.0
    log_level: str = "INFO"
    otel_exporter: str = "none"
    shutdown_timeout: float = SHUTDOWN_TIMEOUT

    @classmethod
    def from_environment(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        return cls(
            pod_name=(env.get("POD_NAME") or "").strip() or DEFAULT_POD_NAME,
            target_url=(env.get("TARGET_URL") or "").strip(),
            listen_addr=(env.get("LISTEN_ADDR") or "").strip() or DEFAULT_LISTEN_ADDR,
            static_dir=env.get("STATIC_DIR") or ".",
            forward_timeout=float((env.get("FORWARD_TIMEOUT") or "").strip() or "10"),
            log_level=normalize_log_level(env.get("LOG_LEVEL") or ""),
            otel_exporter=(env.get("OTEL_EXPORTER") or "").strip().lower() or "none",
        )

    @property
    def forwarding_enabled(self) -> bool:
        return bool(self.target_url)

    @property
    def host(self) -> str:
        return self._split_addr()[0]

    @property
    def port(self) -> int:
        return self._split_addr()[1]

    def _split_addr(self) -> tuple[str, int]:
        # ":8080" binds every interface, same as "0.0.0.0:8080"
        host, sep, port = self.listen_addr.rpartition(":")
        if not sep or not port.isdigit():
            raise ValueError(f"invalid listen address {self.listen_addr!r}, expected host:port")
        return host or "0.0.0.0", int(port)
