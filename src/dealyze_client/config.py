"""Client configuration.

Values come from explicit arguments first, then DEALYZE_* environment
variables, then the defaults below.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Any

DEFAULT_URI = "ws://localhost:3100"

_TRUTHY = ("1", "true", "yes")


@dataclass
class ClientConfig:
    """Configuration for a DealyzeClient session."""

    # Connection
    uri: str = DEFAULT_URI
    connect_timeout: float = 5.0
    transports: list[str] | None = None  # e.g. ["websocket"]; None lets python-socketio pick

    # Employee signed in on "ready"
    employee_id: str = ""
    employee_username: str = ""

    # Logging side channel
    enable_logging: bool = False
    log_file: str = "dealyze_error.log"
    payload_log_file: str = "payload.json"

    # Reconnection after a register-initiated disconnect
    auto_reconnect: bool = True
    reconnect_delay: float = 1.0
    reconnect_backoff: float = 2.0
    max_reconnect_delay: float = 30.0
    max_reconnect_attempts: int | None = 10  # None retries forever

    @classmethod
    def from_env(cls, **overrides: Any) -> ClientConfig:
        """Build config from DEALYZE_* environment variables.

        Args:
            **overrides: Field values that take precedence over the environment

        Raises:
            TypeError: If an override names an unknown field
            ValueError: If a numeric environment variable is malformed
        """
        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            raise TypeError(f"Unknown config fields: {', '.join(sorted(unknown))}")

        values: dict[str, Any] = {}
        env = os.environ

        if "DEALYZE_URI" in env:
            values["uri"] = env["DEALYZE_URI"]
        if "DEALYZE_EMPLOYEE_ID" in env:
            values["employee_id"] = env["DEALYZE_EMPLOYEE_ID"]
        if "DEALYZE_EMPLOYEE_USERNAME" in env:
            values["employee_username"] = env["DEALYZE_EMPLOYEE_USERNAME"]
        if "DEALYZE_ENABLE_LOGGING" in env:
            values["enable_logging"] = env["DEALYZE_ENABLE_LOGGING"].lower() in _TRUTHY
        if "DEALYZE_LOG_FILE" in env:
            values["log_file"] = env["DEALYZE_LOG_FILE"]
        if "DEALYZE_PAYLOAD_LOG_FILE" in env:
            values["payload_log_file"] = env["DEALYZE_PAYLOAD_LOG_FILE"]
        if "DEALYZE_MAX_RECONNECT_ATTEMPTS" in env:
            raw = env["DEALYZE_MAX_RECONNECT_ATTEMPTS"].strip().lower()
            values["max_reconnect_attempts"] = None if raw in ("", "none") else int(raw)

        values.update(overrides)
        return cls(**values)
