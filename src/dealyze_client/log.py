"""File logging for the client.

Two side channels, both off unless enabled in ClientConfig:
- Error log: warnings and errors from the dealyze_client package
- Payload log: every JSON payload emitted to the register, one per line
"""

from __future__ import annotations

import logging

from .config import ClientConfig

PACKAGE_LOGGER_NAME = "dealyze_client"
PAYLOAD_LOGGER_NAME = "dealyze_client.payloads"

ERROR_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"

# Marks handlers installed here so reconfiguring only replaces our own
_OWNED = "_dealyze_owned"


def payload_logger() -> logging.Logger:
    return logging.getLogger(PAYLOAD_LOGGER_NAME)


def configure_logging(config: ClientConfig) -> None:
    """Attach (or detach) the file handlers described by config.

    Safe to call repeatedly; handlers from a previous call are closed
    and replaced.
    """
    package = logging.getLogger(PACKAGE_LOGGER_NAME)
    payloads = payload_logger()

    for target in (package, payloads):
        for handler in [h for h in target.handlers if getattr(h, _OWNED, False)]:
            target.removeHandler(handler)
            handler.close()

    # Payload lines never belong in the error log or on the console
    payloads.propagate = False

    if not config.enable_logging:
        _attach(payloads, logging.NullHandler())
        return

    error_handler = logging.FileHandler(config.log_file, encoding="utf-8")
    error_handler.setLevel(logging.WARNING)
    error_handler.setFormatter(logging.Formatter(ERROR_LOG_FORMAT))
    _attach(package, error_handler)

    payload_handler = logging.FileHandler(config.payload_log_file, encoding="utf-8")
    payload_handler.setFormatter(logging.Formatter("%(message)s"))
    payloads.setLevel(logging.INFO)
    _attach(payloads, payload_handler)


def _attach(target: logging.Logger, handler: logging.Handler) -> None:
    setattr(handler, _OWNED, True)
    target.addHandler(handler)
