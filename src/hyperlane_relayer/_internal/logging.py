"""Logging configuration for the hyperlane_relayer package."""

from __future__ import annotations

import logging
import os
import re
import sys

DEFAULT_LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
PACKAGE_LOGGER = "hyperlane_relayer"
LOG_FILE_ENV = "HYPERLANE_RELAYER_LOG_FILE"
LOG_LEVEL_ENV = "HYPERLANE_RELAYER_LOG_LEVEL"

# 32-byte hex secrets, as passed to the agent's --defaultSigner.key
_SECRET_PATTERN = re.compile(r"\b0x[0-9a-fA-F]{64}\b")

_configured = False


class RedactSecretsFilter(logging.Filter):
    """Masks anything shaped like a signing key in formatted log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = _SECRET_PATTERN.sub("<redacted>", message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def _build_handler(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(RedactSecretsFilter())
    return handler


def configure_logging(
    log_file: str | None = None,
    log_level: str | None = None,
    force: bool = False,
) -> None:
    """Configure the 'hyperlane_relayer' logger.

    Messages go to stderr and, when a log file is known, to that file as well.
    Signing keys are masked on both. Call once at process startup.

    Args:
        log_file: Path to log file. Defaults to HYPERLANE_RELAYER_LOG_FILE;
                  no file handler when neither is set.
        log_level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
                   Defaults to HYPERLANE_RELAYER_LOG_LEVEL or INFO.
        force: If True, reconfigure even if already configured.
    """
    global _configured

    if _configured and not force:
        return

    log_file = os.environ.get(LOG_FILE_ENV) if log_file is None else log_file
    level_name = (log_level or os.environ.get(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL).upper()
    level = getattr(logging, level_name, logging.INFO)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if log_file:
        try:
            logger.addHandler(_build_handler(logging.FileHandler(log_file), level))
        except OSError as e:
            print(f"Warning: Could not create log file {log_file}: {e}", file=sys.stderr)

    logger.addHandler(_build_handler(logging.StreamHandler(sys.stderr), level))
    logger.propagate = False

    _configured = True
