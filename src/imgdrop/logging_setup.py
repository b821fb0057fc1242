"""Console logging with per-request ids and JSON-rendered `extra=` fields."""

from __future__ import annotations

import contextvars
import json
import logging
import logging.config
import os

_REQUEST_ID: contextvars.ContextVar[str] = contextvars.ContextVar("imgdrop_request_id", default="-")

# Attributes every LogRecord carries; anything else came from `extra=`.
_BUILTIN_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "request_id",
}
_QUIET_LOGGERS = ("boto3", "botocore", "s3transfer", "urllib3")

DEFAULT_CONSOLE_FORMAT = (
    "%(asctime)s %(levelname)s [%(request_id)s] %(module)s %(pathname)s:%(lineno)d %(message)s"
)


class _RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = _REQUEST_ID.get()
        return True


class _JsonExtraFormatter(logging.Formatter):
    """Appends `extra=` fields as an indented JSON block below the message."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = {k: v for k, v in vars(record).items() if k not in _BUILTIN_RECORD_ATTRS}
        if not extras:
            return line
        return f"{line}\n{json.dumps(extras, indent=2, default=str, sort_keys=True)}"


def set_request_id(request_id: str | None) -> contextvars.Token[str]:
    """Tag log records emitted in the current context with `request_id`."""
    return _REQUEST_ID.set(request_id or "-")


def reset_request_id(token: contextvars.Token[str]) -> None:
    _REQUEST_ID.reset(token)


def configure_logging(*, log_level: str = "INFO") -> None:
    """Send all logging to stdout at `log_level`.

    The line format can be replaced through `CONSOLE_LOG_FORMAT`; records
    outside a request show `-` as their request id.
    """
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {"request_id": {"()": _RequestIdFilter}},
            "formatters": {
                "console": {
                    "()": _JsonExtraFormatter,
                    "format": os.getenv("CONSOLE_LOG_FORMAT", DEFAULT_CONSOLE_FORMAT),
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": str(log_level).upper(),
                    "formatter": "console",
                    "filters": ["request_id"],
                    "stream": "ext://sys.stdout",
                }
            },
            "root": {"level": "DEBUG", "handlers": ["console"]},
        }
    )
    logging.captureWarnings(True)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
