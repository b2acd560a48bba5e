"""Logging setup for the API process."""

from __future__ import annotations

import logging

from pythonjsonlogger.json import JsonFormatter

_CONFIGURED = False

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


class _ServiceNameFilter(logging.Filter):
    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service_name
        return True


def setup_logging(level: str = "INFO", json_output: bool = True, service_name: str = "area-weather") -> None:
    """Configure root logging once; later calls are no-ops."""

    global _CONFIGURED
    if _CONFIGURED:
        return

    handler = logging.StreamHandler()
    if json_output:
        handler.setFormatter(JsonFormatter(TEXT_FORMAT + " %(service)s"))
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    handler.addFilter(_ServiceNameFilter(service_name))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())
    logging.captureWarnings(True)

    # httpx logs every request URL at INFO, API key included.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    _CONFIGURED = True


__all__ = ["setup_logging"]
