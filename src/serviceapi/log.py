# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging helpers for ServiceApi."""

from __future__ import annotations

import itertools
import logging
import os
import threading
from enum import Enum
from typing import Any

DEFAULT_LOG_LEVEL = os.getenv("SERVICEAPI_LOG_LEVEL", "WARNING").upper()
REQUEST_LOGGER_NAME = "serviceapi.requests"


def setup_logging(level: str | None = None) -> None:
    """Configure standard logging for CLI/library use."""
    effective_level = (level or DEFAULT_LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, effective_level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


class LogPhase(str, Enum):
    MAKE_REQUEST = "MakeRequest"
    SEND_REQUEST = "SendRequest"
    GET_RESPONSE = "GetResponse"


class RequestLogger:
    """
    Per-request diagnostic sink.

    Owns the request counter used to correlate log lines, so several dispatchers
    sharing one instance get distinct ids. A disabled logger still hands out ids
    but writes nothing.
    """

    def __init__(self, enabled: bool = True, logger: logging.Logger | None = None):
        self.enabled = enabled
        self._logger = logger or logging.getLogger(REQUEST_LOGGER_NAME)
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    def next_request_id(self) -> int:
        with self._lock:
            return next(self._counter)

    def log(self, request_id: int, phase: LogPhase, message: str, detail: Any = None) -> None:
        if not self.enabled:
            return
        if detail is None:
            self._logger.debug("%s(%s) : %s", phase.value, request_id, message)
        else:
            self._logger.debug("%s(%s) : %s %s", phase.value, request_id, message, detail)


def format_elapsed(seconds: float) -> str:
    """Render a duration as `N minutes S.SS seconds`."""
    minutes, remainder = divmod(max(seconds, 0.0), 60)
    parts: list[str] = []
    if minutes:
        parts.append(f"{int(minutes)} minutes")
    parts.append(f"{remainder:.2f} seconds")
    return " ".join(parts)


__all__ = ["LogPhase", "RequestLogger", "format_elapsed", "setup_logging"]
