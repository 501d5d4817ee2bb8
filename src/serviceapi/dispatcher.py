# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Single-request lifecycle: encode, send on a worker thread, deliver one result."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from enum import Enum
from typing import Protocol

from .config import HttpSettings, load_http_settings
from .encoder import RequestEncoder
from .errors import DispatchStateError, ErrorCategory, ResponseParseError
from .http.client import HttpClient
from .http.models import HttpRequest, HttpResponse
from .log import LogPhase, RequestLogger, format_elapsed
from .models.json_value import JsonValue
from .models.request import RequestDescriptor
from .models.result import DispatchResult, Failure, Success

logger = logging.getLogger(__name__)

ResponseValidator = Callable[[JsonValue], tuple[bool, str]]
CompletionHandler = Callable[[DispatchResult], None]

GENERIC_FAILURE_MESSAGE = "request failed"


def accept_all(_value: JsonValue) -> tuple[bool, str]:
    return True, ""


class DispatchState(str, Enum):
    IDLE = "IDLE"
    BUILDING = "BUILDING"
    IN_FLIGHT = "IN_FLIGHT"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Cancelable(Protocol):
    def cancel(self) -> None: ...

    def is_cancelable(self) -> bool: ...


class Dispatcher(Cancelable):
    """
    Owns one request from encoding to result delivery.

    `start()` encodes on the calling thread, so construction errors raise
    immediately and nothing is sent. The transport then runs on a daemon
    thread and the completion handler is invoked on that thread, exactly once,
    unless `cancel()` wins the race first. The state lock only guards
    transitions; it is never held across I/O or the handler.
    """

    def __init__(
        self,
        descriptor: RequestDescriptor,
        http_client: HttpClient,
        *,
        settings: HttpSettings | None = None,
        request_logger: RequestLogger | None = None,
        encoder: RequestEncoder | None = None,
        validator: ResponseValidator = accept_all,
    ):
        self.settings = settings or load_http_settings()
        self.request_logger = request_logger or RequestLogger(enabled=self.settings.log_requests)
        self.encoder = encoder or RequestEncoder(self.settings, self.request_logger)
        self.http_client = http_client
        self.validator = validator
        self.request_id = self.request_logger.next_request_id()

        self._descriptor: RequestDescriptor | None = descriptor
        self._state = DispatchState.IDLE
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._cancel_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._started_at: float | None = None
        self.result: DispatchResult | None = None

    @property
    def state(self) -> DispatchState:
        return self._state

    @property
    def started_at(self) -> float | None:
        return self._started_at

    def is_cancelable(self) -> bool:
        return self._state is DispatchState.IN_FLIGHT

    def start(self, on_complete: CompletionHandler) -> None:
        with self._lock:
            if self._state is not DispatchState.IDLE or self._descriptor is None:
                raise DispatchStateError(f"Dispatcher already used (state={self._state.value})")
            self._state = DispatchState.BUILDING

        try:
            encoded = self.encoder.encode(self._descriptor, self.request_id)
        except Exception:
            with self._lock:
                self._state = DispatchState.IDLE
            raise
        self._descriptor = None

        request = HttpRequest(
            url=encoded.url,
            method=encoded.method.value,
            headers=encoded.header_dict,
            body=encoded.body,
            timeout=encoded.timeout,
            allow_redirects=self.settings.allow_redirects,
            cancel_event=self._cancel_event,
        )

        with self._lock:
            self._state = DispatchState.IN_FLIGHT
            self._started_at = time.monotonic()
        self.request_logger.log(self.request_id, LogPhase.SEND_REQUEST, "WebRequest Start", f"{encoded.method.value} {encoded.url}")

        self._thread = threading.Thread(
            target=self._run,
            args=(request, on_complete),
            name=f"serviceapi-request-{self.request_id}",
            daemon=True,
        )
        self._thread.start()

    def cancel(self) -> None:
        with self._lock:
            if self._state is not DispatchState.IN_FLIGHT:
                return
            self._state = DispatchState.CANCELLED
        self._cancel_event.set()
        self.request_logger.log(self.request_id, LogPhase.SEND_REQUEST, "WebRequest Cancel")

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the worker thread has finished; returns False on timeout."""
        if self._thread is None:
            return self._done.is_set()
        return self._done.wait(timeout)

    def _run(self, request: HttpRequest, on_complete: CompletionHandler) -> None:
        try:
            try:
                response = self.http_client.request(request)
            except Exception as exc:  # noqa: BLE001
                response = HttpResponse(ok=False, error_message=str(exc), error_type=type(exc).__name__)

            with self._lock:
                if self._state is not DispatchState.IN_FLIGHT:
                    return
                self._state = DispatchState.COMPLETED

            self._log_elapsed()
            result = self.handle_response(response)
            self.result = result
            on_complete(result)
        finally:
            self._done.set()

    def _log_elapsed(self) -> None:
        if self._started_at is None:
            return
        elapsed = time.monotonic() - self._started_at
        self.request_logger.log(self.request_id, LogPhase.GET_RESPONSE, f"Request Completed in {format_elapsed(elapsed)}")

    def handle_response(self, response: HttpResponse) -> DispatchResult:
        """Map a transport response to Success or Failure."""
        if not response.ok:
            message = response.error_message or GENERIC_FAILURE_MESSAGE
            self.request_logger.log(self.request_id, LogPhase.GET_RESPONSE, "Error", message)
            return Failure(message, _category(response.error_category))

        if response.status_code != 200:
            self.request_logger.log(self.request_id, LogPhase.GET_RESPONSE, "Status", response.status_code)
            return Failure(GENERIC_FAILURE_MESSAGE, ErrorCategory.HTTP_STATUS)

        if response.body_truncated:
            limit = response.meta.get("body_bytes_limit")
            return Failure(f"Response body exceeded {limit} bytes", ErrorCategory.PARSE_ERROR)

        try:
            value = JsonValue.parse(response.content)
        except ResponseParseError as exc:
            self.request_logger.log(self.request_id, LogPhase.GET_RESPONSE, "Invalid JSON", exc)
            return Failure(str(exc), ErrorCategory.PARSE_ERROR)

        try:
            approved, reason = self.validator(value)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Response validator raised %s for request %d", type(exc).__name__, self.request_id)
            return Failure(str(exc) or type(exc).__name__, ErrorCategory.VALIDATION)
        if not approved:
            self.request_logger.log(self.request_id, LogPhase.GET_RESPONSE, "Rejected", reason)
            return Failure(reason or "response rejected", ErrorCategory.VALIDATION)

        self.request_logger.log(self.request_id, LogPhase.GET_RESPONSE, "Data", value)
        return Success(value)


def _category(raw: str | None) -> ErrorCategory:
    try:
        return ErrorCategory(raw) if raw else ErrorCategory.UNKNOWN_ERROR
    except ValueError:
        logger.debug("Unknown error category from transport: %s", raw)
        return ErrorCategory.UNKNOWN_ERROR


__all__ = [
    "Cancelable",
    "CompletionHandler",
    "DispatchState",
    "Dispatcher",
    "GENERIC_FAILURE_MESSAGE",
    "ResponseValidator",
    "accept_all",
]
