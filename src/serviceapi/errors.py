# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl as ssl_module
from enum import Enum

import httpx


class ServiceApiError(Exception):
    """Base class for errors raised by ServiceApi."""


class RequestConstructionError(ServiceApiError):
    """The request could not be built; raised before any network I/O."""


class InvalidURLError(RequestConstructionError):
    pass


class InvalidFileError(RequestConstructionError):
    pass


class BodyEncodingError(RequestConstructionError):
    pass


class ResponseParseError(ServiceApiError):
    pass


class DispatchStateError(ServiceApiError):
    pass


class RequestCancelledError(ServiceApiError):
    """Raised inside a transport when the caller cancelled the request."""


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    CANCELLED = "CANCELLED"
    HTTP_STATUS = "HTTP_STATUS"
    VALIDATION = "VALIDATION"
    PARSE_ERROR = "PARSE_ERROR"
    ENCODING_ERROR = "ENCODING_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    NONE = "NONE"


def _exception_chain(exc: BaseException, limit: int = 8) -> list[BaseException]:
    chain: list[BaseException] = []
    current: BaseException | None = exc
    while current is not None and len(chain) < limit and current not in chain:
        chain.append(current)
        current = current.__cause__ or current.__context__
    return chain


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.
    """
    if isinstance(exc, RequestCancelledError):
        return ErrorCategory.CANCELLED

    if isinstance(exc, BodyEncodingError):
        return ErrorCategory.ENCODING_ERROR

    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT

    # httpx wraps TLS and resolver failures in ConnectError; inspect the chain first.
    chain = _exception_chain(exc)
    if any(isinstance(item, ssl_module.SSLError) for item in chain):
        return ErrorCategory.SSL_ERROR

    if any(isinstance(item, (socket.gaierror, socket.herror)) for item in chain):
        return ErrorCategory.DNS_ERROR

    if isinstance(exc, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError, httpx.ProxyError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, ConnectionError):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory | None) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.TIMEOUT: "Network timeout while waiting for the server",
        ErrorCategory.SSL_ERROR: "TLS/certificate issue",
        ErrorCategory.CONNECTION_ERROR: "Network connectivity issue",
        ErrorCategory.DNS_ERROR: "DNS resolution failure",
        ErrorCategory.CANCELLED: "Request was cancelled",
        ErrorCategory.HTTP_STATUS: "Server answered with an unexpected status",
        ErrorCategory.VALIDATION: "Response rejected by validation",
        ErrorCategory.PARSE_ERROR: "Response body is not valid JSON",
        ErrorCategory.ENCODING_ERROR: "Request body could not be encoded",
        ErrorCategory.UNKNOWN_ERROR: "Network error during request",
        ErrorCategory.NONE: "",
        None: "",
    }
    return mapping.get(category, "Request failed due to network error")
