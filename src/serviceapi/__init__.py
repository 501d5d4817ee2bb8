# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
ServiceApi package entrypoint.

Builds HTTP requests from declarative descriptors (query strings, JSON bodies
and multipart/form-data uploads), sends them through an injectable transport
and reports a typed Success/Failure result. Domain objects are modeled with
typed dataclasses; the default transport is httpx.
"""

from .config import HttpSettings, load_http_settings
from .dispatcher import Cancelable, Dispatcher, DispatchState, accept_all
from .encoder import RequestEncoder
from .encoding import MultipartFormData, build_query, encode_params_to_url
from .errors import (
    BodyEncodingError,
    DispatchStateError,
    ErrorCategory,
    InvalidFileError,
    InvalidURLError,
    RequestConstructionError,
    ResponseParseError,
    ServiceApiError,
)
from .http import HttpClient, HttpRequest, HttpResponse, HttpxClient, StubHttpClient, create_default_http_client
from .log import LogPhase, RequestLogger, setup_logging
from .models import (
    DispatchResult,
    EncodedRequest,
    Failure,
    FileEntry,
    Header,
    JsonKind,
    JsonValue,
    Method,
    Parameter,
    RequestDescriptor,
    Success,
)
from .runtime import ServiceApi
from .version import __version__

__all__ = [
    "BodyEncodingError",
    "Cancelable",
    "DispatchResult",
    "DispatchState",
    "DispatchStateError",
    "Dispatcher",
    "EncodedRequest",
    "ErrorCategory",
    "Failure",
    "FileEntry",
    "Header",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "HttpSettings",
    "HttpxClient",
    "InvalidFileError",
    "InvalidURLError",
    "JsonKind",
    "JsonValue",
    "LogPhase",
    "Method",
    "MultipartFormData",
    "Parameter",
    "RequestConstructionError",
    "RequestDescriptor",
    "RequestEncoder",
    "RequestLogger",
    "ResponseParseError",
    "ServiceApi",
    "ServiceApiError",
    "StubHttpClient",
    "Success",
    "accept_all",
    "build_query",
    "create_default_http_client",
    "encode_params_to_url",
    "load_http_settings",
    "setup_logging",
    "__version__",
]
