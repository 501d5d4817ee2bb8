# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dataclass exports for ServiceApi."""

from ..http.models import Headers, HttpRequest, HttpResponse
from .json_value import JsonKind, JsonValue
from .request import FileEntry, Header, Method, Parameter, RequestDescriptor
from .result import DispatchResult, EncodedRequest, Failure, Success

__all__ = [
    "DispatchResult",
    "EncodedRequest",
    "Failure",
    "FileEntry",
    "Header",
    "Headers",
    "HttpRequest",
    "HttpResponse",
    "JsonKind",
    "JsonValue",
    "Method",
    "Parameter",
    "RequestDescriptor",
    "Success",
]
