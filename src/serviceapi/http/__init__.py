# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP transport exports."""

from .adapters import StubHttpClient
from .client import HttpClient, create_default_http_client
from .headers import header_value, normalize_headers, set_header
from .httpx_client import HttpxClient
from .models import Headers, HttpRequest, HttpResponse
from .url import append_query, local_file_path, parse_url

__all__ = [
    "Headers",
    "HttpClient",
    "HttpxClient",
    "HttpRequest",
    "HttpResponse",
    "StubHttpClient",
    "append_query",
    "create_default_http_client",
    "header_value",
    "local_file_path",
    "normalize_headers",
    "parse_url",
    "set_header",
]
