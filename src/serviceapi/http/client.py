# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transport seam between the dispatcher and the network."""

from typing import Protocol

from ..config import HttpSettings, load_http_settings
from .models import HttpRequest, HttpResponse


class HttpClient(Protocol):
    """
    What a Dispatcher needs from a transport.

    `request` is called on the dispatcher's worker thread with a fully
    encoded HttpRequest. Network failures come back as `ok=False` responses
    carrying an ErrorCategory value; the transport should give up early once
    `request.cancelled` is set.
    """

    def request(self, request: HttpRequest) -> HttpResponse: ...

    def close(self) -> None:  # pragma: no cover - ServiceApi.close tolerates a no-op
        ...


def create_default_http_client(settings: HttpSettings | None = None) -> HttpClient:
    """Build the httpx transport ServiceApi uses when none is injected."""
    from .httpx_client import HttpxClient

    return HttpxClient(settings or load_http_settings())
