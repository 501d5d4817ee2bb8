# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level ServiceApi facade."""

from __future__ import annotations

from contextlib import suppress

from .config import HttpSettings, load_http_settings
from .dispatcher import CompletionHandler, Dispatcher, DispatchState, ResponseValidator, accept_all
from .encoder import RequestEncoder
from .encoding.filesystem import FileSystem
from .errors import ErrorCategory
from .http.client import HttpClient, create_default_http_client
from .log import RequestLogger
from .models.request import RequestDescriptor
from .models.result import DispatchResult, Failure


class ServiceApi:
    """
    Convenience wrapper that wires one transport, settings and request logger
    across every dispatcher it creates.
    """

    def __init__(
        self,
        http_client: HttpClient | None = None,
        *,
        settings: HttpSettings | None = None,
        request_logger: RequestLogger | None = None,
        validator: ResponseValidator = accept_all,
        file_system: FileSystem | None = None,
    ):
        self.settings = settings or load_http_settings()
        self.http_client = http_client or create_default_http_client(self.settings)
        self.request_logger = request_logger or RequestLogger(enabled=self.settings.log_requests)
        self.encoder = RequestEncoder(self.settings, self.request_logger, file_system=file_system)
        self.validator = validator

    def dispatcher(self, descriptor: RequestDescriptor) -> Dispatcher:
        return Dispatcher(
            descriptor,
            self.http_client,
            settings=self.settings,
            request_logger=self.request_logger,
            encoder=self.encoder,
            validator=self.validator,
        )

    def request(self, descriptor: RequestDescriptor, on_complete: CompletionHandler) -> Dispatcher:
        """Start a request and return its dispatcher; construction errors raise here."""
        dispatcher = self.dispatcher(descriptor)
        dispatcher.start(on_complete)
        return dispatcher

    def call(self, descriptor: RequestDescriptor, timeout: float | None = None) -> DispatchResult:
        """Send a request and block until its result is available."""
        results: list[DispatchResult] = []
        dispatcher = self.request(descriptor, results.append)
        if not dispatcher.wait(timeout):
            dispatcher.cancel()
            # The worker may have completed between the wait and the cancel.
            if dispatcher.state is not DispatchState.COMPLETED:
                return Failure("Timed out waiting for the response", ErrorCategory.TIMEOUT)
            dispatcher.wait()
        if not results:
            return Failure("Request was cancelled", ErrorCategory.CANCELLED)
        return results[0]

    def close(self) -> None:
        with suppress(Exception):
            if hasattr(self.http_client, "close"):
                self.http_client.close()

    def __enter__(self) -> ServiceApi:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.close()
