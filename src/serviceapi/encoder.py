# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Turn a RequestDescriptor into a transport-ready EncodedRequest."""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Iterator
from typing import BinaryIO

from .config import HttpSettings, load_http_settings
from .encoding.filesystem import FileSystem
from .encoding.multipart import MultipartFormData
from .encoding.query import encode_params_to_url
from .errors import BodyEncodingError
from .http.headers import set_header
from .log import LogPhase, RequestLogger
from .models.request import FileEntry, RequestDescriptor
from .models.result import EncodedRequest

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


class RequestEncoder:
    """
    Encode requests by method and payload:

    - GET/DELETE: parameters go into the URL query, no body.
    - POST/PUT without files: parameters become one JSON object.
    - POST/PUT with files: parameters and files become a multipart body.

    Every check runs before a body is produced, so a bad descriptor never
    reaches the transport.
    """

    def __init__(
        self,
        settings: HttpSettings | None = None,
        request_logger: RequestLogger | None = None,
        file_system: FileSystem | None = None,
    ):
        self.settings = settings or load_http_settings()
        self.request_logger = request_logger or RequestLogger(enabled=self.settings.log_requests)
        self.file_system = file_system

    def encode(self, descriptor: RequestDescriptor, request_id: int = 0) -> EncodedRequest:
        descriptor.validate()
        if descriptor.files and not descriptor.method.allows_body:
            logger.warning("Ignoring %d file(s) on %s request to %s", len(descriptor.files), descriptor.method.value, descriptor.url)

        self._log(request_id, "Header", _describe_headers(descriptor))
        headers = [(header.name, header.value) for header in descriptor.headers]
        timeout = descriptor.timeout if descriptor.timeout is not None else self.settings.timeout

        if not descriptor.method.allows_body:
            return self._encode_url(descriptor, headers, timeout, request_id)
        if descriptor.has_files:
            return self._encode_multipart(descriptor, headers, timeout, request_id)
        return self._encode_json(descriptor, headers, timeout, request_id)

    def _encode_url(
        self,
        descriptor: RequestDescriptor,
        headers: list[tuple[str, str]],
        timeout: float,
        request_id: int,
    ) -> EncodedRequest:
        self._log(request_id, f"{descriptor.method.value} URL Encode", descriptor.url)
        if descriptor.parameters:
            self._log(request_id, "Parameters", _describe_parameters(descriptor))
        url = encode_params_to_url(descriptor.url, descriptor.parameters)
        return EncodedRequest(method=descriptor.method, url=url, headers=tuple(headers), body=None, timeout=timeout)

    def _encode_json(
        self,
        descriptor: RequestDescriptor,
        headers: list[tuple[str, str]],
        timeout: float,
        request_id: int,
    ) -> EncodedRequest:
        self._log(request_id, f"{descriptor.method.value}(Json)", descriptor.url)
        set_header(headers, "Content-Type", JSON_CONTENT_TYPE)
        body = b""
        if descriptor.parameters:
            self._log(request_id, "Parameters", _describe_parameters(descriptor))
            try:
                body = descriptor.parameter_object().dumps().encode("utf-8")
            except ValueError as exc:
                raise BodyEncodingError(f"Could not serialize parameters as JSON: {exc}") from exc
        return EncodedRequest(
            method=descriptor.method,
            url=descriptor.url,
            headers=tuple(headers),
            body=body,
            timeout=timeout,
            content_length=len(body),
        )

    def _encode_multipart(
        self,
        descriptor: RequestDescriptor,
        headers: list[tuple[str, str]],
        timeout: float,
        request_id: int,
    ) -> EncodedRequest:
        self._log(request_id, f"{descriptor.method.value}(multiPart)", descriptor.url)
        form = MultipartFormData(chunk_size=self.settings.stream_chunk_size, file_system=self.file_system)

        if descriptor.parameters:
            self._log(request_id, "Parameters", _describe_parameters(descriptor))
            for param in descriptor.parameters:
                try:
                    text = param.value.raw_string()
                except ValueError as exc:
                    raise BodyEncodingError(f"Could not serialize parameter {param.key!r}: {exc}") from exc
                form.append_data(text.encode("utf-8"), param.key)

        self._log(request_id, "File/Image uploads", _describe_files(descriptor.files))
        for entry in descriptor.files:
            _append_file(form, entry)

        if form.error is not None:
            raise form.error

        set_header(headers, "Content-Type", form.content_type)

        if form.content_length > self.settings.multipart_memory_threshold:
            # Staged on disk so read failures surface here, before anything is sent.
            try:
                staged = tempfile.TemporaryFile()
            except OSError as exc:
                raise BodyEncodingError(f"multipartEncodingFailed outputStreamCreationFailed: {exc}") from exc
            try:
                length = form.write_encoded(staged)
                staged.seek(0)
            except OSError as exc:
                staged.close()
                raise BodyEncodingError(f"multipartEncodingFailed outputStreamWriteFailed: {exc}") from exc
            except BaseException:
                staged.close()
                raise
            set_header(headers, "Content-Length", str(length))
            self._log(request_id, "Streaming multipart body", f"{length} bytes")
            return EncodedRequest(
                method=descriptor.method,
                url=descriptor.url,
                headers=tuple(headers),
                body=_iter_staged(staged, self.settings.stream_chunk_size),
                timeout=timeout,
                content_length=length,
            )

        body = form.encode()
        return EncodedRequest(
            method=descriptor.method,
            url=descriptor.url,
            headers=tuple(headers),
            body=body,
            timeout=timeout,
            content_length=len(body),
        )

    def _log(self, request_id: int, message: str, detail: object = None) -> None:
        self.request_logger.log(request_id, LogPhase.MAKE_REQUEST, message, detail)


def _iter_staged(staged: BinaryIO, chunk_size: int) -> Iterator[bytes]:
    with staged:
        while True:
            chunk = staged.read(chunk_size)
            if not chunk:
                break
            yield chunk


def _append_file(form: MultipartFormData, entry: FileEntry) -> None:
    if entry.data is not None:
        form.append_data(entry.data, entry.key, mime_type=entry.mime_type, file_name=entry.file_name)
    else:
        form.append_file(entry.source_path or "", entry.key, file_name=entry.file_name, mime_type=entry.mime_type)


def _describe_headers(descriptor: RequestDescriptor) -> str:
    return "".join(f"\n  {header.name} : {header.value}" for header in descriptor.headers)


def _describe_parameters(descriptor: RequestDescriptor) -> str:
    return "".join(f"\n  {param.key} : {param.value}" for param in descriptor.parameters)


def _describe_files(files: list[FileEntry]) -> str:
    return "".join(f"\n  key:{entry.key} mime:{entry.mime_type} name:{entry.file_name}" for entry in files)


__all__ = ["JSON_CONTENT_TYPE", "RequestEncoder"]
