# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request descriptor models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..errors import InvalidFileError, RequestConstructionError
from ..http.url import parse_url
from .json_value import JsonValue


class Method(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    @property
    def allows_body(self) -> bool:
        return self in (Method.POST, Method.PUT)


@dataclass(frozen=True)
class Header:
    name: str
    value: str


@dataclass(frozen=True)
class Parameter:
    key: str
    value: JsonValue

    def __post_init__(self) -> None:
        if not isinstance(self.value, JsonValue):
            object.__setattr__(self, "value", JsonValue.from_python(self.value))


@dataclass(frozen=True)
class FileEntry:
    """
    A file to upload with a multipart request.

    Exactly one of `data` (inline bytes) or `source_path` (a plain path or a
    `file://` URL) must be set.
    """

    key: str
    data: bytes | None = None
    source_path: str | None = None
    mime_type: str | None = None
    file_name: str | None = None

    @classmethod
    def from_path(cls, key: str, path: str, *, mime_type: str | None = None, file_name: str | None = None) -> FileEntry:
        return cls(key=key, source_path=str(path), mime_type=mime_type, file_name=file_name)

    @classmethod
    def from_bytes(cls, key: str, data: bytes, *, mime_type: str | None = None, file_name: str | None = None) -> FileEntry:
        return cls(key=key, data=bytes(data), mime_type=mime_type, file_name=file_name)

    def validate(self) -> None:
        if not self.key:
            raise InvalidFileError("Invalid request File: empty key")
        if self.data is None and self.source_path is None:
            raise InvalidFileError(f"Invalid request File {self.key!r}: neither data nor source path given")
        if self.data is not None and self.source_path is not None:
            raise InvalidFileError(f"Invalid request File {self.key!r}: both data and source path given")
        if self.source_path is not None and not self.source_path.strip():
            raise InvalidFileError(f"Invalid request File {self.key!r}: empty source path")


@dataclass
class RequestDescriptor:
    """Caller-supplied description of one HTTP request, consumed once by the encoder."""

    url: str
    method: Method = Method.GET
    headers: list[Header] = field(default_factory=list)
    parameters: list[Parameter] = field(default_factory=list)
    files: list[FileEntry] = field(default_factory=list)
    timeout: float | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.method, Method):
            try:
                self.method = Method(str(self.method).upper())
            except ValueError as exc:
                raise RequestConstructionError(f"Unsupported method: {self.method!r}") from exc

    def add_header(self, name: str, value: str) -> RequestDescriptor:
        self.headers.append(Header(name, value))
        return self

    def add_parameter(self, key: str, value: Any) -> RequestDescriptor:
        self.parameters.append(Parameter(key, value))
        return self

    def add_file(self, entry: FileEntry) -> RequestDescriptor:
        self.files.append(entry)
        return self

    @property
    def has_files(self) -> bool:
        return self.method.allows_body and bool(self.files)

    def parameter_object(self) -> JsonValue:
        """Parameters as one JSON object; a repeated key keeps its last value."""
        merged: dict[str, JsonValue] = {}
        for param in self.parameters:
            merged[param.key] = param.value
        return JsonValue.of_object(merged)

    def validate(self) -> None:
        parse_url(self.url)
        for header in self.headers:
            if not header.name:
                raise RequestConstructionError("Invalid header: empty name")
        for param in self.parameters:
            if not param.key:
                raise RequestConstructionError("Invalid parameter: empty key")
        if self.has_files:
            for entry in self.files:
                entry.validate()
        if self.timeout is not None and self.timeout <= 0:
            raise RequestConstructionError(f"Invalid timeout: {self.timeout!r}")
