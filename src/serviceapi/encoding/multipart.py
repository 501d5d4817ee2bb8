# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
multipart/form-data body builder.

Parts are appended in order and framed with a boundary generated once per
builder:

    --B\\r\\n            (first part)
    \\r\\n--B\\r\\n        (every following part)
    Name: Value\\r\\n    (one line per part header)
    \\r\\n
    <content>
    \\r\\n--B--\\r\\n      (after the last part only)

Part content is read from its stream in fixed-size chunks, so streaming a
body through `iter_encoded()` needs memory proportional to the chunk size,
not to the file size.

File appends are validated eagerly. The first failing append is remembered
and reported by `encode()`; later appends are still accepted and any further
errors are dropped, so callers see the earliest problem.
"""

from __future__ import annotations

import io
import mimetypes
import ntpath
import posixpath
import secrets
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO

from ..errors import BodyEncodingError, InvalidFileError
from ..http.url import local_file_path
from .filesystem import FileSystem, LocalFileSystem

CRLF = "\r\n"
DEFAULT_CHUNK_SIZE = 1024
DEFAULT_MIME_TYPE = "application/octet-stream"

StreamOpener = Callable[[], BinaryIO]


class BoundaryType(Enum):
    INITIAL = "initial"
    ENCAPSULATED = "encapsulated"
    FINAL = "final"


def random_boundary() -> str:
    return "serviceapi.boundary.%08x%08x" % (secrets.randbits(32), secrets.randbits(32))


def boundary_data(boundary_type: BoundaryType, boundary: str) -> bytes:
    if boundary_type is BoundaryType.INITIAL:
        text = f"--{boundary}{CRLF}"
    elif boundary_type is BoundaryType.ENCAPSULATED:
        text = f"{CRLF}--{boundary}{CRLF}"
    else:
        text = f"{CRLF}--{boundary}--{CRLF}"
    return text.encode("utf-8")


def mime_type_for_path(path: str) -> str:
    """Guess a MIME type from the file extension."""
    mime_type, _ = mimetypes.guess_type(path, strict=False)
    return mime_type or DEFAULT_MIME_TYPE


def _quote_param(value: str) -> str:
    return value.replace("\r", "%0D").replace("\n", "%0A").replace('"', "%22")


def content_headers(name: str, file_name: str | None = None, mime_type: str | None = None) -> list[tuple[str, str]]:
    disposition = f'form-data; name="{_quote_param(name)}"'
    if file_name is not None:
        disposition += f'; filename="{_quote_param(file_name)}"'
    headers = [("Content-Disposition", disposition)]
    if mime_type is not None:
        headers.append(("Content-Type", mime_type))
    return headers


@dataclass
class BodyPart:
    headers: list[tuple[str, str]]
    opener: StreamOpener
    content_length: int
    has_initial_boundary: bool = False
    has_final_boundary: bool = False

    def encoded_headers(self) -> bytes:
        text = "".join(f"{key}: {value}{CRLF}" for key, value in self.headers) + CRLF
        return text.encode("utf-8")


class MultipartFormData:
    def __init__(
        self,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        file_system: FileSystem | None = None,
        boundary: str | None = None,
    ):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.boundary = boundary or random_boundary()
        self.chunk_size = chunk_size
        self._file_system = file_system or LocalFileSystem()
        self._parts: list[BodyPart] = []
        self._error: InvalidFileError | None = None

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"

    @property
    def content_length(self) -> int:
        """Sum of the declared part lengths, without boundaries or part headers."""
        return sum(part.content_length for part in self._parts)

    @property
    def encoded_length(self) -> int:
        """Exact size of the encoded body, framing included."""
        if not self._parts:
            return 0
        initial = len(boundary_data(BoundaryType.INITIAL, self.boundary))
        encapsulated = len(boundary_data(BoundaryType.ENCAPSULATED, self.boundary))
        final = len(boundary_data(BoundaryType.FINAL, self.boundary))
        total = initial + encapsulated * (len(self._parts) - 1) + final
        for part in self._parts:
            total += len(part.encoded_headers()) + part.content_length
        return total

    @property
    def error(self) -> InvalidFileError | None:
        return self._error

    def __len__(self) -> int:
        return len(self._parts)

    # Appending

    def append_data(self, data: bytes, name: str, mime_type: str | None = None, file_name: str | None = None) -> None:
        payload = bytes(data)
        headers = content_headers(name, file_name=file_name, mime_type=mime_type)
        self._parts.append(BodyPart(headers, lambda: io.BytesIO(payload), len(payload)))

    def append_file(self, path: str, name: str, file_name: str | None = None, mime_type: str | None = None) -> None:
        """
        Append a file from disk, validating it now and reading it at encode time.

        `path` may be a plain filesystem path or a `file://` URL. The file name
        defaults to the path's base name and the MIME type to a guess from the
        extension.
        """
        try:
            local_path = local_file_path(path)
        except InvalidFileError as exc:
            self._set_error(exc)
            return

        base_name = ntpath.basename(local_path) if "\\" in local_path else posixpath.basename(local_path)
        file_name = file_name if file_name is not None else base_name
        if not file_name:
            self._set_error(InvalidFileError(f"bodyPartFilenameInvalid: {path!r}"))
            return
        if mime_type is None:
            mime_type = mime_type_for_path(base_name or file_name)

        fs = self._file_system
        try:
            reachable = fs.exists(local_path)
        except OSError as exc:
            self._set_error(InvalidFileError(f"bodyPartFileNotReachableWithError: {path!r} ({exc})"))
            return
        if not reachable:
            self._set_error(InvalidFileError(f"bodyPartFileNotReachable: {path!r}"))
            return

        if fs.is_directory(local_path):
            self._set_error(InvalidFileError(f"bodyPartFileIsDirectory: {path!r}"))
            return

        try:
            length = int(fs.size(local_path))
        except (OSError, TypeError, ValueError) as exc:
            self._set_error(InvalidFileError(f"bodyPartFileSizeQueryFailedWithError: {path!r} ({exc})"))
            return

        try:
            fs.open_read_stream(local_path).close()
        except OSError as exc:
            self._set_error(InvalidFileError(f"bodyPartInputStreamCreationFailed: {path!r} ({exc})"))
            return

        headers = content_headers(name, file_name=file_name, mime_type=mime_type)
        self._parts.append(BodyPart(headers, lambda: fs.open_read_stream(local_path), length))

    def append_stream(self, stream: BinaryIO | StreamOpener, length: int, headers: list[tuple[str, str]]) -> None:
        """Append a raw part. `stream` is a readable binary stream or a callable returning one."""
        opener = stream if callable(stream) else (lambda: stream)
        self._parts.append(BodyPart(list(headers), opener, int(length)))

    def _set_error(self, error: InvalidFileError) -> None:
        if self._error is None:
            self._error = error

    # Encoding

    def encode(self) -> bytes:
        """Encode every part into one bytes value; partial output is discarded on failure."""
        return b"".join(self.iter_encoded())

    def write_encoded(self, output: BinaryIO) -> int:
        """Write the encoded body to `output` and return the number of bytes written."""
        written = 0
        for chunk in self.iter_encoded():
            output.write(chunk)
            written += len(chunk)
        return written

    def iter_encoded(self) -> Iterator[bytes]:
        """Yield the encoded body chunk by chunk."""
        if self._error is not None:
            raise self._error
        if not self._parts:
            return

        for part in self._parts:
            part.has_initial_boundary = False
            part.has_final_boundary = False
        self._parts[0].has_initial_boundary = True
        self._parts[-1].has_final_boundary = True

        for part in self._parts:
            yield from self._encode_part(part)

    def _encode_part(self, part: BodyPart) -> Iterator[bytes]:
        boundary_type = BoundaryType.INITIAL if part.has_initial_boundary else BoundaryType.ENCAPSULATED
        yield boundary_data(boundary_type, self.boundary)
        yield part.encoded_headers()
        yield from self._read_body(part)
        if part.has_final_boundary:
            yield boundary_data(BoundaryType.FINAL, self.boundary)

    def _read_body(self, part: BodyPart) -> Iterator[bytes]:
        try:
            stream = part.opener()
        except OSError as exc:
            raise BodyEncodingError(f"multipartEncodingFailed inputStreamReadFailed: {exc}") from exc
        read = 0
        try:
            while True:
                try:
                    chunk = stream.read(self.chunk_size)
                except (OSError, ValueError) as exc:
                    raise BodyEncodingError(f"multipartEncodingFailed inputStreamReadFailed: {exc}") from exc
                if not chunk:
                    break
                read += len(chunk)
                if read > part.content_length:
                    break
                yield chunk
        finally:
            stream.close()
        # Content-Length is computed from the declared sizes.
        if read != part.content_length:
            raise BodyEncodingError(
                f"multipartEncodingFailed inputStreamReadFailed: expected {part.content_length} bytes, read {read}"
            )


__all__ = [
    "BodyPart",
    "BoundaryType",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_MIME_TYPE",
    "MultipartFormData",
    "boundary_data",
    "content_headers",
    "mime_type_for_path",
    "random_boundary",
]
