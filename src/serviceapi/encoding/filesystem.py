# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Filesystem access used when streaming files into multipart bodies."""

from __future__ import annotations

import os
from typing import BinaryIO, Protocol


class FileSystem(Protocol):
    def exists(self, path: str) -> bool: ...

    def is_directory(self, path: str) -> bool: ...

    def size(self, path: str) -> int: ...

    def open_read_stream(self, path: str) -> BinaryIO: ...


class LocalFileSystem:
    """FileSystem backed by the local disk; failures surface as OSError."""

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def is_directory(self, path: str) -> bool:
        return os.path.isdir(path)

    def size(self, path: str) -> int:
        return os.stat(path).st_size

    def open_read_stream(self, path: str) -> BinaryIO:
        return open(path, "rb")


__all__ = ["FileSystem", "LocalFileSystem"]
