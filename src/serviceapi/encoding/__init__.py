# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Wire encoders: query strings and multipart bodies."""

from .filesystem import FileSystem, LocalFileSystem
from .multipart import MultipartFormData, mime_type_for_path, random_boundary
from .query import build_query, encode_params_to_url, escape

__all__ = [
    "FileSystem",
    "LocalFileSystem",
    "MultipartFormData",
    "build_query",
    "encode_params_to_url",
    "escape",
    "mime_type_for_path",
    "random_boundary",
]
