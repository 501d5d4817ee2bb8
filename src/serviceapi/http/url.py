# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""URL helpers shared by the descriptor validation and the query builder."""

from __future__ import annotations

from urllib.parse import SplitResult, unquote, urlsplit, urlunsplit

from ..errors import InvalidFileError, InvalidURLError


def parse_url(url: str) -> SplitResult:
    """
    Parse an absolute request URL.

    A usable URL has a scheme, a host (except for `file:` URLs) and no
    whitespace; anything else raises InvalidURLError.
    """
    raw = str(url or "")
    if not raw.strip():
        raise InvalidURLError("Invalid url String: empty")
    if any(ch.isspace() for ch in raw):
        raise InvalidURLError(f"Invalid url String: {raw!r}")
    try:
        parts = urlsplit(raw)
        # Accessing the port validates it.
        _ = parts.port
    except ValueError as exc:
        raise InvalidURLError(f"Invalid url String: {raw!r} ({exc})") from exc
    if not parts.scheme:
        raise InvalidURLError(f"Invalid url String: {raw!r} has no scheme")
    if parts.scheme.lower() != "file" and not parts.hostname:
        raise InvalidURLError(f"Invalid url String: {raw!r} has no host")
    return parts


def append_query(url: str, query: str) -> str:
    """Append an already percent-encoded query to a URL, keeping any existing query and fragment."""
    parts = parse_url(url)
    if not query:
        return url
    merged = f"{parts.query}&{query}" if parts.query else query
    return urlunsplit(parts._replace(query=merged))


def local_file_path(reference: str) -> str:
    """
    Resolve a plain path or `file://` URL to a filesystem path.

    Any other URL scheme is rejected, since only local files can be streamed
    into a request body.
    """
    raw = str(reference or "")
    if not raw:
        raise InvalidFileError("bodyPartURLInvalid: empty file reference")
    parts = urlsplit(raw)
    scheme = parts.scheme.lower()
    # A single-letter scheme is a Windows drive letter, not a URL.
    if not scheme or len(scheme) == 1:
        return raw
    if scheme != "file":
        raise InvalidFileError(f"bodyPartURLInvalid: {raw!r} is not a local file URL")
    if parts.netloc and parts.netloc.lower() != "localhost":
        raise InvalidFileError(f"bodyPartURLInvalid: {raw!r} points to a remote host")
    path = unquote(parts.path)
    if not path:
        raise InvalidFileError(f"bodyPartURLInvalid: {raw!r} has no path")
    return path


__all__ = ["append_query", "local_file_path", "parse_url"]
