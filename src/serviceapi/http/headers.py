# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header utilities.

HTTP header field names are case-insensitive (RFC 9110). Requests keep headers
as ordered (name, value) pairs, so lookups and replacements compare names
without regard to case.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping


def normalize_headers(headers: Mapping[str, str] | Iterable[tuple[str, str]] | None) -> dict[str, str]:
    """Return a lowercase-keyed copy of a header mapping or pair sequence."""
    if not headers:
        return {}
    pairs = headers.items() if isinstance(headers, Mapping) else headers
    out: dict[str, str] = {}
    for key, value in pairs:
        if key is None:
            continue
        name = str(key).strip().lower()
        if not name:
            continue
        out[name] = "" if value is None else str(value)
    return out


def header_value(headers: Mapping[str, str] | Iterable[tuple[str, str]] | None, name: str, default: str = "") -> str:
    """Return a header value using case-insensitive key matching."""
    if not headers or not name:
        return default
    return normalize_headers(headers).get(name.lower(), default).strip() or default


def set_header(headers: list[tuple[str, str]], name: str, value: str) -> None:
    """Replace every header called `name` (any case) with a single entry appended at the end."""
    lower = name.lower()
    headers[:] = [(key, val) for key, val in headers if key.lower() != lower]
    headers.append((name, value))


__all__ = ["header_value", "normalize_headers", "set_header"]
