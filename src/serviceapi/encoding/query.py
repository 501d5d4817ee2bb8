# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""URL query string encoding for GET/DELETE parameters."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import quote

from ..http.url import append_query, parse_url
from ..models.json_value import JsonKind, JsonValue
from ..models.request import Parameter

# RFC 3986 section 3.4 leaves "?" and "/" legal inside a query. Every general
# and sub delimiter (":#[]@" and "!$&'()*+,;=") is escaped so keys and values
# can never be mistaken for query syntax.
QUERY_SAFE_CHARACTERS = "/?"


def escape(text: str) -> str:
    """Percent-encode a query key or value."""
    return quote(text, safe=QUERY_SAFE_CHARACTERS)


def query_components(key: str, value: JsonValue) -> list[tuple[str, str]]:
    """Flatten one parameter into escaped (key, value) pairs."""
    kind = value.kind
    if kind is JsonKind.OBJECT:
        components: list[tuple[str, str]] = []
        for nested_key, nested_value in sorted(value.fields, key=lambda item: item[0]):
            components.extend(query_components(f"{key}[{nested_key}]", nested_value))
        return components
    if kind is JsonKind.ARRAY:
        components = []
        for item in value.items:
            components.extend(query_components(f"{key}[]", item))
        return components
    if kind is JsonKind.BOOL:
        return [(escape(key), "1" if value.payload else "0")]
    if kind is JsonKind.NULL:
        return [(escape(key), "")]
    return [(escape(key), escape(str(value.payload)))]


def _as_mapping(parameters: Mapping[str, Any] | Iterable[Parameter] | None) -> dict[str, JsonValue]:
    if not parameters:
        return {}
    if isinstance(parameters, Mapping):
        return {str(key): JsonValue.from_python(value) for key, value in parameters.items()}
    merged: dict[str, JsonValue] = {}
    for param in parameters:
        merged[param.key] = param.value
    return merged


def build_query(parameters: Mapping[str, Any] | Iterable[Parameter] | None) -> str:
    """
    Build a deterministic query string.

    Top-level keys are sorted ascending, nested objects become `parent[child]`
    and arrays repeat `parent[]` once per element.
    """
    values = _as_mapping(parameters)
    components: list[tuple[str, str]] = []
    for key in sorted(values):
        components.extend(query_components(key, values[key]))
    return "&".join(f"{name}={value}" for name, value in components)


def encode_params_to_url(base: str, parameters: Mapping[str, Any] | Iterable[Parameter] | None = None) -> str:
    """Merge encoded parameters into `base`, after any query it already carries."""
    parse_url(base)
    query = build_query(parameters)
    if not query:
        return base
    return append_query(base, query)


__all__ = ["QUERY_SAFE_CHARACTERS", "build_query", "encode_params_to_url", "escape", "query_components"]
