# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Closed JSON value type.

Parameters and parsed responses are carried as JsonValue trees. Encoders switch
on `JsonValue.kind`; only `from_python` looks at Python runtime types, at the
boundary where caller data enters the package.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..errors import ResponseParseError


class JsonKind(str, Enum):
    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


@dataclass(frozen=True)
class JsonValue:
    kind: JsonKind
    payload: Any = None

    @classmethod
    def null(cls) -> JsonValue:
        return cls(JsonKind.NULL)

    @classmethod
    def of_bool(cls, value: bool) -> JsonValue:
        return cls(JsonKind.BOOL, bool(value))

    @classmethod
    def of_number(cls, value: int | float) -> JsonValue:
        return cls(JsonKind.NUMBER, value)

    @classmethod
    def of_string(cls, value: str) -> JsonValue:
        return cls(JsonKind.STRING, value)

    @classmethod
    def of_array(cls, items: Sequence[JsonValue]) -> JsonValue:
        return cls(JsonKind.ARRAY, tuple(items))

    @classmethod
    def of_object(cls, fields: Mapping[str, JsonValue] | Sequence[tuple[str, JsonValue]]) -> JsonValue:
        pairs = fields.items() if isinstance(fields, Mapping) else fields
        return cls(JsonKind.OBJECT, tuple((str(key), value) for key, value in pairs))

    @classmethod
    def from_python(cls, value: Any) -> JsonValue:
        """Convert plain Python data (as produced by `json.loads`) into a JsonValue."""
        if isinstance(value, JsonValue):
            return value
        if value is None:
            return cls.null()
        # bool is a subclass of int, so it has to be checked first.
        if isinstance(value, bool):
            return cls.of_bool(value)
        if isinstance(value, (int, float)):
            return cls.of_number(value)
        if isinstance(value, str):
            return cls.of_string(value)
        if isinstance(value, Mapping):
            return cls.of_object([(str(k), cls.from_python(v)) for k, v in value.items()])
        if isinstance(value, (list, tuple)):
            return cls.of_array([cls.from_python(item) for item in value])
        raise TypeError(f"Unsupported JSON value type: {type(value).__name__}")

    @classmethod
    def parse(cls, data: bytes | str) -> JsonValue:
        """Decode a JSON document."""
        try:
            return cls.from_python(json.loads(data))
        except (ValueError, TypeError) as exc:
            raise ResponseParseError(f"Invalid JSON: {exc}") from exc

    @property
    def items(self) -> tuple[JsonValue, ...]:
        return self.payload if self.kind is JsonKind.ARRAY else ()

    @property
    def fields(self) -> tuple[tuple[str, JsonValue], ...]:
        return self.payload if self.kind is JsonKind.OBJECT else ()

    def get(self, key: str, default: JsonValue | None = None) -> JsonValue | None:
        for name, value in self.fields:
            if name == key:
                return value
        return default

    def to_python(self) -> Any:
        kind = self.kind
        if kind is JsonKind.ARRAY:
            return [item.to_python() for item in self.payload]
        if kind is JsonKind.OBJECT:
            return {key: value.to_python() for key, value in self.payload}
        return self.payload

    def dumps(self, allow_nan: bool = False) -> str:
        """Compact JSON text; NaN and infinities raise ValueError unless `allow_nan` is set."""
        return json.dumps(self.to_python(), ensure_ascii=False, separators=(",", ":"), allow_nan=allow_nan)

    def raw_string(self) -> str:
        """Text form used for multipart form fields: strings are not quoted."""
        kind = self.kind
        if kind is JsonKind.STRING:
            return self.payload
        if kind is JsonKind.NULL:
            return "null"
        if kind is JsonKind.BOOL:
            return "true" if self.payload else "false"
        if kind is JsonKind.NUMBER:
            return str(self.payload)
        return self.dumps()

    def __str__(self) -> str:
        return self.dumps(allow_nan=True)
