# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Encoded request and dispatch result models."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Union

from ..errors import ErrorCategory
from .json_value import JsonValue
from .request import Method

Body = Union[bytes, Iterable[bytes], None]


@dataclass(frozen=True)
class EncodedRequest:
    """Transport-ready request: url, headers and body."""

    method: Method
    url: str
    headers: tuple[tuple[str, str], ...] = ()
    body: Body = None
    timeout: float | None = None
    content_length: int | None = None

    @property
    def header_dict(self) -> dict[str, str]:
        return dict(self.headers)

    @property
    def is_streamed(self) -> bool:
        return self.body is not None and not isinstance(self.body, (bytes, bytearray))


@dataclass(frozen=True)
class Success:
    value: JsonValue

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    message: str
    category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR

    @property
    def ok(self) -> bool:
        return False


DispatchResult = Union[Success, Failure]
