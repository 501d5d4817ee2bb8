# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for ServiceApi."""

import os
from dataclasses import dataclass

from .version import __version__

DEFAULT_USER_AGENT = f"ServiceApi/{__version__} (python-httpx)"


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class HttpSettings:
    """HTTP client and encoder defaults."""

    timeout: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT
    allow_redirects: bool = True
    verify_ssl: bool = True
    max_body_bytes: int = 16 * 1024 * 1024
    stream_chunk_size: int = 1024
    multipart_memory_threshold: int = 10_000_000
    log_requests: bool = True

    @classmethod
    def from_env(cls) -> "HttpSettings":
        """Create settings from environment variables (evaluated at call time)."""
        max_body_bytes = _int_env("SERVICEAPI_HTTP_MAX_BODY_BYTES", cls.max_body_bytes)
        if max_body_bytes <= 0:
            max_body_bytes = cls.max_body_bytes
        chunk_size = _int_env("SERVICEAPI_STREAM_CHUNK_SIZE", cls.stream_chunk_size)
        if chunk_size <= 0:
            chunk_size = cls.stream_chunk_size
        return cls(
            timeout=_float_env("SERVICEAPI_HTTP_TIMEOUT", cls.timeout),
            user_agent=os.getenv("SERVICEAPI_USER_AGENT", cls.user_agent),
            allow_redirects=_bool_env("SERVICEAPI_HTTP_REDIRECTS", cls.allow_redirects),
            verify_ssl=_bool_env("SERVICEAPI_HTTP_VERIFY_SSL", cls.verify_ssl),
            max_body_bytes=max_body_bytes,
            stream_chunk_size=chunk_size,
            multipart_memory_threshold=_int_env("SERVICEAPI_MULTIPART_MEMORY_THRESHOLD", cls.multipart_memory_threshold),
            log_requests=_bool_env("SERVICEAPI_LOG_REQUESTS", cls.log_requests),
        )


def load_http_settings() -> HttpSettings:
    """Load HTTP settings from environment with sensible defaults."""
    return HttpSettings.from_env()
