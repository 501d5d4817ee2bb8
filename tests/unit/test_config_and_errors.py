# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import importlib

from serviceapi import config
from serviceapi.config import DEFAULT_USER_AGENT
from serviceapi.errors import (
    BodyEncodingError,
    ErrorCategory,
    InvalidFileError,
    InvalidURLError,
    RequestConstructionError,
    ServiceApiError,
    error_category_to_reason,
)


def test_http_settings_env_overrides(monkeypatch):
    monkeypatch.setenv("SERVICEAPI_HTTP_TIMEOUT", "5.5")
    monkeypatch.setenv("SERVICEAPI_USER_AGENT", "CustomAgent/1.0")
    monkeypatch.setenv("SERVICEAPI_HTTP_REDIRECTS", "false")
    monkeypatch.setenv("SERVICEAPI_HTTP_VERIFY_SSL", "0")
    monkeypatch.setenv("SERVICEAPI_HTTP_MAX_BODY_BYTES", "2048")
    monkeypatch.setenv("SERVICEAPI_STREAM_CHUNK_SIZE", "4096")
    monkeypatch.setenv("SERVICEAPI_MULTIPART_MEMORY_THRESHOLD", "100")
    monkeypatch.setenv("SERVICEAPI_LOG_REQUESTS", "no")

    importlib.reload(config)
    settings = config.load_http_settings()

    assert settings.timeout == 5.5
    assert settings.user_agent == "CustomAgent/1.0"
    assert settings.allow_redirects is False
    assert settings.verify_ssl is False
    assert settings.max_body_bytes == 2048
    assert settings.stream_chunk_size == 4096
    assert settings.multipart_memory_threshold == 100
    assert settings.log_requests is False


def test_http_settings_invalid_env_fall_back(monkeypatch):
    monkeypatch.setenv("SERVICEAPI_HTTP_TIMEOUT", "not-a-number")
    monkeypatch.setenv("SERVICEAPI_HTTP_MAX_BODY_BYTES", "-1")
    monkeypatch.setenv("SERVICEAPI_STREAM_CHUNK_SIZE", "zero")

    importlib.reload(config)
    settings = config.load_http_settings()

    assert settings.timeout == config.HttpSettings.timeout
    assert settings.max_body_bytes == config.HttpSettings.max_body_bytes
    assert settings.stream_chunk_size == config.HttpSettings.stream_chunk_size
    assert DEFAULT_USER_AGENT in settings.user_agent


def test_load_http_settings_reads_env_at_call_time(monkeypatch):
    importlib.reload(config)
    monkeypatch.setenv("SERVICEAPI_HTTP_TIMEOUT", "7.7")
    assert config.load_http_settings().timeout == 7.7
    monkeypatch.setenv("SERVICEAPI_HTTP_TIMEOUT", "8.8")
    assert config.load_http_settings().timeout == 8.8


def test_construction_errors_share_a_base():
    for error_type in (InvalidURLError, InvalidFileError, BodyEncodingError):
        assert issubclass(error_type, RequestConstructionError)
        assert issubclass(error_type, ServiceApiError)


def test_error_category_reasons():
    assert error_category_to_reason(ErrorCategory.TIMEOUT)
    assert error_category_to_reason(ErrorCategory.NONE) == ""
    assert error_category_to_reason(None) == ""
