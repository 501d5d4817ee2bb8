# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import pytest

from serviceapi.errors import InvalidFileError, InvalidURLError, RequestConstructionError
from serviceapi.models import FileEntry, JsonValue, Method, Parameter, RequestDescriptor


def test_parameter_converts_plain_values():
    param = Parameter("n", 5)
    assert param.value == JsonValue.of_number(5)


def test_method_from_string_and_body_flag():
    descriptor = RequestDescriptor(url="http://h/", method="post")
    assert descriptor.method is Method.POST
    assert Method.PUT.allows_body
    assert not Method.DELETE.allows_body
    with pytest.raises(RequestConstructionError):
        RequestDescriptor(url="http://h/", method="PATCH")


def test_has_files_only_for_body_methods():
    entry = FileEntry.from_bytes("f", b"x")
    assert RequestDescriptor(url="http://h/", method=Method.POST, files=[entry]).has_files
    assert not RequestDescriptor(url="http://h/", method=Method.GET, files=[entry]).has_files
    assert not RequestDescriptor(url="http://h/", method=Method.POST).has_files


@pytest.mark.parametrize(
    "entry",
    [
        FileEntry(key="f"),
        FileEntry(key="f", data=b"x", source_path="/tmp/x"),
        FileEntry(key="", data=b"x"),
        FileEntry(key="f", source_path="  "),
    ],
)
def test_file_entry_validation(entry):
    with pytest.raises(InvalidFileError):
        entry.validate()


def test_descriptor_validate_checks_url_and_files():
    with pytest.raises(InvalidURLError):
        RequestDescriptor(url="nope").validate()

    descriptor = RequestDescriptor(url="http://h/", method=Method.PUT).add_file(FileEntry(key="f"))
    with pytest.raises(InvalidFileError):
        descriptor.validate()

    with pytest.raises(RequestConstructionError):
        RequestDescriptor(url="http://h/", timeout=0).validate()

    with pytest.raises(RequestConstructionError):
        RequestDescriptor(url="http://h/").add_parameter("", 1).validate()


def test_parameter_object_last_key_wins():
    descriptor = RequestDescriptor(url="http://h/").add_parameter("a", 1).add_parameter("a", 2).add_parameter("b", "x")
    assert descriptor.parameter_object().to_python() == {"a": 2, "b": "x"}
