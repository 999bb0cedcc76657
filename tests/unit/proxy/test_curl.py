"""Tests for the curl command rendering and header size guard."""

from urllib.parse import unquote

import pytest

from jsonproxy.proxy.curl import (
    CURL_OMIT_HEADERS,
    MAX_HEADER_SIZE,
    TRUNCATED,
    build_curl_command,
    cap_header_value,
    curl_header_value,
    encode_uri,
)
from jsonproxy.proxy.request import ForwardDescriptor


def make_descriptor(**overrides) -> ForwardDescriptor:
    values = {
        "host": "http://svc.internal",
        "url_path": "/widgets/7",
        "method": "POST",
        "headers": {"Accept": "application/json"},
        "body": '{"a":1}',
    }
    values.update(overrides)
    return ForwardDescriptor(**values)


@pytest.mark.unit
class TestBuildCurlCommand:
    def test_renders_url_method_headers_and_body(self) -> None:
        command = build_curl_command(make_descriptor())

        assert command == (
            "'http://svc.internal/widgets/7' -X POST "
            "-H 'Accept: application/json'  -d \"{\\\"a\\\":1}\""
        )

    def test_omitted_headers_are_dropped(self) -> None:
        headers = {key: "x" for key in CURL_OMIT_HEADERS}
        headers.update({"Accept": "application/json", "x-request-id": "abc"})

        command = build_curl_command(make_descriptor(headers=headers))

        for key in CURL_OMIT_HEADERS:
            assert f"-H '{key}:" not in command
        assert "-H 'Accept: application/json' " in command
        assert "-H 'x-request-id: abc' " in command
        assert command.count("-H ") == 2

    def test_omission_is_case_sensitive(self) -> None:
        command = build_curl_command(
            make_descriptor(headers={"Host": "svc.internal", "host": "other"})
        )

        assert "-H 'Host: svc.internal' " in command
        assert "other" not in command

    def test_empty_body_defaults_to_empty_object(self) -> None:
        command = build_curl_command(make_descriptor(body="", headers={}))

        assert command == "'http://svc.internal/widgets/7' -X POST  -d {}"


@pytest.mark.unit
class TestEncodeUri:
    def test_reserved_characters_are_kept(self) -> None:
        reserved = ";,/?:@&=+$-_.!~*'()#"
        assert encode_uri(reserved) == reserved

    def test_spaces_quotes_and_braces_are_encoded(self) -> None:
        assert encode_uri('-d "{}"') == "-d%20%22%7B%7D%22"

    def test_non_ascii_is_utf8_encoded(self) -> None:
        assert encode_uri("café") == "caf%C3%A9"


@pytest.mark.unit
class TestCapHeaderValue:
    def test_value_within_budget_is_unchanged(self) -> None:
        value = "a" * MAX_HEADER_SIZE
        assert cap_header_value(value) == value

    def test_value_over_budget_is_truncated_with_marker(self) -> None:
        value = "b" * (MAX_HEADER_SIZE + 1)

        capped = cap_header_value(value)

        assert len(capped) == MAX_HEADER_SIZE
        assert capped.endswith(TRUNCATED)
        assert capped == "b" * (MAX_HEADER_SIZE - len(TRUNCATED)) + TRUNCATED

    def test_custom_limit(self) -> None:
        capped = cap_header_value("x" * 100, limit=50)

        assert len(capped) == 50
        assert capped.endswith(TRUNCATED)


@pytest.mark.unit
def test_curl_header_value_is_encoded_and_capped() -> None:
    small = curl_header_value(make_descriptor())
    assert " " not in small
    assert unquote(small) == build_curl_command(make_descriptor())

    large = curl_header_value(make_descriptor(body='{"blob":"' + "z" * 5000 + '"}'))
    assert len(large) == MAX_HEADER_SIZE
    assert large.endswith(TRUNCATED)
