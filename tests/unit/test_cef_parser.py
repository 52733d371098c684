"""Unit tests for CEF parsing, line splitting and key derivation."""
import pytest

from src.conversion.cef_parser import parse_cef_line, parse_extension, parse_lines
from src.conversion.content import decode_content, split_lines
from src.conversion.errors import (
    CefParseError,
    ContentDecodeError,
    MalformedHeader,
    MalformedCefFields,
    MalformedVersion,
    MalformedExtensionToken,
)
from src.conversion.keys import derive_destination_key
from simulation.event_simulator import SAMPLE_LINES

PREFIX = "Feb 14 14:53:01 api.pulumi.com"


def test_parse_cef_line():
    """Test that every header field and extension pair is extracted."""
    record = parse_cef_line(SAMPLE_LINES[0])

    assert record.timestamp == "Feb 14 14:53:01"
    assert record.host == "api.pulumi.com"
    assert record.version == "0"
    assert record.vendor == "Pulumi"
    assert record.product == "Pulumi Service"
    assert record.product_version == "1.0"
    assert record.event_class_id == "User Login"
    assert record.event_name == 'User "tushar-pulumi-corp" logged into the Pulumi Console.'
    assert record.severity == "0"
    assert record.raw == SAMPLE_LINES[0]
    assert record.data == {
        "authenticationFailure": "false",
        "dvchost": "api.pulumi.com",
        "orgID": "bbdf1c46-4a7b-497c-8b3d-0acf8a55e505",
        "requireOrgAdmin": "false",
        "requireStackAdmin": "false",
        "rt": "1676386381000",
        "src": "99.159.29.103",
        "suser": "tushar-pulumi-corp",
        "tokenID": "",
        "tokenName": "",
        "userID": "b557a719-8291-4cd3-93e4-fa5405c0ce49",
    }


def test_parse_literal_components():
    """Test that a minimal well-formed line yields its literal components."""
    record = parse_cef_line(f"{PREFIX} CEF:1|Acme|Vault|2.3|42|Secret read|7|k1=v1 k2=v2")

    assert record.version == "1"
    assert record.vendor == "Acme"
    assert record.product == "Vault"
    assert record.product_version == "2.3"
    assert record.event_class_id == "42"
    assert record.event_name == "Secret read"
    assert record.severity == "7"
    assert record.data == {"k1": "v1", "k2": "v2"}


def test_empty_extension_values():
    """Test that key= parses to an empty string rather than failing."""
    record = parse_cef_line(f"{PREFIX} CEF:0|Pulumi|Pulumi Service|1.0|User Login|Login|0|tokenID= tokenName=")

    assert record.data["tokenID"] == ""
    assert record.data["tokenName"] == ""


def test_extension_value_containing_equals():
    """Test that only the first '=' separates name from value."""
    assert parse_extension("query=a=b filter==x c=d") == {"query": "a=b", "filter": "=x", "c": "d"}


def test_pipes_inside_extension_are_kept():
    """Test that pipes after the seventh separator belong to the extension."""
    record = parse_cef_line(f"{PREFIX} CEF:0|Pulumi|Pulumi Service|1.0|Stack Update|Update|3|msg=a|b path=x|y|z")

    assert record.severity == "3"
    assert record.data == {"msg": "a|b", "path": "x|y|z"}


def test_empty_extension():
    """Test that a trailing empty extension gives an empty data map."""
    record = parse_cef_line(f"{PREFIX} CEF:0|Pulumi|Pulumi Service|1.0|User Login|Login|0|")
    assert record.data == {}


def test_whitespace_runs_are_collapsed():
    """Test that tabs and repeated spaces separate tokens like single spaces."""
    record = parse_cef_line("\tFeb  14   14:53:01 api.pulumi.com  CEF:0|Pulumi|Pulumi Service|1.0|User Login|Login|0|a=1 ")

    assert record.timestamp == "Feb 14 14:53:01"
    assert record.host == "api.pulumi.com"
    assert record.data == {"a": "1"}


def test_empty_header_fields_are_accepted():
    """Test that header fields are not validated for content."""
    record = parse_cef_line(f"{PREFIX} CEF:0||||||| a=1")

    assert record.vendor == ""
    assert record.severity == ""
    assert record.data == {"a": "1"}


def test_too_few_tokens():
    """Test that a line without a CEF payload is rejected."""
    with pytest.raises(MalformedHeader):
        parse_cef_line(PREFIX)


def test_too_few_pipe_segments():
    """Test that a truncated CEF header is rejected, not indexed past its end."""
    with pytest.raises(MalformedCefFields):
        parse_cef_line(f"{PREFIX} CEF:0|Pulumi|Pulumi Service|1.0")


def test_version_without_separator():
    """Test that CEF0 without ':' is a version error."""
    with pytest.raises(MalformedVersion):
        parse_cef_line(f"{PREFIX} CEF0|Pulumi|Pulumi Service|1.0|User Login|Login|0|a=1")


def test_extension_token_without_equals():
    """Test that a bare extension token fails the whole record."""
    with pytest.raises(MalformedExtensionToken) as exc_info:
        parse_cef_line(f"{PREFIX} CEF:0|Pulumi|Pulumi Service|1.0|User Login|Login|0|a=1 orphan")

    assert "orphan" in str(exc_info.value)
    assert exc_info.value.code == "MalformedExtensionToken"


def test_parse_lines_skips_empty_lines():
    """Test that empty segments are dropped and order is preserved."""
    records = parse_lines(["", SAMPLE_LINES[0], "", SAMPLE_LINES[1], ""])

    assert [record.raw for record in records] == SAMPLE_LINES


def test_parse_lines_reports_line_number():
    """Test that the failing line's position is attached to the error."""
    with pytest.raises(CefParseError) as exc_info:
        parse_lines([SAMPLE_LINES[0], "", "not a cef line"])

    assert exc_info.value.line_number == 3
    assert str(exc_info.value).startswith("line 3:")


def test_split_lines():
    """Test newline splitting keeps empty segments and other whitespace."""
    assert split_lines("") == [""]
    assert split_lines("a\n\n b \n") == ["a", "", " b ", ""]
    assert len(split_lines("\n".join(SAMPLE_LINES))) == 2


def test_decode_content_rejects_invalid_utf8():
    """Test that undecodable bodies raise a parse error."""
    assert decode_content("héllo".encode("utf-8")) == "héllo"
    with pytest.raises(ContentDecodeError):
        decode_content(b"\xff\xfe\xfa")


@pytest.mark.parametrize("source_key, expected", [
    ("2023-02-14_14.ceff", "2023-02-14_14.json"),
    ("a.b.ceff", "a.b.json"),
    ("2023-02-14.14.ceff", "2023-02-14.14.json"),
    ("pulumi-audit-logs/2023/02/14_14.ceff", "pulumi-audit-logs/2023/02/14_14.json"),
    ("logs.v2/2023-02-14", "logs.v2/2023-02-14.json"),
    ("noextension", "noextension.json"),
])
def test_derive_destination_key(source_key, expected):
    """Test that only the final extension of the file name is replaced."""
    assert derive_destination_key(source_key) == expected
