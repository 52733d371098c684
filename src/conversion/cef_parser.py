"""CEF line parser.

Lines look like::

    Feb 14 14:53:01 api.pulumi.com CEF:0|Pulumi|Pulumi Service|1.0|User Login|User "x" logged in.|0|src=1.2.3.4 suser=x

i.e. a three-token syslog timestamp, a host, then the pipe-delimited CEF
payload ``CEF:Version|Vendor|Product|ProductVersion|EventClassID|Name|Severity|Extension``.
"""
from typing import Dict, List, Optional
import logging

from src.models.audit_record import AuditRecord
from .errors import (
    CefParseError,
    MalformedHeader,
    MalformedCefFields,
    MalformedVersion,
    MalformedExtensionToken,
)

logger = logging.getLogger(__name__)

# 3 timestamp tokens + host + at least one payload token
MIN_HEADER_TOKENS = 5

# version header + 6 fixed header fields + extension
CEF_SEGMENTS = 8


def parse_cef_line(line: str) -> AuditRecord:
    """Parse one non-empty line into an AuditRecord.

    Raises a CefParseError subclass instead of returning a partial record.
    """
    tokens = line.split()
    if len(tokens) < MIN_HEADER_TOKENS:
        raise MalformedHeader(
            f"expected timestamp, host and CEF payload, got {len(tokens)} token(s)",
            line=line,
        )

    timestamp = " ".join(tokens[:3])
    host = tokens[3]
    remainder = " ".join(tokens[4:])

    # Anything after the 7th pipe belongs to the extension, pipes included
    segments = remainder.split("|", CEF_SEGMENTS - 1)
    if len(segments) < CEF_SEGMENTS:
        raise MalformedCefFields(
            f"expected {CEF_SEGMENTS} pipe-delimited CEF segments, got {len(segments)}",
            line=line,
        )

    version = _parse_version(segments[0], line)
    vendor, product, product_version, event_class_id, event_name, severity = segments[1:7]

    return AuditRecord(
        timestamp=timestamp,
        host=host,
        version=version,
        vendor=vendor,
        product=product,
        product_version=product_version,
        event_class_id=event_class_id,
        event_name=event_name,
        severity=severity,
        raw=line,
        data=parse_extension(segments[7], line=line),
    )


def _parse_version(header: str, line: str) -> str:
    parts = header.split(":")
    if len(parts) < 2:
        raise MalformedVersion(f"CEF version header {header!r} has no ':' separator", line=line)
    return parts[1]


def parse_extension(blob: str, line: Optional[str] = None) -> Dict[str, str]:
    """Parse the space-delimited key=value extension into a dict.

    Values split on the first '=' only, so ``q=a=b`` yields ``{"q": "a=b"}``.
    An empty value (``tokenID=``) is kept as an empty string.
    """
    data: Dict[str, str] = {}
    for token in blob.split():
        name, sep, value = token.partition("=")
        if not sep:
            raise MalformedExtensionToken(f"extension token {token!r} is not key=value", line=line)
        if name in data:
            logger.debug(f"Duplicate extension key {name!r}, keeping last value")
        data[name] = value
    return data


def parse_lines(lines: List[str]) -> List[AuditRecord]:
    """Parse every non-empty line, in order. Fails on the first malformed line."""
    records: List[AuditRecord] = []
    for line_number, line in enumerate(lines, start=1):
        if line == "":
            continue
        logger.debug(f"Parsing line {line_number}: {line}")
        try:
            records.append(parse_cef_line(line))
        except CefParseError as e:
            e.line_number = line_number
            raise
    return records
