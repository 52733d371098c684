"""Error taxonomy for the CEF conversion pipeline."""
from typing import Optional


class ConversionError(Exception):
    """Base exception for conversion failures."""
    code = "ConversionError"
    retryable = False


class InvalidNotification(ConversionError):
    """Notification record lacks the fields needed to locate the object."""
    code = "InvalidNotification"


class CefParseError(ConversionError):
    """Structural parse failure for a single CEF line."""
    code = "CefParseError"

    def __init__(self, message: str, line: Optional[str] = None, line_number: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.line_number = line_number

    def __str__(self):
        if self.line_number is not None:
            return f"line {self.line_number}: {self.message}"
        return self.message


class MalformedHeader(CefParseError):
    """Fewer tokens than timestamp + host + CEF payload."""
    code = "MalformedHeader"


class MalformedCefFields(CefParseError):
    """CEF payload has fewer than eight pipe-delimited segments."""
    code = "MalformedCefFields"


class MalformedVersion(CefParseError):
    """First CEF segment is not of the form CEF:<version>."""
    code = "MalformedVersion"


class MalformedExtensionToken(CefParseError):
    """Extension token without a key=value separator."""
    code = "MalformedExtensionToken"


class ContentDecodeError(CefParseError):
    """Object body is not valid UTF-8 text."""
    code = "ContentDecodeError"


class StoreFailure(ConversionError):
    """Object store call failed; redelivery may succeed."""
    code = "StoreFailure"
    retryable = True


class FetchFailed(StoreFailure):
    code = "FetchFailed"


class ProbeFailed(StoreFailure):
    code = "ProbeFailed"


class WriteFailed(StoreFailure):
    code = "WriteFailed"


class BatchConversionError(ConversionError):
    """Raised after a batch when store failures should trigger redelivery."""
    code = "BatchConversionError"

    def __init__(self, message: str, result: dict):
        super().__init__(message)
        self.result = result
