"""Raw object content handling."""
from typing import List

from .errors import ContentDecodeError


def decode_content(body: bytes) -> str:
    """Decode a fetched object body as UTF-8 text."""
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ContentDecodeError(f"object body is not valid UTF-8: {e}") from e


def split_lines(content: str) -> List[str]:
    """Split on newline only, keeping empty segments.

    No other whitespace is trimmed; callers drop the empty lines.
    """
    return content.split("\n")
