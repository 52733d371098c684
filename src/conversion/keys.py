"""Destination key derivation."""
import posixpath

DESTINATION_EXTENSION = ".json"


def derive_destination_key(source_key: str) -> str:
    """Replace the final extension of the key's file name with .json.

    Only the last dot counts: ``2023-02-14.14.ceff`` -> ``2023-02-14.14.json``.
    Dots in directory names are left alone and a key without an extension
    simply gains one.
    """
    stem, _ = posixpath.splitext(source_key)
    return f"{stem}{DESTINATION_EXTENSION}"
