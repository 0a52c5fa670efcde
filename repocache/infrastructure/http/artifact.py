"""Decoding and structural validation of fetched artifact files."""

import base64
import binascii
import json

from repocache.domain.repository.model.value import Content
from repocache.domain.shared.error import InvalidFormatError


def decode_base64_file(encoded: str, *, location: str) -> str:
    """Decode a base64 file body as returned by the GitHub and GitLab file APIs."""
    try:
        return base64.b64decode(encoded).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise InvalidFormatError(f"{location} could not be decoded: {e}") from e


def parse_artifact(raw: str, *, collection_key: str, location: str) -> Content:
    """Parse an artifact and check it holds a named collection of entries.

    Two shapes are accepted: a bare JSON array of entries, which is wrapped as
    ``{collection_key: [...]}``, or an object whose ``collection_key`` member is
    an array. Every entry must be a JSON object.
    """
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidFormatError(f"{location} is not valid JSON: {e}") from e

    if isinstance(parsed, list):
        parsed = {collection_key: parsed}

    if not isinstance(parsed, dict) or not isinstance(parsed.get(collection_key), list):
        raise InvalidFormatError(
            f"Invalid {location} format: expected array or object with "
            f"'{collection_key}' array"
        )

    for i, entry in enumerate(parsed[collection_key]):
        if not isinstance(entry, dict):
            raise InvalidFormatError(
                f"Invalid {location} format: {collection_key}[{i}] is not an object"
            )

    return parsed
