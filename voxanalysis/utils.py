"""
VoxAnalysis v1 Utilities - Shared helper functions.

Responsibilities:
- Transport envelope (base64) decoding
- JSON serialization helpers

Invariants:
- Envelope decoding is strict: any non-alphabet character is an error
- JSON output is byte-stable for identical input
"""

import base64
import binascii
import json
from typing import Any, Mapping

from voxanalysis.errors import EnvelopeError


def decode_envelope(text: str | bytes) -> bytes:
    """
    Decode a base64 text envelope into raw bytes.

    Args:
        text: Standard-alphabet base64, with padding. Whitespace
              (including line wrapping) is ignored.

    Returns:
        Decoded bytes.

    Raises:
        EnvelopeError: If the envelope is not valid base64.
    """
    if isinstance(text, str):
        try:
            text = text.encode("ascii")
        except UnicodeEncodeError as e:
            raise EnvelopeError(f"Failed to decode base64: {e}") from e

    text = b"".join(text.split())

    try:
        return base64.b64decode(text, validate=True)
    except binascii.Error as e:
        raise EnvelopeError(f"Failed to decode base64: {e}") from e


def encode_envelope(data: bytes) -> str:
    """Encode raw bytes as a base64 text envelope."""
    return base64.b64encode(data).decode("ascii")


def serialize_json(data: Mapping[str, Any]) -> str:
    """
    Serialize dictionary to JSON deterministically.

    Args:
        data: Dictionary to serialize.

    Returns:
        JSON string with sorted keys, 2-space indent, trailing newline.
    """
    return json.dumps(data, indent=2, sort_keys=True) + "\n"
