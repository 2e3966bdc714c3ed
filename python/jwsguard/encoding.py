"""Base64url and JSON encoding helpers for jwsguard."""

import base64
import binascii
import json
import re
from typing import Any, List, Tuple, Union

_BASE64URL_RE = re.compile(r"^[A-Za-z0-9_-]*$")


def base64url_encode(data: Union[bytes, str]) -> str:
    """Base64url encode bytes (no padding). Strings are UTF-8 encoded first."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def base64url_decode(s: str) -> bytes:
    """Base64url decode an unpadded string.

    Raises:
        ValueError: if the input contains characters outside the url-safe
            alphabet (padding included) or has an impossible length
    """
    if not isinstance(s, str):
        raise ValueError("base64url input must be a string")
    if not _BASE64URL_RE.match(s):
        raise ValueError("base64url input contains characters outside the url-safe alphabet")
    if len(s) % 4 == 1:
        raise ValueError("base64url input has an invalid length")

    padding = 4 - len(s) % 4
    if padding != 4:
        s += "=" * padding
    try:
        return base64.urlsafe_b64decode(s)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64url input: {e}") from e


def json_encode(value: Any) -> bytes:
    """Compact UTF-8 JSON, as used for protected headers.

    Raises:
        ValueError: if the value holds NaN or an infinity, or is nested too deeply
    """
    try:
        text = json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except RecursionError as e:
        raise ValueError("JSON nesting too deep") from e
    return text.encode("utf-8")


def _reject_duplicates(pairs: List[Tuple[str, Any]]) -> dict:
    obj: dict = {}
    for name, value in pairs:
        if name in obj:
            raise ValueError(f"Duplicate member name: {name}")
        obj[name] = value
    return obj


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON constant: {name}")


def json_decode_object(data: Union[bytes, str]) -> dict:
    """Parse a JSON object, rejecting duplicate member names.

    Raises:
        ValueError: if the data is not UTF-8 JSON, is nested too deeply, uses
            NaN or Infinity, or is not a JSON object
    """
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ValueError(f"JSON text is not valid UTF-8: {e}") from e

    try:
        value = json.loads(data, object_pairs_hook=_reject_duplicates, parse_constant=_reject_constant)
    except RecursionError as e:
        raise ValueError("JSON nesting too deep") from e
    if not isinstance(value, dict):
        raise ValueError("JSON value is not an object")
    return value
