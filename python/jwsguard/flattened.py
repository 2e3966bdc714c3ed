"""Flattened JWS JSON serialization for jwsguard.

The flattened form is also the building block for the compact and general
serializations: each signature entry is produced and checked here.
"""

import logging
from typing import Any, Dict, Optional, Union

from .encoding import base64url_decode, base64url_encode, json_decode_object, json_encode
from .header import is_json_object, validate_header
from .keys import JwsKey
from .signature import create_signature, verify_signature
from .types import ErrorCode, JwsError, VerifiedJws, VerifierConfig

logger = logging.getLogger(__name__)


def payload_bytes(payload: Union[bytes, bytearray, str]) -> bytes:
    """Normalize a payload to bytes. Strings are UTF-8 encoded."""
    if isinstance(payload, str):
        return payload.encode("utf-8")
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload)
    raise TypeError("payload must be bytes or str")


def _header_json(header: dict, code: ErrorCode) -> bytes:
    try:
        return json_encode(header)
    except ValueError as e:
        raise JwsError(code, f"Header is not representable as JSON: {e}") from e


def sign_entry(
    encoded_payload: str,
    key: JwsKey,
    protected_header: Optional[dict] = None,
    unprotected_header: Optional[dict] = None,
) -> Dict[str, Any]:
    """Validate headers and sign an already-encoded payload.

    Returns:
        Dict with the ``protected`` (if any), ``header`` (if any) and
        ``signature`` members of one signature entry.
    """
    header = validate_header(protected_header, unprotected_header)

    encoded_protected = ""
    if protected_header is not None:
        encoded_protected = base64url_encode(_header_json(protected_header, ErrorCode.INVALID_PROTECTED_HEADER))
    if unprotected_header is not None:
        _header_json(unprotected_header, ErrorCode.INVALID_UNPROTECTED_HEADER)

    signing_input = f"{encoded_protected}.{encoded_payload}"
    signature = create_signature(header.alg, key, signing_input)

    entry: Dict[str, Any] = {}
    if protected_header is not None:
        entry["protected"] = encoded_protected
    if unprotected_header is not None:
        entry["header"] = dict(unprotected_header)
    entry["signature"] = base64url_encode(signature)
    return entry


def create_flattened_jws(
    payload: Union[bytes, str],
    key: JwsKey,
    protected_header: Optional[dict] = None,
    unprotected_header: Optional[dict] = None,
) -> Dict[str, Any]:
    """Create a JWS in flattened JSON serialization.

    Raises:
        JwsError: on header validation or key eligibility failure
    """
    encoded_payload = base64url_encode(payload_bytes(payload))
    entry = sign_entry(encoded_payload, key, protected_header, unprotected_header)
    return {"payload": encoded_payload, **entry}


def load_jws_object(jws: Union[dict, str, bytes]) -> dict:
    """Accept a JWS JSON object or its serialized text."""
    if isinstance(jws, (str, bytes)):
        try:
            return json_decode_object(jws)
        except ValueError as e:
            raise JwsError(ErrorCode.INVALID_FORMAT, f"Invalid JWS: not a JSON object: {e}") from e
    if not isinstance(jws, dict):
        raise JwsError(ErrorCode.INVALID_FORMAT, "Invalid JWS: must be an object")
    return jws


def verify_entry(
    encoded_payload: str,
    entry: dict,
    key: JwsKey,
    config: VerifierConfig,
) -> VerifiedJws:
    """Verify one signature entry over an encoded payload.

    Raises:
        JwsError: the first structural, header, key or signature failure
    """
    if not isinstance(entry, dict):
        raise JwsError(ErrorCode.INVALID_FORMAT, "Invalid JWS: signature entry must be an object")

    encoded_protected = entry.get("protected")
    unprotected = entry.get("header")
    encoded_signature = entry.get("signature")

    if not isinstance(encoded_signature, str):
        raise JwsError(ErrorCode.INVALID_FORMAT, "Invalid JWS: signature must be a string")
    if encoded_protected is not None and not isinstance(encoded_protected, str):
        raise JwsError(ErrorCode.INVALID_FORMAT, "Invalid JWS: protected header must be a string")
    if unprotected is not None and not is_json_object(unprotected):
        raise JwsError(ErrorCode.INVALID_UNPROTECTED_HEADER, "Invalid JWS: header must be an object if present")

    protected = None
    if encoded_protected:
        try:
            protected = json_decode_object(base64url_decode(encoded_protected))
        except ValueError as e:
            raise JwsError(
                ErrorCode.INVALID_PROTECTED_HEADER,
                "Invalid JWS: protected header must be valid base64url-encoded JSON object",
            ) from e

    header = validate_header(protected, unprotected, config.allowed_algorithms)

    try:
        payload = base64url_decode(encoded_payload)
    except ValueError as e:
        raise JwsError(ErrorCode.INVALID_PAYLOAD, "Invalid JWS: payload must be valid base64url-encoded data") from e

    try:
        signature = base64url_decode(encoded_signature)
    except ValueError as e:
        raise JwsError(
            ErrorCode.INVALID_SIGNATURE_ENCODING,
            "Invalid JWS: signature must be valid base64url-encoded data",
        ) from e

    signing_input = f"{encoded_protected or ''}.{encoded_payload}"
    if not verify_signature(header.alg, key, signing_input, signature):
        logger.debug("Signature verification failed for %s", header.alg.value)
        raise JwsError(ErrorCode.INVALID_SIGNATURE, "Invalid signature", algorithm=header.alg.value)

    return VerifiedJws(payload=payload, header=header)


def verify_flattened_jws(
    jws: Union[dict, str, bytes],
    key: JwsKey,
    config: Optional[VerifierConfig] = None,
) -> VerifiedJws:
    """Verify a JWS in flattened JSON serialization.

    Returns:
        VerifiedJws carrying the decoded payload and validated header.

    Raises:
        JwsError: if the JWS is malformed or does not verify with ``key``
    """
    if config is None:
        config = VerifierConfig()

    obj = load_jws_object(jws)
    encoded_payload = obj.get("payload")
    if not isinstance(encoded_payload, str):
        raise JwsError(ErrorCode.INVALID_FORMAT, "Invalid JWS: payload must be a string")
    if "signatures" in obj:
        raise JwsError(ErrorCode.INVALID_FORMAT, "Invalid JWS: general serialization passed to flattened verifier")

    return verify_entry(encoded_payload, obj, key, config)
