"""JWS compact serialization for jwsguard."""

from typing import Optional, Union

from .flattened import create_flattened_jws, verify_flattened_jws
from .keys import JwsKey
from .types import ErrorCode, JwsError, VerifiedJws, VerifierConfig


def create_compact_jws(payload: Union[bytes, str], key: JwsKey, protected_header: dict) -> str:
    """Create a JWS in compact serialization.

    Compact JWS has no unprotected header, so ``protected_header`` is required
    and must carry "alg".
    """
    if protected_header is None:
        raise JwsError(ErrorCode.MISSING_HEADERS, "Compact serialization requires a protected header")

    jws = create_flattened_jws(payload, key, protected_header=protected_header)
    return f"{jws['protected']}.{jws['payload']}.{jws['signature']}"


def verify_compact_jws(
    jws: Union[str, bytes],
    key: JwsKey,
    config: Optional[VerifierConfig] = None,
) -> VerifiedJws:
    """Verify a JWS in compact serialization.

    Raises:
        JwsError: INVALID_FORMAT if the JWS does not have exactly three
            segments, otherwise as for flattened verification
    """
    if isinstance(jws, bytes):
        try:
            jws = jws.decode("ascii")
        except UnicodeDecodeError as e:
            raise JwsError(ErrorCode.INVALID_FORMAT, "JWS must be ASCII text") from e
    if not isinstance(jws, str):
        raise JwsError(ErrorCode.INVALID_FORMAT, "JWS must be a string")

    parts = jws.split(".")
    if len(parts) != 3:
        raise JwsError(ErrorCode.INVALID_FORMAT, f"JWS must have 3 parts, got {len(parts)}")

    encoded_protected, encoded_payload, encoded_signature = parts
    return verify_flattened_jws(
        {
            "protected": encoded_protected,
            "payload": encoded_payload,
            "signature": encoded_signature,
        },
        key,
        config,
    )
