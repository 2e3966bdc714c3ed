"""General JWS JSON serialization for jwsguard.

A general JWS carries one payload and any number of signature entries, each
with its own protected and unprotected header.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Union

from .algorithms import validate_allowed_algorithms
from .encoding import base64url_encode
from .flattened import load_jws_object, payload_bytes, sign_entry, verify_entry
from .keys import JwsKey
from .types import ErrorCode, JwsError, VerifiedJws, VerifierConfig

logger = logging.getLogger(__name__)

# Failures that mean "this entry is not for this key" rather than a malformed JWS.
_SKIPPABLE_CODES = frozenset(
    {
        ErrorCode.UNSUPPORTED_ALGORITHM,
        ErrorCode.INVALID_KEY_TYPE,
        ErrorCode.INVALID_KEY_SIZE,
        ErrorCode.INVALID_ASYMMETRIC_KEY_TYPE,
        ErrorCode.INVALID_CURVE,
        ErrorCode.INVALID_SIGNATURE,
    }
)


@dataclass
class Signer:
    key: JwsKey
    protected_header: Optional[dict] = None
    unprotected_header: Optional[dict] = None


def _as_signer(signer: Union[Signer, dict]) -> Signer:
    if isinstance(signer, Signer):
        return signer
    if isinstance(signer, dict) and "key" in signer:
        return Signer(
            key=signer["key"],
            protected_header=signer.get("protected_header"),
            unprotected_header=signer.get("unprotected_header"),
        )
    raise TypeError("Each signer must be a Signer or a dict with a 'key'")


def create_general_jws(payload: Union[bytes, str], signers: Sequence[Union[Signer, dict]]) -> Dict[str, Any]:
    """Create a JWS in general JSON serialization, one signature per signer.

    Raises:
        JwsError: INVALID_FORMAT if no signer is given; header or key errors
            from any individual signer
    """
    if not signers:
        raise JwsError(ErrorCode.INVALID_FORMAT, "At least one signature must be provided")

    encoded_payload = base64url_encode(payload_bytes(payload))
    signatures = []
    for s in signers:
        signer = _as_signer(s)
        signatures.append(sign_entry(encoded_payload, signer.key, signer.protected_header, signer.unprotected_header))

    return {"payload": encoded_payload, "signatures": signatures}


def verify_general_jws(
    jws: Union[dict, str, bytes],
    key: JwsKey,
    config: Optional[VerifierConfig] = None,
) -> VerifiedJws:
    """Verify a JWS in general JSON serialization.

    Entries are tried in order. Entries that use another algorithm or key
    type, or whose signature does not match, are skipped; any malformed entry
    fails the whole JWS.

    Returns:
        VerifiedJws for the first entry that verifies with ``key``.

    Raises:
        JwsError: INVALID_FORMAT for a malformed JWS, the error of a malformed
            entry, or INVALID_SIGNATURE if no entry verifies
    """
    if config is None:
        config = VerifierConfig()
    # unknown allow-list entries must raise here, not be skipped per entry
    validate_allowed_algorithms(config.allowed_algorithms)

    obj = load_jws_object(jws)
    encoded_payload = obj.get("payload")
    signatures = obj.get("signatures")

    if not isinstance(encoded_payload, str):
        raise JwsError(ErrorCode.INVALID_FORMAT, "Invalid JWS: payload must be a string")
    if not isinstance(signatures, list) or not signatures:
        raise JwsError(ErrorCode.INVALID_FORMAT, "Invalid JWS: signatures must be a non-empty array")

    for index, entry in enumerate(signatures):
        try:
            return verify_entry(encoded_payload, entry, key, config)
        except JwsError as e:
            if e.code not in _SKIPPABLE_CODES:
                raise
            logger.debug("Signature entry %d skipped: %s", index, e.code.value)

    raise JwsError(ErrorCode.INVALID_SIGNATURE, "No signature in the JWS verifies with the provided key")
