"""Signature engine for jwsguard.

Validates the key for the requested algorithm and usage, then dispatches on
the algorithm family to the cryptographic provider.
"""

import logging
from typing import Union

from cryptography.exceptions import UnsupportedAlgorithm

from . import crypto
from .algorithms import hash_algorithm, lookup
from .keys import JwsKey, validate_key
from .types import AlgorithmFamily, ErrorCode, JwsError, KeyUsage

logger = logging.getLogger(__name__)


def _to_bytes(signing_input: Union[str, bytes]) -> bytes:
    if isinstance(signing_input, str):
        return signing_input.encode("ascii")
    return bytes(signing_input)


def create_signature(algorithm: str, key: JwsKey, signing_input: Union[str, bytes]) -> bytes:
    """Sign the signing input with a key validated for ``algorithm``.

    Raises:
        JwsError: a key error if the key is ineligible, SIGNING_FAILED if the
            provider fails
    """
    params = lookup(algorithm)
    validate_key(key, params.algorithm, KeyUsage.SIGN)
    data = _to_bytes(signing_input)
    hash_alg = hash_algorithm(params)

    try:
        if params.family == AlgorithmFamily.HMAC:
            return crypto.hmac_digest(hash_alg, key.material, data)
        elif params.family == AlgorithmFamily.RSA:
            return crypto.sign_rsa_pkcs1(hash_alg, key.material, data)
        elif params.family == AlgorithmFamily.RSA_PSS:
            return crypto.sign_rsa_pss(hash_alg, key.material, data, params.digest_bytes)
        elif params.family == AlgorithmFamily.ECDSA:
            return crypto.sign_ecdsa(hash_alg, key.material, data)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        logger.debug("Provider failed to sign with %s", params.algorithm.value)
        raise JwsError(
            ErrorCode.SIGNING_FAILED,
            f"Signing with {params.algorithm.value} failed: {e}",
            algorithm=params.algorithm.value,
        ) from e

    raise AssertionError(f"Unhandled algorithm family: {params.family.value}")


def verify_signature(algorithm: str, key: JwsKey, signing_input: Union[str, bytes], signature: bytes) -> bool:
    """Verify a signature over the signing input.

    Returns False when the signature does not match.

    Raises:
        JwsError: a key error if the key is ineligible; INVALID_SIGNATURE if an
            ECDSA signature does not have the algorithm's fixed length
    """
    params = lookup(algorithm)
    validate_key(key, params.algorithm, KeyUsage.VERIFY)
    data = _to_bytes(signing_input)
    signature = bytes(signature)
    hash_alg = hash_algorithm(params)

    if params.family == AlgorithmFamily.HMAC:
        expected = crypto.hmac_digest(hash_alg, key.material, data)
        return crypto.constant_time_equals(signature, expected)
    elif params.family == AlgorithmFamily.RSA:
        return crypto.verify_rsa_pkcs1(hash_alg, key.material, data, signature)
    elif params.family == AlgorithmFamily.RSA_PSS:
        return crypto.verify_rsa_pss(hash_alg, key.material, data, signature, params.digest_bytes)
    elif params.family == AlgorithmFamily.ECDSA:
        if len(signature) != params.signature_bytes:
            logger.debug("Rejected %s signature of %d bytes", params.algorithm.value, len(signature))
            raise JwsError(
                ErrorCode.INVALID_SIGNATURE,
                f"Signature for {params.algorithm.value} must be {params.signature_bytes} bytes, got {len(signature)}",
                algorithm=params.algorithm.value,
                expected=params.signature_bytes,
            )
        return crypto.verify_ecdsa(hash_alg, key.material, data, signature)

    raise AssertionError(f"Unhandled algorithm family: {params.family.value}")
