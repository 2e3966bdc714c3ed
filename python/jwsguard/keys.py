"""Key handles and per-algorithm key validation for jwsguard.

A JwsKey wraps caller-owned key material and exposes only the attributes the
validator needs: kind, asymmetric key type, modulus size or secret length,
and curve name. The library never copies or persists the wrapped material.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from .algorithms import lookup
from .types import (
    AlgorithmFamily,
    AsymmetricKeyType,
    ErrorCode,
    JwsError,
    KeyKind,
    KeyUsage,
)

logger = logging.getLogger(__name__)

_KEY_TYPES = (
    rsa.RSAPrivateKey,
    rsa.RSAPublicKey,
    ec.EllipticCurvePrivateKey,
    ec.EllipticCurvePublicKey,
)


@dataclass(frozen=True, repr=False)
class JwsKey:
    """Opaque handle to key material used for signing or verification."""

    kind: KeyKind
    material: Any
    asymmetric_key_type: Optional[AsymmetricKeyType] = None

    @classmethod
    def secret(cls, secret: Union[bytes, bytearray, str]) -> "JwsKey":
        """Wrap an HMAC secret. Strings are UTF-8 encoded."""
        if isinstance(secret, str):
            secret = secret.encode("utf-8")
        if not isinstance(secret, (bytes, bytearray)):
            raise TypeError("HMAC secret must be bytes")
        return cls(kind=KeyKind.SECRET, material=bytes(secret))

    @classmethod
    def from_cryptography(cls, key: Any, rsa_pss: bool = False) -> "JwsKey":
        """Wrap a cryptography RSA or EC key object.

        RSA keys are typed ``rsa`` unless ``rsa_pss`` is set, in which case
        they are usable only with the PS* algorithms.
        """
        if not isinstance(key, _KEY_TYPES):
            raise TypeError(f"Unsupported key object: {type(key).__name__}")

        if isinstance(key, (rsa.RSAPrivateKey, rsa.RSAPublicKey)):
            key_type = AsymmetricKeyType.RSA_PSS if rsa_pss else AsymmetricKeyType.RSA
        else:
            if rsa_pss:
                raise TypeError("rsa_pss applies only to RSA keys")
            key_type = AsymmetricKeyType.EC

        if isinstance(key, (rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey)):
            kind = KeyKind.PRIVATE
        else:
            kind = KeyKind.PUBLIC
        return cls(kind=kind, material=key, asymmetric_key_type=key_type)

    @property
    def symmetric_key_size(self) -> Optional[int]:
        """Secret length in bytes, or None for asymmetric keys."""
        if self.kind != KeyKind.SECRET:
            return None
        return len(self.material)

    @property
    def modulus_bits(self) -> Optional[int]:
        """RSA modulus size in bits, or None for other keys."""
        if isinstance(self.material, (rsa.RSAPrivateKey, rsa.RSAPublicKey)):
            return self.material.key_size
        return None

    @property
    def curve_name(self) -> Optional[str]:
        """cryptography curve name (e.g. ``secp256r1``), or None for other keys."""
        if isinstance(self.material, (ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey)):
            return self.material.curve.name
        return None

    def public_key(self) -> "JwsKey":
        """The public half of a private key (public keys return themselves)."""
        if self.kind == KeyKind.PUBLIC:
            return self
        if self.kind == KeyKind.SECRET:
            raise JwsError(ErrorCode.INVALID_KEY_TYPE, "Secret keys have no public half", expected=KeyKind.PRIVATE.value)
        return JwsKey(
            kind=KeyKind.PUBLIC,
            material=self.material.public_key(),
            asymmetric_key_type=self.asymmetric_key_type,
        )

    def __repr__(self) -> str:
        detail = self.asymmetric_key_type.value if self.asymmetric_key_type else f"{self.symmetric_key_size} bytes"
        return f"JwsKey({self.kind.value}, {detail})"


def load_pem_private_key(private_key_pem: Union[str, bytes], password: Optional[bytes] = None, rsa_pss: bool = False) -> JwsKey:
    """Load a PEM-encoded private key into a JwsKey."""
    if isinstance(private_key_pem, str):
        private_key_pem = private_key_pem.encode("utf-8")
    private_key = serialization.load_pem_private_key(private_key_pem, password=password)
    return JwsKey.from_cryptography(private_key, rsa_pss=rsa_pss)


def load_pem_public_key(public_key_pem: Union[str, bytes], rsa_pss: bool = False) -> JwsKey:
    """Load a PEM-encoded SubjectPublicKeyInfo key into a JwsKey."""
    if isinstance(public_key_pem, str):
        public_key_pem = public_key_pem.encode("utf-8")
    public_key = serialization.load_pem_public_key(public_key_pem)
    return JwsKey.from_cryptography(public_key, rsa_pss=rsa_pss)


def _reject(code: ErrorCode, message: str, algorithm: str, expected: Any) -> JwsError:
    logger.debug("Key rejected for %s: %s", algorithm, code.value)
    return JwsError(code, message, algorithm=algorithm, expected=expected)


def validate_key(key: JwsKey, algorithm: str, usage: Union[KeyUsage, str]) -> None:
    """Check that a key is structurally eligible for an algorithm and usage.

    Checks run in order: key kind, asymmetric key type, then size or curve.

    Raises:
        JwsError: INVALID_KEY_TYPE, INVALID_ASYMMETRIC_KEY_TYPE,
            INVALID_KEY_SIZE or INVALID_CURVE on the first failed check;
            UNSUPPORTED_ALGORITHM for an unknown algorithm
        TypeError: if ``key`` is not a JwsKey
    """
    if not isinstance(key, JwsKey):
        raise TypeError("The provided key must be a JwsKey")

    params = lookup(algorithm)
    alg = params.algorithm.value
    expected_kind = params.key_kind_for(KeyUsage(usage))

    if key.kind != expected_kind:
        raise _reject(
            ErrorCode.INVALID_KEY_TYPE,
            f'Invalid key type for {alg}. Expected key of type "{expected_kind.value}"',
            alg,
            expected_kind.value,
        )

    if params.family == AlgorithmFamily.HMAC:
        size = key.symmetric_key_size
        if not size or size < params.min_key_bytes:
            raise _reject(
                ErrorCode.INVALID_KEY_SIZE,
                f"Invalid key size for {alg}. Expected a key of size with at least {params.min_key_bytes} bytes.",
                alg,
                params.min_key_bytes,
            )
        return

    if key.asymmetric_key_type != params.asymmetric_key_type:
        raise _reject(
            ErrorCode.INVALID_ASYMMETRIC_KEY_TYPE,
            f"Invalid asymmetric key type for {alg}. Expected asymmetric key of {params.asymmetric_key_type.value}",
            alg,
            params.asymmetric_key_type.value,
        )

    if params.family in (AlgorithmFamily.RSA, AlgorithmFamily.RSA_PSS):
        bits = key.modulus_bits
        if not bits or bits < params.min_key_bits:
            min_bytes = params.min_key_bits // 8
            raise _reject(
                ErrorCode.INVALID_KEY_SIZE,
                f"Invalid key size for {alg}. Expected a key of size with at least {min_bytes} bytes.",
                alg,
                min_bytes,
            )
    elif params.family == AlgorithmFamily.ECDSA:
        if key.curve_name != params.curve_name:
            raise _reject(
                ErrorCode.INVALID_CURVE,
                f"Invalid curve for {alg}. Expected {params.jwk_curve} ({params.curve_name}), got {key.curve_name}.",
                alg,
                params.curve_name,
            )
