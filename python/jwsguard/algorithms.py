"""Algorithm registry for jwsguard.

The registry is a read-only table built once at import. Supported algorithms:
  - HS256 / HS384 / HS512 (HMAC with SHA-2, secret key >= digest size)
  - RS256 / RS384 / RS512 (RSASSA-PKCS1-v1_5, modulus >= 2048 bits)
  - ES256 / ES384 / ES512 (ECDSA over P-256 / P-384 / P-521)
  - PS256 / PS384 / PS512 (RSASSA-PSS, salt length = digest size)
"""

from types import MappingProxyType
from typing import Any, FrozenSet, Iterable, Mapping, Optional, Tuple

from cryptography.hazmat.primitives import hashes

from .types import (
    Algorithm,
    AlgorithmFamily,
    AlgorithmParameters,
    AsymmetricKeyType,
    ErrorCode,
    JwsError,
    KeyKind,
)

MIN_RSA_KEY_BITS = 2048

_HASHES = {
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
}

_EC_CURVES = {
    Algorithm.ES256: ("secp256r1", "P-256", 64),
    Algorithm.ES384: ("secp384r1", "P-384", 96),
    Algorithm.ES512: ("secp521r1", "P-521", 132),
}


def _build_table() -> Mapping[Algorithm, AlgorithmParameters]:
    table = {}
    for alg in Algorithm:
        bits = int(alg.value[2:])
        hash_name = f"sha{bits}"
        digest_bytes = bits // 8
        prefix = alg.value[:2]

        if prefix == "HS":
            params = AlgorithmParameters(
                algorithm=alg,
                family=AlgorithmFamily.HMAC,
                hash_name=hash_name,
                digest_bytes=digest_bytes,
                sign_key_kind=KeyKind.SECRET,
                verify_key_kind=KeyKind.SECRET,
                min_key_bytes=digest_bytes,
            )
        elif prefix == "RS" or prefix == "PS":
            params = AlgorithmParameters(
                algorithm=alg,
                family=AlgorithmFamily.RSA if prefix == "RS" else AlgorithmFamily.RSA_PSS,
                hash_name=hash_name,
                digest_bytes=digest_bytes,
                sign_key_kind=KeyKind.PRIVATE,
                verify_key_kind=KeyKind.PUBLIC,
                asymmetric_key_type=AsymmetricKeyType.RSA if prefix == "RS" else AsymmetricKeyType.RSA_PSS,
                min_key_bits=MIN_RSA_KEY_BITS,
            )
        elif prefix == "ES":
            curve_name, jwk_curve, signature_bytes = _EC_CURVES[alg]
            params = AlgorithmParameters(
                algorithm=alg,
                family=AlgorithmFamily.ECDSA,
                hash_name=hash_name,
                digest_bytes=digest_bytes,
                sign_key_kind=KeyKind.PRIVATE,
                verify_key_kind=KeyKind.PUBLIC,
                asymmetric_key_type=AsymmetricKeyType.EC,
                curve_name=curve_name,
                jwk_curve=jwk_curve,
                signature_bytes=signature_bytes,
            )
        else:
            raise AssertionError(f"No parameter set for {alg.value}")

        table[alg] = params
    return MappingProxyType(table)


ALGORITHM_PARAMETERS: Mapping[Algorithm, AlgorithmParameters] = _build_table()

_ALGORITHM_IDS = frozenset(alg.value for alg in Algorithm)


def all_algorithms() -> Tuple[str, ...]:
    """All supported algorithm identifiers, in registry order."""
    return tuple(alg.value for alg in ALGORITHM_PARAMETERS)


def is_supported(alg: Any) -> bool:
    """True if ``alg`` is a registered algorithm identifier."""
    return isinstance(alg, str) and alg in _ALGORITHM_IDS


def lookup(alg: Any) -> AlgorithmParameters:
    """Look up the parameter set for an algorithm identifier.

    Raises:
        JwsError: UNSUPPORTED_ALGORITHM if the identifier is not registered
    """
    if not is_supported(alg):
        raise JwsError(ErrorCode.UNSUPPORTED_ALGORITHM, f"Unsupported algorithm: {alg}", algorithm=str(alg))
    return ALGORITHM_PARAMETERS[Algorithm(alg)]


def validate_allowed_algorithms(allowed: Optional[Iterable[str]]) -> FrozenSet[Algorithm]:
    """Validate a caller-supplied allow-list against the registry.

    ``None`` allows every registered algorithm; an empty list allows none.

    Raises:
        JwsError: UNSUPPORTED_ALGORITHM if the list names an unknown algorithm
    """
    if allowed is None:
        return frozenset(ALGORITHM_PARAMETERS)
    if isinstance(allowed, str):
        allowed = [allowed]

    result = set()
    for alg in allowed:
        result.add(lookup(alg).algorithm)
    return frozenset(result)


def hash_algorithm(params: AlgorithmParameters) -> hashes.HashAlgorithm:
    """Fresh cryptography hash instance for an algorithm."""
    return _HASHES[params.hash_name]()
