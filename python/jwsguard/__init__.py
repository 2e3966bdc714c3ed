"""jwsguard: JSON Web Signature (RFC 7515) creation and verification with strict key and header checks."""

from .algorithms import (
    ALGORITHM_PARAMETERS,
    all_algorithms,
    lookup,
    validate_allowed_algorithms,
)
from .compact import (
    create_compact_jws,
    verify_compact_jws,
)
from .encoding import (
    base64url_decode,
    base64url_encode,
)
from .flattened import (
    create_flattened_jws,
    verify_flattened_jws,
)
from .general import (
    Signer,
    create_general_jws,
    verify_general_jws,
)
from .header import (
    is_disjoint,
    validate_header,
)
from .jwk import (
    jwk_thumbprint,
    public_jwk,
)
from .keys import (
    JwsKey,
    load_pem_private_key,
    load_pem_public_key,
    validate_key,
)
from .signature import (
    create_signature,
    verify_signature,
)
from .types import (
    REGISTERED_HEADER_PARAMETERS,
    Algorithm,
    AlgorithmFamily,
    AlgorithmParameters,
    AsymmetricKeyType,
    ErrorCode,
    JoseHeader,
    JwsError,
    KeyKind,
    KeyUsage,
    VerifiedJws,
    VerifierConfig,
)

__version__ = "0.1.0"

__all__ = [
    # Types
    "Algorithm",
    "AlgorithmFamily",
    "AlgorithmParameters",
    "AsymmetricKeyType",
    "KeyKind",
    "KeyUsage",
    "ErrorCode",
    "JwsError",
    "JoseHeader",
    "VerifiedJws",
    "VerifierConfig",
    "REGISTERED_HEADER_PARAMETERS",
    # Encoding
    "base64url_encode",
    "base64url_decode",
    # Algorithms
    "ALGORITHM_PARAMETERS",
    "all_algorithms",
    "lookup",
    "validate_allowed_algorithms",
    # Keys
    "JwsKey",
    "load_pem_private_key",
    "load_pem_public_key",
    "validate_key",
    # Signature
    "create_signature",
    "verify_signature",
    # Header
    "is_disjoint",
    "validate_header",
    # JWK
    "public_jwk",
    "jwk_thumbprint",
    # Serialization
    "create_compact_jws",
    "verify_compact_jws",
    "create_flattened_jws",
    "verify_flattened_jws",
    "Signer",
    "create_general_jws",
    "verify_general_jws",
]
