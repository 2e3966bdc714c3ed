"""jwsguard type constants, enums, records, and the error class."""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional


class Algorithm(str, Enum):
    # HMAC with SHA-2
    HS256 = "HS256"
    HS384 = "HS384"
    HS512 = "HS512"
    # RSASSA-PKCS1-v1_5
    RS256 = "RS256"
    RS384 = "RS384"
    RS512 = "RS512"
    # ECDSA
    ES256 = "ES256"
    ES384 = "ES384"
    ES512 = "ES512"
    # RSASSA-PSS
    PS256 = "PS256"
    PS384 = "PS384"
    PS512 = "PS512"


class AlgorithmFamily(str, Enum):
    HMAC = "HMAC"
    RSA = "RSA"
    ECDSA = "ECDSA"
    RSA_PSS = "RSA-PSS"


class KeyKind(str, Enum):
    SECRET = "secret"
    PUBLIC = "public"
    PRIVATE = "private"


class KeyUsage(str, Enum):
    SIGN = "sign"
    VERIFY = "verify"


class AsymmetricKeyType(str, Enum):
    RSA = "rsa"
    RSA_PSS = "rsa-pss"
    EC = "ec"


REGISTERED_HEADER_PARAMETERS = frozenset(
    {
        "alg",
        "jku",
        "jwk",
        "kid",
        "x5u",
        "x5c",
        "x5t",
        "x5t#S256",
        "typ",
        "cty",
        "crit",
    }
)


class ErrorCode(str, Enum):
    UNSUPPORTED_ALGORITHM = "UNSUPPORTED_ALGORITHM"
    INVALID_KEY_TYPE = "INVALID_KEY_TYPE"
    INVALID_KEY_SIZE = "INVALID_KEY_SIZE"
    INVALID_ASYMMETRIC_KEY_TYPE = "INVALID_ASYMMETRIC_KEY_TYPE"
    INVALID_CURVE = "INVALID_CURVE"
    INVALID_FORMAT = "INVALID_FORMAT"
    INVALID_PROTECTED_HEADER = "INVALID_PROTECTED_HEADER"
    INVALID_UNPROTECTED_HEADER = "INVALID_UNPROTECTED_HEADER"
    HEADER_PARAM_INVALID = "HEADER_PARAM_INVALID"
    HEADER_PARAMETERS_NOT_DISJOINT = "HEADER_PARAMETERS_NOT_DISJOINT"
    MISSING_HEADERS = "MISSING_HEADERS"
    INVALID_SIGNATURE_ENCODING = "INVALID_SIGNATURE_ENCODING"
    INVALID_PAYLOAD = "INVALID_PAYLOAD"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    SIGNING_FAILED = "SIGNING_FAILED"


KEY_ERROR_CODES = frozenset(
    {
        ErrorCode.INVALID_KEY_TYPE,
        ErrorCode.INVALID_KEY_SIZE,
        ErrorCode.INVALID_ASYMMETRIC_KEY_TYPE,
        ErrorCode.INVALID_CURVE,
    }
)


class JwsError(Exception):
    """jwsguard error with an error code and optional structured context.

    Attributes:
        code: the ErrorCode discriminating the failure
        algorithm: the algorithm involved, when known
        parameter: the header parameter that failed validation, when relevant
        expected: the constraint that was not met (key kind, minimum size, curve...)
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        algorithm: Optional[str] = None,
        parameter: Optional[str] = None,
        expected: Any = None,
    ):
        super().__init__(message)
        self.code = code
        self.algorithm = algorithm
        self.parameter = parameter
        self.expected = expected

    @property
    def is_key_error(self) -> bool:
        """True if the failure is about key eligibility."""
        return self.code in KEY_ERROR_CODES

    def __repr__(self) -> str:
        return f"JwsError({self.code.value}, {str(self)!r})"


@dataclass(frozen=True)
class AlgorithmParameters:
    algorithm: Algorithm
    family: AlgorithmFamily
    hash_name: str
    digest_bytes: int
    sign_key_kind: KeyKind
    verify_key_kind: KeyKind
    asymmetric_key_type: Optional[AsymmetricKeyType] = None
    min_key_bytes: Optional[int] = None
    min_key_bits: Optional[int] = None
    curve_name: Optional[str] = None
    jwk_curve: Optional[str] = None
    signature_bytes: Optional[int] = None

    def key_kind_for(self, usage: KeyUsage) -> KeyKind:
        """The key kind required for ``usage``."""
        return self.sign_key_kind if usage == KeyUsage.SIGN else self.verify_key_kind


@dataclass(frozen=True)
class JoseHeader:
    """A JOSE header that has passed validation.

    ``parameters`` is the disjoint union of the protected and unprotected
    headers; only ``alg`` is consumed by the signature engine.
    """

    alg: Algorithm
    parameters: Dict[str, Any]
    protected: Optional[Dict[str, Any]] = None
    unprotected: Optional[Dict[str, Any]] = None

    @property
    def kid(self) -> Optional[str]:
        return self.parameters.get("kid")

    @property
    def typ(self) -> Optional[str]:
        return self.parameters.get("typ")

    @property
    def cty(self) -> Optional[str]:
        return self.parameters.get("cty")

    @property
    def jku(self) -> Optional[str]:
        return self.parameters.get("jku")

    @property
    def jwk(self) -> Optional[dict]:
        return self.parameters.get("jwk")

    @property
    def crit(self) -> Optional[List[str]]:
        return self.parameters.get("crit")


@dataclass(frozen=True)
class VerifiedJws:
    payload: bytes
    header: JoseHeader

    @property
    def protected_header(self) -> Optional[Dict[str, Any]]:
        return self.header.protected

    @property
    def unprotected_header(self) -> Optional[Dict[str, Any]]:
        return self.header.unprotected

    def payload_text(self, encoding: str = "utf-8") -> str:
        """The payload decoded as text."""
        return self.payload.decode(encoding)

    def payload_json(self) -> Any:
        """The payload parsed as JSON."""
        return json.loads(self.payload)


@dataclass
class VerifierConfig:
    allowed_algorithms: Optional[List[str]] = None
