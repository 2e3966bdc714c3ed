"""JWK (JSON Web Key) helpers for the "jwk" header parameter."""

import hashlib
import json

from cryptography.hazmat.primitives.asymmetric import ec, rsa

from .crypto import ec_coordinate_bytes
from .encoding import base64url_encode
from .keys import JwsKey
from .types import ErrorCode, JwsError, KeyKind

_JWK_CURVES = {
    "secp256r1": "P-256",
    "secp384r1": "P-384",
    "secp521r1": "P-521",
}

_THUMBPRINT_MEMBERS = {
    "EC": ("crv", "kty", "x", "y"),
    "RSA": ("e", "kty", "n"),
}


def _int_to_base64url(value: int, length: int = 0) -> str:
    if length == 0:
        length = max(1, (value.bit_length() + 7) // 8)
    return base64url_encode(value.to_bytes(length, byteorder="big"))


def public_jwk(key: JwsKey) -> dict:
    """Export the public part of an RSA or EC key as a JWK dict.

    The result carries no private members and is accepted by the "jwk"
    header validator.
    """
    if key.kind == KeyKind.SECRET:
        raise JwsError(
            ErrorCode.INVALID_KEY_TYPE,
            "Secret keys cannot be published in a JWK header",
            expected=KeyKind.PUBLIC.value,
        )

    public_key = key.public_key().material

    if isinstance(public_key, rsa.RSAPublicKey):
        numbers = public_key.public_numbers()
        return {
            "kty": "RSA",
            "n": _int_to_base64url(numbers.n),
            "e": _int_to_base64url(numbers.e),
        }

    if isinstance(public_key, ec.EllipticCurvePublicKey):
        crv = _JWK_CURVES.get(public_key.curve.name)
        if crv is None:
            raise JwsError(
                ErrorCode.INVALID_CURVE,
                f"Curve {public_key.curve.name} has no JWS algorithm",
                expected=sorted(_JWK_CURVES.values()),
            )
        numbers = public_key.public_numbers()
        size = ec_coordinate_bytes(public_key.curve)
        return {
            "kty": "EC",
            "crv": crv,
            "x": _int_to_base64url(numbers.x, size),
            "y": _int_to_base64url(numbers.y, size),
        }

    raise TypeError(f"Unsupported key object: {type(public_key).__name__}")


def jwk_thumbprint(jwk: dict) -> str:
    """Compute the JWK thumbprint per RFC 7638 (SHA-256, base64url).

    SHA-256 of canonical JSON with the required members in lexicographic order.
    """
    members = _THUMBPRINT_MEMBERS.get(jwk.get("kty"))
    if members is None:
        raise ValueError(f"Unsupported key type for thumbprint: {jwk.get('kty')}")
    missing = [m for m in members if m not in jwk]
    if missing:
        raise ValueError(f"JWK is missing required members: {', '.join(missing)}")

    canonical = json.dumps({m: jwk[m] for m in members}, separators=(",", ":"), sort_keys=True)
    return base64url_encode(hashlib.sha256(canonical.encode("utf-8")).digest())
