"""Cryptographic provider for jwsguard.

Thin wrappers over the ``cryptography`` primitives. Keys reaching these
functions have already been validated; signature mismatches are reported as
``False`` and never raised.
"""

import math

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import constant_time, hashes, hmac
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature, encode_dss_signature


def constant_time_equals(a: bytes, b: bytes) -> bool:
    """Compare two byte strings in time independent of where they differ."""
    if len(a) != len(b):
        return False
    return constant_time.bytes_eq(a, b)


def hmac_digest(hash_algorithm: hashes.HashAlgorithm, key: bytes, data: bytes) -> bytes:
    """HMAC of ``data`` under ``key``."""
    h = hmac.HMAC(key, hash_algorithm)
    h.update(data)
    return h.finalize()


def sign_rsa_pkcs1(hash_algorithm: hashes.HashAlgorithm, key: rsa.RSAPrivateKey, data: bytes) -> bytes:
    """Sign with RSASSA-PKCS1-v1_5."""
    return key.sign(data, padding.PKCS1v15(), hash_algorithm)


def verify_rsa_pkcs1(hash_algorithm: hashes.HashAlgorithm, key: rsa.RSAPublicKey, data: bytes, signature: bytes) -> bool:
    """Verify an RSASSA-PKCS1-v1_5 signature."""
    try:
        key.verify(signature, data, padding.PKCS1v15(), hash_algorithm)
        return True
    except InvalidSignature:
        return False


def _pss(hash_algorithm: hashes.HashAlgorithm, salt_length: int) -> padding.PSS:
    return padding.PSS(mgf=padding.MGF1(hash_algorithm), salt_length=salt_length)


def sign_rsa_pss(hash_algorithm: hashes.HashAlgorithm, key: rsa.RSAPrivateKey, data: bytes, salt_length: int) -> bytes:
    """Sign with RSASSA-PSS, MGF1 over the same hash."""
    return key.sign(data, _pss(hash_algorithm, salt_length), hash_algorithm)


def verify_rsa_pss(
    hash_algorithm: hashes.HashAlgorithm,
    key: rsa.RSAPublicKey,
    data: bytes,
    signature: bytes,
    salt_length: int,
) -> bool:
    """Verify an RSASSA-PSS signature with the given salt length."""
    try:
        key.verify(signature, data, _pss(hash_algorithm, salt_length), hash_algorithm)
        return True
    except InvalidSignature:
        return False


def ec_coordinate_bytes(curve: ec.EllipticCurve) -> int:
    """Byte length of one signature component for a curve (32, 48, 66)."""
    return math.ceil(curve.key_size / 8)


def sign_ecdsa(hash_algorithm: hashes.HashAlgorithm, key: ec.EllipticCurvePrivateKey, data: bytes) -> bytes:
    """Sign and return the fixed-width ``r || s`` form used by JWS."""
    der = key.sign(data, ec.ECDSA(hash_algorithm))
    r, s = decode_dss_signature(der)
    size = ec_coordinate_bytes(key.curve)
    return r.to_bytes(size, byteorder="big") + s.to_bytes(size, byteorder="big")


def verify_ecdsa(hash_algorithm: hashes.HashAlgorithm, key: ec.EllipticCurvePublicKey, data: bytes, signature: bytes) -> bool:
    """Verify a fixed-width ``r || s`` signature."""
    size = ec_coordinate_bytes(key.curve)
    if len(signature) != 2 * size:
        return False
    r = int.from_bytes(signature[:size], byteorder="big")
    s = int.from_bytes(signature[size:], byteorder="big")
    try:
        key.verify(encode_dss_signature(r, s), data, ec.ECDSA(hash_algorithm))
        return True
    except InvalidSignature:
        return False
