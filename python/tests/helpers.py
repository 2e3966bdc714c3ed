"""Shared key builders for the jwsguard tests."""

from functools import lru_cache

from cryptography.hazmat.primitives.asymmetric import ec, rsa

from jwsguard import JwsKey, base64url_decode, base64url_encode, lookup
from jwsguard.types import AlgorithmFamily

_CURVES = {
    "secp256r1": ec.SECP256R1,
    "secp384r1": ec.SECP384R1,
    "secp521r1": ec.SECP521R1,
}


@lru_cache(maxsize=None)
def rsa_private_key(bits=2048):
    return rsa.generate_private_key(public_exponent=65537, key_size=bits)


@lru_cache(maxsize=None)
def ec_private_key(curve_name):
    return ec.generate_private_key(_CURVES[curve_name]())


def secret_key(size=64, fill=b"k"):
    return JwsKey.secret(fill * size)


def key_pair(alg):
    """Return a (signing key, verification key) pair eligible for ``alg``."""
    params = lookup(alg)
    if params.family == AlgorithmFamily.HMAC:
        key = secret_key(params.min_key_bytes)
        return key, key
    if params.family == AlgorithmFamily.ECDSA:
        private = JwsKey.from_cryptography(ec_private_key(params.curve_name))
    else:
        private = JwsKey.from_cryptography(
            rsa_private_key(),
            rsa_pss=params.family == AlgorithmFamily.RSA_PSS,
        )
    return private, private.public_key()


def other_key_pair(alg):
    """A second, unrelated key pair for ``alg``."""
    params = lookup(alg)
    if params.family == AlgorithmFamily.HMAC:
        key = secret_key(params.min_key_bytes, fill=b"z")
        return key, key
    if params.family == AlgorithmFamily.ECDSA:
        private = JwsKey.from_cryptography(ec.generate_private_key(_CURVES[params.curve_name]()))
    else:
        private = JwsKey.from_cryptography(
            rsa_private_key(3072),
            rsa_pss=params.family == AlgorithmFamily.RSA_PSS,
        )
    return private, private.public_key()


def flip_bit(segment):
    """Flip one bit in the first byte of a base64url segment's decoded value."""
    data = bytearray(base64url_decode(segment))
    data[0] ^= 0x01
    return base64url_encode(bytes(data))
