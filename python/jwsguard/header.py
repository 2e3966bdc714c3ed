"""JOSE header validation for jwsguard.

Validation runs in a fixed order and stops at the first failure:
presence, disjointness, alg, jku, jwk, kid, typ, cty, crit.
"""

import logging
from typing import Any, Dict, Iterable, Optional
from urllib.parse import urlsplit

from .algorithms import is_supported, lookup, validate_allowed_algorithms
from .types import (
    REGISTERED_HEADER_PARAMETERS,
    Algorithm,
    AlgorithmFamily,
    ErrorCode,
    JoseHeader,
    JwsError,
)

logger = logging.getLogger(__name__)

ALLOWED_EC_CURVES = ("P-256", "P-384", "P-521")

PRIVATE_KEY_PARAMS = ("d", "p", "q", "dp", "dq", "qi", "k", "oth")


def _invalid(parameter: str, message: str) -> JwsError:
    logger.debug("Header parameter %r rejected: %s", parameter, message)
    return JwsError(ErrorCode.HEADER_PARAM_INVALID, message, parameter=parameter)


def is_json_object(value: Any) -> bool:
    """True for a dict whose member names are all strings."""
    return isinstance(value, dict) and all(isinstance(k, str) for k in value)


def is_disjoint(protected: Optional[dict], unprotected: Optional[dict]) -> bool:
    """Check that two headers share no parameter names.

    Absent or empty headers are disjoint with anything.
    """
    if not protected or not unprotected:
        return True
    return len(protected) + len(unprotected) == len(set(protected) | set(unprotected))


def validate_alg(header: Dict[str, Any], allowed_algorithms: Optional[Iterable[str]] = None) -> None:
    """The "alg" parameter must be registered and allowed."""
    alg = header.get("alg")
    if alg is None:
        raise _invalid("alg", 'The "alg" header parameter is required')

    allowed = validate_allowed_algorithms(allowed_algorithms)
    if not is_supported(alg) or Algorithm(alg) not in allowed:
        logger.debug("Algorithm %r not accepted", alg)
        raise JwsError(
            ErrorCode.UNSUPPORTED_ALGORITHM,
            f"Invalid algorithm: {alg}",
            algorithm=str(alg),
            parameter="alg",
            expected=sorted(a.value for a in allowed),
        )


def validate_jku(header: Dict[str, Any]) -> None:
    """The "jku" parameter must be an absolute https URL without query or fragment."""
    if "jku" not in header:
        return

    jku = header["jku"]
    if not isinstance(jku, str):
        raise _invalid("jku", 'The "jku" header parameter must be a string')

    try:
        url = urlsplit(jku)
        # accessing port validates it
        url.port
    except ValueError as e:
        raise _invalid("jku", 'The "jku" header parameter must be a valid URL') from e

    if not url.scheme or not url.netloc or any(c.isspace() for c in jku):
        raise _invalid("jku", 'The "jku" header parameter must be a valid URL')
    if url.scheme.lower() != "https":
        raise _invalid("jku", 'The "jku" header parameter must use HTTPS scheme')
    if url.fragment or "#" in jku:
        raise _invalid("jku", 'The "jku" header parameter must not contain fragments')
    if url.query or "?" in jku:
        raise _invalid("jku", 'The "jku" header parameter must not contain query parameters')


def _validate_ec_jwk(jwk: dict) -> None:
    crv = jwk.get("crv")
    if not isinstance(crv, str):
        raise _invalid("jwk", 'EC JWK must contain a "crv" (Curve) parameter')
    if crv not in ALLOWED_EC_CURVES:
        raise _invalid("jwk", f"Invalid curve: {crv}. Must be one of: {', '.join(ALLOWED_EC_CURVES)}")
    if not isinstance(jwk.get("x"), str):
        raise _invalid("jwk", 'EC JWK must contain an "x" coordinate parameter')
    if not isinstance(jwk.get("y"), str):
        raise _invalid("jwk", 'EC JWK must contain a "y" coordinate parameter')


def _validate_rsa_jwk(jwk: dict) -> None:
    if not isinstance(jwk.get("n"), str):
        raise _invalid("jwk", 'RSA JWK must contain a "n" (modulus) parameter')
    if not isinstance(jwk.get("e"), str):
        raise _invalid("jwk", 'RSA JWK must contain an "e" (exponent) parameter')


def validate_jwk(header: Dict[str, Any]) -> None:
    """The "jwk" parameter may only carry a public RSA or EC key matching "alg".

    Expects "alg" to have been validated already.
    """
    if "jwk" not in header:
        return

    jwk = header["jwk"]
    if not is_json_object(jwk):
        raise _invalid("jwk", 'The "jwk" header parameter must be a JSON object')

    kty = jwk.get("kty")
    if not isinstance(kty, str):
        raise _invalid("jwk", 'JWK must contain a "kty" (Key Type) parameter')
    if kty not in ("RSA", "EC"):
        raise _invalid("jwk", "Invalid key type. Must be one of: RSA, EC")

    params = lookup(header["alg"])
    alg = params.algorithm.value
    if params.family == AlgorithmFamily.HMAC:
        raise _invalid("jwk", f'The "jwk" header parameter must not be present when using {alg}')
    if params.family in (AlgorithmFamily.RSA, AlgorithmFamily.RSA_PSS) and kty != "RSA":
        raise _invalid("jwk", f'Algorithm {alg} requires an RSA key (kty: "RSA"), but got "{kty}"')
    if params.family == AlgorithmFamily.ECDSA and kty != "EC":
        raise _invalid("jwk", f'Algorithm {alg} requires an EC key (kty: "EC"), but got "{kty}"')

    if kty == "EC":
        _validate_ec_jwk(jwk)
    else:
        _validate_rsa_jwk(jwk)

    private_params = [p for p in PRIVATE_KEY_PARAMS if p in jwk]
    if private_params:
        raise _invalid("jwk", f"JWK contains private key parameters: {', '.join(private_params)}")


def validate_kid(header: Dict[str, Any]) -> None:
    """The "kid" parameter, if present, must be a non-blank string."""
    if "kid" not in header:
        return
    kid = header["kid"]
    if not isinstance(kid, str):
        raise _invalid("kid", 'The "kid" header parameter must be a string')
    if not kid.strip():
        raise _invalid("kid", 'The "kid" header parameter must not be empty')


def validate_typ(header: Dict[str, Any]) -> None:
    """The "typ" parameter, if present, must be a string."""
    if "typ" in header and not isinstance(header["typ"], str):
        raise _invalid("typ", 'The "typ" header parameter must be a string')


def validate_cty(header: Dict[str, Any]) -> None:
    """The "cty" parameter, if present, must be a string."""
    if "cty" in header and not isinstance(header["cty"], str):
        raise _invalid("cty", 'The "cty" header parameter must be a string')


def validate_crit(protected: Optional[dict], unprotected: Optional[dict]) -> None:
    """Validate the "crit" parameter.

    It must live in the protected header and list only extension parameters
    that are present in the JOSE header.
    """
    if unprotected and "crit" in unprotected:
        raise _invalid("crit", 'The "crit" header parameter must not be in the unprotected header')

    if not protected or "crit" not in protected:
        return
    crit = protected["crit"]

    if not isinstance(crit, list):
        raise _invalid("crit", 'The "crit" header parameter must be an array of strings')
    if not crit:
        raise _invalid("crit", 'The "crit" header parameter must not be empty')
    if not all(isinstance(name, str) and name for name in crit):
        raise _invalid("crit", 'The "crit" header parameter must contain only strings')

    registered = [name for name in crit if name in REGISTERED_HEADER_PARAMETERS]
    if registered:
        raise _invalid(
            "crit",
            f'The "crit" header parameter must not contain registered header parameter names: {", ".join(registered)}',
        )

    if len(set(crit)) != len(crit):
        raise _invalid("crit", 'The "crit" header parameter must not contain duplicate values')

    merged = {**(unprotected or {}), **protected}
    missing = [name for name in crit if name not in merged]
    if missing:
        raise _invalid(
            "crit",
            f'The header parameters {", ".join(missing)} are not present in the JWS header, '
            'but are present in the "crit" header parameter',
        )


def validate_header(
    protected: Optional[dict],
    unprotected: Optional[dict],
    allowed_algorithms: Optional[Iterable[str]] = None,
) -> JoseHeader:
    """Validate a protected/unprotected header pair.

    Returns:
        The validated JoseHeader.

    Raises:
        JwsError: on the first failed check
    """
    if protected is None and unprotected is None:
        raise JwsError(ErrorCode.MISSING_HEADERS, "Either protected header or unprotected header must be present")
    if protected is not None and not is_json_object(protected):
        raise JwsError(ErrorCode.INVALID_PROTECTED_HEADER, "The protected header must be a JSON object")
    if unprotected is not None and not is_json_object(unprotected):
        raise JwsError(ErrorCode.INVALID_UNPROTECTED_HEADER, "The unprotected header must be a JSON object")

    if not is_disjoint(protected, unprotected):
        shared = sorted(set(protected) & set(unprotected))
        logger.debug("Header parameters shared by both headers: %s", shared)
        raise JwsError(
            ErrorCode.HEADER_PARAMETERS_NOT_DISJOINT,
            "Header Parameter names must be disjoint between protected and unprotected headers",
            parameter=", ".join(shared),
        )

    merged = {**(unprotected or {}), **(protected or {})}

    validate_alg(merged, allowed_algorithms)
    validate_jku(merged)
    validate_jwk(merged)
    validate_kid(merged)
    validate_typ(merged)
    validate_cty(merged)
    validate_crit(protected, unprotected)

    return JoseHeader(
        alg=lookup(merged["alg"]).algorithm,
        parameters=merged,
        protected=dict(protected) if protected is not None else None,
        unprotected=dict(unprotected) if unprotected is not None else None,
    )
