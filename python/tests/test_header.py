"""Tests for JOSE header validation."""

import pytest

from jwsguard import Algorithm, ErrorCode, JwsError, is_disjoint, validate_header
from jwsguard.header import (
    validate_alg,
    validate_crit,
    validate_cty,
    validate_jku,
    validate_jwk,
    validate_kid,
    validate_typ,
)
from jwsguard.types import REGISTERED_HEADER_PARAMETERS

EC_JWK = {"kty": "EC", "crv": "P-256", "x": "f83OJ3D2xF1Bg8vub9tLe1gHMzV76e8Tus9uPHvRVEU", "y": "x_FEzRu9m36HLN_tue659LNpXW6pCyStikYjKIWI5a0"}
RSA_JWK = {"kty": "RSA", "n": "0vx7agoebGcQSuuPiLJXZptN9nndrQmbXEps2aiAFbWhM78LhWx4cbbf", "e": "AQAB"}


def expect_param_error(func, *args, parameter, match=None):
    with pytest.raises(JwsError, match=match) as exc_info:
        func(*args)
    assert exc_info.value.code == ErrorCode.HEADER_PARAM_INVALID
    assert exc_info.value.parameter == parameter
    return exc_info.value


class TestIsDisjoint:
    def test_absent_headers(self):
        assert is_disjoint(None, None)
        assert is_disjoint({"alg": "HS256"}, None)
        assert is_disjoint(None, {"alg": "HS256"})

    def test_empty_headers(self):
        assert is_disjoint({}, {"alg": "HS256"})
        assert is_disjoint({"alg": "HS256"}, {})

    def test_disjoint(self):
        assert is_disjoint({"alg": "HS256", "typ": "JWT"}, {"kid": "k1"})

    def test_shared_name(self):
        assert not is_disjoint({"alg": "HS256", "kid": "a"}, {"kid": "b"})

    def test_shared_name_same_value(self):
        assert not is_disjoint({"alg": "HS256"}, {"alg": "HS256"})


class TestValidateAlg:
    def test_accepts_registered(self):
        validate_alg({"alg": "ES256"})

    @pytest.mark.parametrize("header", [{}, {"alg": None}])
    def test_missing(self, header):
        expect_param_error(validate_alg, header, parameter="alg", match="required")

    @pytest.mark.parametrize("alg", ["none", "HS1", "es256", 256])
    def test_unsupported(self, alg):
        with pytest.raises(JwsError, match="Invalid algorithm") as exc_info:
            validate_alg({"alg": alg})
        assert exc_info.value.code == ErrorCode.UNSUPPORTED_ALGORITHM

    def test_not_in_allow_list(self):
        with pytest.raises(JwsError) as exc_info:
            validate_alg({"alg": "HS256"}, ["ES256", "RS256"])
        assert exc_info.value.code == ErrorCode.UNSUPPORTED_ALGORITHM
        assert exc_info.value.expected == ["ES256", "RS256"]

    def test_in_allow_list(self):
        validate_alg({"alg": "ES256"}, ["ES256"])

    def test_empty_allow_list(self):
        with pytest.raises(JwsError) as exc_info:
            validate_alg({"alg": "ES256"}, [])
        assert exc_info.value.code == ErrorCode.UNSUPPORTED_ALGORITHM


class TestValidateJku:
    def test_absent(self):
        validate_jku({})

    def test_valid(self):
        validate_jku({"jku": "https://example.com/.well-known/jwks.json"})

    @pytest.mark.parametrize("value", [123, None, ["https://example.com"], {}])
    def test_non_string(self, value):
        expect_param_error(validate_jku, {"jku": value}, parameter="jku", match="must be a string")

    @pytest.mark.parametrize("value", ["not a url", "example.com/jwks", "https://", "https://example.com:99999"])
    def test_invalid_url(self, value):
        expect_param_error(validate_jku, {"jku": value}, parameter="jku", match="valid URL")

    def test_http(self):
        expect_param_error(validate_jku, {"jku": "http://example.com"}, parameter="jku", match="HTTPS")

    def test_fragment(self):
        expect_param_error(validate_jku, {"jku": "https://example.com#fragment"}, parameter="jku", match="fragments")

    def test_query(self):
        expect_param_error(
            validate_jku,
            {"jku": "https://example.com?param=value"},
            parameter="jku",
            match="query parameters",
        )


class TestValidateJwk:
    def test_absent(self):
        validate_jwk({"alg": "HS256"})

    def test_valid_ec(self):
        validate_jwk({"alg": "ES256", "jwk": EC_JWK})

    @pytest.mark.parametrize("alg", ["RS256", "PS512"])
    def test_valid_rsa(self, alg):
        validate_jwk({"alg": alg, "jwk": RSA_JWK})

    @pytest.mark.parametrize("value", ["jwk", 1, [EC_JWK], None])
    def test_not_an_object(self, value):
        expect_param_error(validate_jwk, {"alg": "ES256", "jwk": value}, parameter="jwk", match="JSON object")

    def test_missing_kty(self):
        expect_param_error(validate_jwk, {"alg": "ES256", "jwk": {"crv": "P-256"}}, parameter="jwk", match="kty")

    def test_kty_not_string(self):
        expect_param_error(validate_jwk, {"alg": "ES256", "jwk": {"kty": 1}}, parameter="jwk", match="kty")

    @pytest.mark.parametrize("kty", ["oct", "OKP", "ec"])
    def test_invalid_kty(self, kty):
        expect_param_error(
            validate_jwk,
            {"alg": "ES256", "jwk": {"kty": kty}},
            parameter="jwk",
            match="Invalid key type. Must be one of: RSA, EC",
        )

    def test_rejected_with_hmac(self):
        expect_param_error(validate_jwk, {"alg": "HS256", "jwk": EC_JWK}, parameter="jwk", match="HS256")

    @pytest.mark.parametrize("alg", ["RS256", "PS256"])
    def test_rsa_alg_with_ec_key(self, alg):
        err = expect_param_error(validate_jwk, {"alg": alg, "jwk": EC_JWK}, parameter="jwk")
        assert str(err) == f'Algorithm {alg} requires an RSA key (kty: "RSA"), but got "EC"'

    def test_ec_alg_with_rsa_key(self):
        err = expect_param_error(validate_jwk, {"alg": "ES384", "jwk": RSA_JWK}, parameter="jwk")
        assert str(err) == 'Algorithm ES384 requires an EC key (kty: "EC"), but got "RSA"'

    def test_ec_missing_crv(self):
        jwk = {k: v for k, v in EC_JWK.items() if k != "crv"}
        expect_param_error(validate_jwk, {"alg": "ES256", "jwk": jwk}, parameter="jwk", match="crv")

    @pytest.mark.parametrize("crv", ["P-192", "secp256k1", "Ed25519"])
    def test_ec_invalid_curve(self, crv):
        expect_param_error(
            validate_jwk,
            {"alg": "ES256", "jwk": {**EC_JWK, "crv": crv}},
            parameter="jwk",
            match=f"Invalid curve: {crv}. Must be one of: P-256, P-384, P-521",
        )

    @pytest.mark.parametrize("member", ["x", "y"])
    def test_ec_missing_coordinate(self, member):
        jwk = {k: v for k, v in EC_JWK.items() if k != member}
        expect_param_error(validate_jwk, {"alg": "ES256", "jwk": jwk}, parameter="jwk", match=f'"{member}"')

    @pytest.mark.parametrize("member", ["n", "e"])
    def test_rsa_missing_member(self, member):
        jwk = {k: v for k, v in RSA_JWK.items() if k != member}
        expect_param_error(validate_jwk, {"alg": "RS256", "jwk": jwk}, parameter="jwk", match=f'"{member}"')

    def test_ec_private_member(self):
        expect_param_error(
            validate_jwk,
            {"alg": "ES256", "jwk": {**EC_JWK, "d": "secret"}},
            parameter="jwk",
            match="JWK contains private key parameters: d",
        )

    def test_rsa_multiple_private_members(self):
        jwk = {**RSA_JWK, "d": "a", "p": "b", "qi": "c"}
        expect_param_error(
            validate_jwk,
            {"alg": "RS256", "jwk": jwk},
            parameter="jwk",
            match="JWK contains private key parameters: d, p, qi",
        )


class TestValidateKidTypCty:
    def test_absent(self):
        validate_kid({})
        validate_typ({})
        validate_cty({})

    def test_valid(self):
        validate_kid({"kid": "key-1"})
        validate_typ({"typ": "JWT"})
        validate_cty({"cty": "application/json"})

    @pytest.mark.parametrize("value", [1, None, [], {}, True])
    def test_kid_non_string(self, value):
        expect_param_error(validate_kid, {"kid": value}, parameter="kid", match="must be a string")

    @pytest.mark.parametrize("value", ["", "   "])
    def test_kid_empty(self, value):
        expect_param_error(validate_kid, {"kid": value}, parameter="kid", match="must not be empty")

    def test_typ_non_string(self):
        expect_param_error(validate_typ, {"typ": 1}, parameter="typ")

    def test_cty_non_string(self):
        expect_param_error(validate_cty, {"cty": ["json"]}, parameter="cty")


class TestValidateCrit:
    def test_absent(self):
        validate_crit({"alg": "HS256"}, None)

    def test_valid(self):
        validate_crit({"alg": "HS256", "crit": ["exp"], "exp": 1363284000}, None)

    def test_listed_parameter_in_unprotected_header(self):
        validate_crit({"alg": "HS256", "crit": ["exp"]}, {"exp": 1363284000})

    @pytest.mark.parametrize("protected", [None, {"alg": "HS256", "crit": ["custom-param"], "custom-param": 1}])
    def test_in_unprotected_header(self, protected):
        expect_param_error(
            validate_crit,
            protected,
            {"crit": ["custom-param"]},
            parameter="crit",
            match='must not be in the unprotected header',
        )

    @pytest.mark.parametrize("value", ["custom", 1, {}, None, True])
    def test_not_an_array(self, value):
        expect_param_error(validate_crit, {"crit": value}, None, parameter="crit", match="array of strings")

    def test_empty(self):
        expect_param_error(validate_crit, {"crit": []}, None, parameter="crit", match="must not be empty")

    @pytest.mark.parametrize("entries", [[1], ["valid", None], [["nested"]], [""], ["valid", ""]])
    def test_non_string_entries(self, entries):
        expect_param_error(validate_crit, {"crit": entries}, None, parameter="crit", match="only strings")

    @pytest.mark.parametrize("name", sorted(REGISTERED_HEADER_PARAMETERS))
    def test_registered_names(self, name):
        err = expect_param_error(validate_crit, {"crit": [name]}, None, parameter="crit")
        assert str(err) == (
            f'The "crit" header parameter must not contain registered header parameter names: {name}'
        )
        expect_param_error(validate_crit, {"crit": ["custom-param", name], "custom-param": 1}, None, parameter="crit")

    def test_duplicates(self):
        expect_param_error(
            validate_crit,
            {"crit": ["custom-1", "custom-2", "custom-1"], "custom-1": 1, "custom-2": 2},
            None,
            parameter="crit",
            match="duplicate values",
        )

    def test_missing_parameter(self):
        err = expect_param_error(validate_crit, {"crit": ["custom-param"]}, None, parameter="crit")
        assert str(err) == (
            "The header parameters custom-param are not present in the JWS header, "
            'but are present in the "crit" header parameter'
        )


class TestValidateHeader:
    def test_protected_only(self):
        header = validate_header({"alg": "HS256", "typ": "JWT"}, None)
        assert header.alg == Algorithm.HS256
        assert header.typ == "JWT"
        assert header.protected == {"alg": "HS256", "typ": "JWT"}
        assert header.unprotected is None

    def test_unprotected_only(self):
        header = validate_header(None, {"alg": "ES256", "kid": "k1"})
        assert header.alg == Algorithm.ES256
        assert header.kid == "k1"

    def test_merged_parameters(self):
        header = validate_header({"alg": "RS256"}, {"kid": "k1", "x-custom": 1})
        assert header.parameters == {"alg": "RS256", "kid": "k1", "x-custom": 1}

    def test_empty_protected_header_counts_as_present(self):
        header = validate_header({}, {"alg": "HS256"})
        assert header.protected == {}

    def test_missing_headers(self):
        with pytest.raises(JwsError) as exc_info:
            validate_header(None, None)
        assert exc_info.value.code == ErrorCode.MISSING_HEADERS

    def test_protected_not_an_object(self):
        with pytest.raises(JwsError) as exc_info:
            validate_header(["alg"], None)
        assert exc_info.value.code == ErrorCode.INVALID_PROTECTED_HEADER

    def test_unprotected_not_an_object(self):
        with pytest.raises(JwsError) as exc_info:
            validate_header({"alg": "HS256"}, "kid")
        assert exc_info.value.code == ErrorCode.INVALID_UNPROTECTED_HEADER

    def test_not_disjoint(self):
        with pytest.raises(JwsError, match="disjoint") as exc_info:
            validate_header({"alg": "HS256", "kid": "a"}, {"kid": "b", "typ": "JWT"})
        assert exc_info.value.code == ErrorCode.HEADER_PARAMETERS_NOT_DISJOINT
        assert exc_info.value.parameter == "kid"

    def test_alg_checked_before_other_parameters(self):
        with pytest.raises(JwsError) as exc_info:
            validate_header({"alg": "none", "kid": 1}, None)
        assert exc_info.value.code == ErrorCode.UNSUPPORTED_ALGORITHM

    def test_first_failure_wins(self):
        with pytest.raises(JwsError) as exc_info:
            validate_header({"alg": "HS256", "jku": "http://example.com", "kid": 1}, None)
        assert exc_info.value.parameter == "jku"

    def test_allow_list(self):
        with pytest.raises(JwsError) as exc_info:
            validate_header({"alg": "HS256"}, None, ["ES256"])
        assert exc_info.value.code == ErrorCode.UNSUPPORTED_ALGORITHM

    def test_crit_in_unprotected_header(self):
        with pytest.raises(JwsError) as exc_info:
            validate_header({"alg": "HS256"}, {"crit": ["x"], "x": 1})
        assert exc_info.value.parameter == "crit"
