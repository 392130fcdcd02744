"""Tests for key handling, the JWS primitive, and configuration."""

import json

import pytest

from okta_dpop import ClientConfiguration, DPoPConfigurationError, RSAPrivateKeyComponents
from okta_dpop.config import ensure_trailing_slash
from okta_dpop.jws import JwtHeader, decode_segments, encode_jwt, verify_signature
from okta_dpop.keys import generate_private_key, import_private_key, jwk_to_public_key, public_jwk


class TestKeys:
    """Tests for RSA key import and export."""

    def test_import_roundtrip(self, private_key, key_components):
        """Test components re-import to the same key."""
        imported = import_private_key(key_components)
        assert imported.private_numbers() == private_key.private_numbers()

    def test_from_jwk(self, key_components):
        """Test components can be read from an RSA private JWK."""
        jwk = {"kty": "RSA", **{k: getattr(key_components, k) for k in ("n", "e", "d", "p", "q", "dp", "dq", "qi")}}
        assert RSAPrivateKeyComponents.from_jwk(jwk) == key_components

    def test_from_jwk_missing_member(self, key_components):
        """Test a JWK without CRT parameters is rejected."""
        jwk = {"kty": "RSA", "n": key_components.n, "e": key_components.e, "d": key_components.d}
        with pytest.raises(ValueError) as exc:
            RSAPrivateKeyComponents.from_jwk(jwk)
        assert "dp" in str(exc.value)

    def test_from_jwk_wrong_kty(self):
        """Test a non-RSA JWK is rejected."""
        with pytest.raises(ValueError):
            RSAPrivateKeyComponents.from_jwk({"kty": "EC", "crv": "P-256"})

    def test_public_jwk(self, private_key, key_components):
        """Test the public JWK carries only public members."""
        jwk = public_jwk(private_key.public_key())
        assert list(jwk) == ["kty", "use", "alg", "e", "n"]
        assert jwk["e"] == "AQAB"
        assert jwk["n"] == key_components.n
        assert "d" not in jwk

    def test_jwk_to_public_key(self, private_key):
        """Test a public JWK converts back to the same key."""
        jwk = public_jwk(private_key.public_key())
        assert jwk_to_public_key(jwk).public_numbers() == private_key.public_key().public_numbers()

    def test_jwk_to_public_key_rejects_ec(self):
        """Test EC keys are rejected."""
        with pytest.raises(ValueError):
            jwk_to_public_key({"kty": "EC", "x": "a", "y": "b"})


class TestJws:
    """Tests for compact JWS encoding."""

    def test_default_header(self):
        """Test the default header carries alg and typ."""
        assert JwtHeader() == {"alg": "RS256", "typ": "JWT"}

    def test_unsupported_alg(self):
        """Test only RS256 is accepted."""
        with pytest.raises(ValueError):
            JwtHeader("HS256")

    def test_encode_and_verify(self, private_key):
        """Test an encoded token verifies and decodes."""
        token = encode_jwt(JwtHeader(), {"sub": "abc"}, private_key)

        header, payload, signature, signing_input = decode_segments(token)
        assert header == {"alg": "RS256", "typ": "JWT"}
        assert payload == {"sub": "abc"}
        assert len(signature) == 256
        assert signing_input == token.rsplit(".", 1)[0].encode()
        assert verify_signature(token, private_key.public_key())

    def test_compact_json(self, private_key):
        """Test segments are serialized without whitespace."""
        token = encode_jwt(JwtHeader(), {"a": 1, "b": "c"}, private_key)
        _, payload, _, _ = decode_segments(token)
        assert json.dumps(payload, separators=(",", ":")) == '{"a":1,"b":"c"}'
        assert "=" not in token

    def test_wrong_key_fails(self, private_key):
        """Test verification with another key fails."""
        token = encode_jwt(JwtHeader(), {"sub": "abc"}, private_key)
        assert not verify_signature(token, generate_private_key().public_key())

    def test_decode_rejects_two_parts(self):
        """Test a token with two segments is rejected."""
        with pytest.raises(ValueError):
            decode_segments("a.b")


class TestConfiguration:
    """Tests for ClientConfiguration."""

    def test_ensure_trailing_slash(self):
        """Test trailing slashes collapse to one."""
        assert ensure_trailing_slash("https://example.okta.com") == "https://example.okta.com/"
        assert ensure_trailing_slash("https://example.okta.com/") == "https://example.okta.com/"
        assert ensure_trailing_slash("https://example.okta.com///") == "https://example.okta.com/"

    def test_from_env(self):
        """Test loading the org URL only."""
        config = ClientConfiguration.from_env({"OKTA_CLIENT_ORGURL": "https://example.okta.com"})
        assert config.okta_domain == "https://example.okta.com"
        assert config.private_key is None

    def test_from_env_with_private_key(self, key_components):
        """Test loading a private JWK from the environment."""
        jwk = {"kty": "RSA", **{k: getattr(key_components, k) for k in ("n", "e", "d", "p", "q", "dp", "dq", "qi")}}
        config = ClientConfiguration.from_env(
            {"OKTA_CLIENT_ORGURL": "https://example.okta.com", "OKTA_CLIENT_PRIVATEKEY": json.dumps(jwk)}
        )
        assert config.private_key == key_components

    def test_from_env_missing_domain(self):
        """Test the org URL is required."""
        with pytest.raises(DPoPConfigurationError):
            ClientConfiguration.from_env({})

    @pytest.mark.parametrize("raw_key", ["not json", "42", '{"kty": "RSA", "n": "abc"}'])
    def test_from_env_invalid_private_key(self, raw_key):
        """Test malformed private keys are reported as configuration errors."""
        with pytest.raises(DPoPConfigurationError) as exc:
            ClientConfiguration.from_env(
                {"OKTA_CLIENT_ORGURL": "https://example.okta.com", "OKTA_CLIENT_PRIVATEKEY": raw_key}
            )
        assert exc.value.__cause__ is not None
