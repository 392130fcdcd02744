"""JWK Thumbprint computation (RFC 7638) and base64url helpers."""

import base64
import hashlib
from typing import Any, Dict

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey


def compute_thumbprint(public_key: RSAPublicKey) -> str:
    """
    Compute JWK thumbprint for an RSA public key per RFC 7638.

    Args:
        public_key: An RSA public key

    Returns:
        Base64url-encoded thumbprint
    """
    numbers = public_key.public_numbers()
    return _compute_thumbprint_from_members(
        _int_to_base64url(numbers.e),
        _int_to_base64url(numbers.n),
    )


def compute_thumbprint_from_jwk(jwk: Dict[str, Any]) -> str:
    """
    Compute JWK thumbprint from a JWK dictionary.

    Args:
        jwk: RSA JWK dictionary with kty, e, n

    Returns:
        Base64url-encoded thumbprint
    """
    if jwk.get("kty") != "RSA":
        raise ValueError(f"Unsupported key type: {jwk.get('kty')}")
    return _compute_thumbprint_from_members(jwk["e"], jwk["n"])


def hash_access_token(access_token: str) -> str:
    """
    Compute the ``ath`` value for an access token.

    The SHA-256 digest of the ASCII encoding of the token,
    base64url-encoded without padding (RFC 9449 section 4.2).
    """
    digest = hashlib.sha256(access_token.encode("ascii")).digest()
    return _base64url_encode(digest)


def _compute_thumbprint_from_members(e: str, n: str) -> str:
    """Compute thumbprint from base64url-encoded exponent and modulus."""
    canonical = f'{{"e":"{e}","kty":"RSA","n":"{n}"}}'
    hash_bytes = hashlib.sha256(canonical.encode()).digest()
    return _base64url_encode(hash_bytes)


def _int_to_base64url(value: int) -> str:
    """Encode an integer as its minimal big-endian bytes, base64url without padding."""
    length = max(1, (value.bit_length() + 7) // 8)
    return _base64url_encode(value.to_bytes(length, byteorder="big"))


def _base64url_to_int(data: str) -> int:
    return int.from_bytes(_base64url_decode(data), byteorder="big")


def _base64url_encode(data: bytes) -> str:
    """Base64url encode without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _base64url_decode(data: str) -> bytes:
    """Base64url decode with padding handling."""
    padding = 4 - len(data) % 4
    if padding != 4:
        data += "=" * padding
    return base64.urlsafe_b64decode(data)
