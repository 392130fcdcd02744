"""Compact JWS construction and RS256 signing."""

import json
from typing import Any, Dict, Tuple

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

from .thumbprint import _base64url_decode, _base64url_encode

SUPPORTED_ALGS = ("RS256",)


class JwtHeader(dict):
    """
    JOSE header for a compact JWS.

    Starts out as ``{"alg": alg, "typ": "JWT"}``. Callers that need a
    different media type remove ``typ`` and set their own.
    """

    def __init__(self, alg: str = "RS256"):
        if alg not in SUPPORTED_ALGS:
            raise ValueError(f"Unsupported algorithm: {alg}")
        super().__init__(alg=alg, typ="JWT")


def encode_jwt(header: Dict[str, Any], payload: Dict[str, Any], private_key: RSAPrivateKey) -> str:
    """
    Sign a header and payload and return the compact serialization.

    Args:
        header: JOSE header, must carry ``alg`` = RS256
        payload: JWT claims
        private_key: RSA key used for signing

    Returns:
        ``header.payload.signature``, each segment base64url without padding
    """
    if header.get("alg") not in SUPPORTED_ALGS:
        raise ValueError(f"Unsupported algorithm: {header.get('alg')}")

    header_b64 = _base64url_encode(_json_bytes(header))
    payload_b64 = _base64url_encode(_json_bytes(payload))

    message = f"{header_b64}.{payload_b64}"
    signature = private_key.sign(message.encode("ascii"), padding.PKCS1v15(), hashes.SHA256())

    return f"{message}.{_base64url_encode(signature)}"


def decode_segments(token: str) -> Tuple[Dict[str, Any], Dict[str, Any], bytes, bytes]:
    """
    Split and decode a compact JWS without verifying it.

    Returns:
        (header, payload, signature, signing_input)
    """
    parts = token.split(".")
    if len(parts) != 3:
        raise ValueError("Token must have 3 parts")

    header = json.loads(_base64url_decode(parts[0]))
    payload = json.loads(_base64url_decode(parts[1]))
    signature = _base64url_decode(parts[2])
    if not isinstance(header, dict) or not isinstance(payload, dict):
        raise ValueError("Header and payload must be JSON objects")

    return header, payload, signature, f"{parts[0]}.{parts[1]}".encode("ascii")


def verify_signature(token: str, public_key: RSAPublicKey) -> bool:
    """Check the RS256 signature of a compact JWS."""
    _, _, signature, signing_input = decode_segments(token)
    try:
        public_key.verify(signature, signing_input, padding.PKCS1v15(), hashes.SHA256())
    except InvalidSignature:
        return False
    return True


def _json_bytes(obj: Dict[str, Any]) -> bytes:
    return json.dumps(obj, separators=(",", ":")).encode()
