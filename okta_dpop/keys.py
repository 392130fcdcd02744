"""RSA signing key import, generation, and public JWK export."""

import logging
from dataclasses import dataclass
from typing import Any, Dict

from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

from .thumbprint import _base64url_to_int, _int_to_base64url

log = logging.getLogger(__name__)

RSA_KEY_SIZE = 2048
RSA_PUBLIC_EXPONENT = 65537
SIGNING_ALG = "RS256"


@dataclass(frozen=True)
class RSAPrivateKeyComponents:
    """
    RSA private key in component form.

    Every field is a base64url-encoded big-endian integer without padding,
    named as in an RSA JWK (RFC 7518 section 6.3).
    """

    n: str
    e: str
    d: str
    p: str
    q: str
    dp: str
    dq: str
    qi: str

    @classmethod
    def from_jwk(cls, jwk: Dict[str, Any]) -> "RSAPrivateKeyComponents":
        """Build components from an RSA private JWK dictionary."""
        if jwk.get("kty", "RSA") != "RSA":
            raise ValueError(f"Unsupported key type: {jwk.get('kty')}")
        missing = [k for k in ("n", "e", "d", "p", "q", "dp", "dq", "qi") if not jwk.get(k)]
        if missing:
            raise ValueError(f"RSA private JWK is missing: {', '.join(missing)}")
        return cls(
            n=jwk["n"],
            e=jwk["e"],
            d=jwk["d"],
            p=jwk["p"],
            q=jwk["q"],
            dp=jwk["dp"],
            dq=jwk["dq"],
            qi=jwk["qi"],
        )

    @classmethod
    def from_private_key(cls, private_key: RSAPrivateKey) -> "RSAPrivateKeyComponents":
        """Export an existing key into component form."""
        numbers = private_key.private_numbers()
        public = numbers.public_numbers
        return cls(
            n=_int_to_base64url(public.n),
            e=_int_to_base64url(public.e),
            d=_int_to_base64url(numbers.d),
            p=_int_to_base64url(numbers.p),
            q=_int_to_base64url(numbers.q),
            dp=_int_to_base64url(numbers.dmp1),
            dq=_int_to_base64url(numbers.dmq1),
            qi=_int_to_base64url(numbers.iqmp),
        )


def import_private_key(components: RSAPrivateKeyComponents) -> RSAPrivateKey:
    """
    Import an RSA private key from its components.

    Raises:
        ValueError: If a component is not valid base64url or the
            components do not describe a consistent RSA key.
    """
    public_numbers = rsa.RSAPublicNumbers(
        e=_base64url_to_int(components.e),
        n=_base64url_to_int(components.n),
    )
    private_numbers = rsa.RSAPrivateNumbers(
        p=_base64url_to_int(components.p),
        q=_base64url_to_int(components.q),
        d=_base64url_to_int(components.d),
        dmp1=_base64url_to_int(components.dp),
        dmq1=_base64url_to_int(components.dq),
        iqmp=_base64url_to_int(components.qi),
        public_numbers=public_numbers,
    )
    private_key = private_numbers.private_key()
    log.debug("Imported %d-bit RSA signing key", private_key.key_size)
    return private_key


def generate_private_key(key_size: int = RSA_KEY_SIZE) -> RSAPrivateKey:
    """Generate a new RSA keypair for signing DPoP proofs."""
    private_key = rsa.generate_private_key(
        public_exponent=RSA_PUBLIC_EXPONENT,
        key_size=key_size,
    )
    log.debug("Generated %d-bit RSA signing key", key_size)
    return private_key


def public_jwk(public_key: RSAPublicKey) -> Dict[str, str]:
    """Minimal public JWK for a DPoP proof header."""
    numbers = public_key.public_numbers()
    return {
        "kty": "RSA",
        "use": "sig",
        "alg": SIGNING_ALG,
        "e": _int_to_base64url(numbers.e),
        "n": _int_to_base64url(numbers.n),
    }


def jwk_to_public_key(jwk: Dict[str, Any]) -> RSAPublicKey:
    """Convert an RSA JWK to a public key."""
    if jwk.get("kty") != "RSA":
        raise ValueError(f"Unsupported key: kty={jwk.get('kty')}")
    if not jwk.get("n") or not jwk.get("e"):
        raise ValueError("RSA JWK is missing n or e")
    return rsa.RSAPublicNumbers(
        e=_base64url_to_int(jwk["e"]),
        n=_base64url_to_int(jwk["n"]),
    ).public_key()
