"""DPoP proof generation."""

import time
import uuid
from typing import Dict, Optional

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

from .config import ClientConfiguration, ensure_trailing_slash
from .errors import DPoPConfigurationError, DPoPProofGenerationError
from .jws import JwtHeader, encode_jwt
from .keys import (
    SIGNING_ALG,
    RSAPrivateKeyComponents,
    generate_private_key,
    import_private_key,
    public_jwk,
)
from .thumbprint import compute_thumbprint, hash_access_token

DEFAULT_HTTP_METHOD = "POST"
TOKEN_ENDPOINT_PATH = "oauth2/v1/token"
DPOP_TYP = "dpop+jwt"


class DPoPProofGenerator:
    """
    Generates DPoP proof JWTs signed with an RSA key held for the
    lifetime of the generator.

    Example:
        >>> generator = DPoPProofGenerator(ClientConfiguration("https://example.okta.com"))
        >>> proof = generator.generate_proof()
        >>> proof = generator.generate_proof(
        ...     nonce="server-nonce",
        ...     http_method="GET",
        ...     uri="https://example.okta.com/api/v1/users",
        ...     access_token=access_token,
        ... )
    """

    def __init__(self, configuration: Optional[ClientConfiguration]):
        """
        Create a generator from client configuration.

        Args:
            configuration: Supplies the org domain and, optionally, the
                RSA private key. A 2048-bit key is generated when no key
                is configured.

        Raises:
            DPoPConfigurationError: If the configuration is missing or the
                private key components cannot be imported.
        """
        if configuration is None:
            raise DPoPConfigurationError("The Okta configuration cannot be None.")

        self._okta_domain = configuration.okta_domain
        if configuration.private_key is not None:
            try:
                self._private_key = import_private_key(configuration.private_key)
            except (ValueError, TypeError) as e:
                raise DPoPConfigurationError("Invalid private key configuration for DPoP") from e
        else:
            self._private_key = generate_private_key()

    @classmethod
    def from_private_key(cls, private_key: RSAPrivateKey, okta_domain: str) -> "DPoPProofGenerator":
        """Create a generator around an existing RSA private key."""
        components = RSAPrivateKeyComponents.from_private_key(private_key)
        return cls(ClientConfiguration(okta_domain=okta_domain, private_key=components))

    @property
    def public_key(self) -> RSAPublicKey:
        """Get the public key."""
        return self._private_key.public_key()

    @property
    def public_jwk(self) -> Dict[str, str]:
        """Get the public JWK embedded in every proof header."""
        return public_jwk(self.public_key)

    @property
    def thumbprint(self) -> str:
        """Get the JWK thumbprint of the public key."""
        return compute_thumbprint(self.public_key)

    @property
    def token_endpoint(self) -> str:
        """Default ``htu``: the org authorization server token endpoint."""
        return f"{ensure_trailing_slash(self._okta_domain)}{TOKEN_ENDPOINT_PATH}"

    def generate_proof(
        self,
        nonce: Optional[str] = None,
        http_method: Optional[str] = None,
        uri: Optional[str] = None,
        access_token: Optional[str] = None,
    ) -> str:
        """
        Generate a new DPoP proof JWT.

        Args:
            nonce: Server-provided nonce from a previous response
            http_method: HTTP method of the request, defaults to POST
            uri: HTTP URI of the request without query and fragment parts,
                defaults to the token endpoint
            access_token: Access token to bind the proof to via ``ath``

        Returns:
            A signed DPoP proof JWT

        Raises:
            DPoPProofGenerationError: If any step of building or signing
                the proof fails
        """
        try:
            payload = {
                "htm": http_method if http_method is not None else DEFAULT_HTTP_METHOD,
                "htu": uri if uri is not None else self.token_endpoint,
                "iat": int(time.time()),
                "jti": str(uuid.uuid4()),
            }
            if nonce:
                payload["nonce"] = nonce
            if access_token:
                payload["ath"] = hash_access_token(access_token)

            header = JwtHeader(SIGNING_ALG)
            header.pop("typ", None)
            header["typ"] = DPOP_TYP
            header["jwk"] = self.public_jwk

            return encode_jwt(header, payload, self._private_key)
        except Exception as e:
            raise DPoPProofGenerationError("Failed to generate DPoP proof JWT") from e
