"""Client configuration consumed by the proof generator."""

import json
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import DPoPConfigurationError
from .keys import RSAPrivateKeyComponents

ORG_URL_ENV = "OKTA_CLIENT_ORGURL"
PRIVATE_KEY_ENV = "OKTA_CLIENT_PRIVATEKEY"


@dataclass
class ClientConfiguration:
    """
    Configuration for DPoP proof generation.

    Attributes:
        okta_domain: Base org URL, e.g. ``https://example.okta.com``
        private_key: Optional RSA key to sign proofs with. A new key is
            generated when omitted.
    """

    okta_domain: str
    private_key: Optional[RSAPrivateKeyComponents] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ClientConfiguration":
        """
        Load configuration from environment variables.

        ``OKTA_CLIENT_ORGURL`` is required. ``OKTA_CLIENT_PRIVATEKEY``, if set,
        holds an RSA private JWK as JSON.
        """
        if environ is None:
            environ = os.environ

        domain = environ.get(ORG_URL_ENV, "").strip()
        if not domain:
            raise DPoPConfigurationError(f"{ORG_URL_ENV} is required")

        private_key = None
        raw_key = environ.get(PRIVATE_KEY_ENV, "").strip()
        if raw_key:
            try:
                private_key = RSAPrivateKeyComponents.from_jwk(json.loads(raw_key))
            except (ValueError, TypeError, AttributeError) as e:
                raise DPoPConfigurationError(f"{PRIVATE_KEY_ENV} is not a valid RSA private JWK") from e

        return cls(okta_domain=domain, private_key=private_key)


def ensure_trailing_slash(url: str) -> str:
    """Return ``url`` ending in exactly one ``/``."""
    return url.rstrip("/") + "/"
