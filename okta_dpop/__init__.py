"""
Okta DPoP - Demonstrating Proof of Possession (RFC 9449)

RS256 DPoP proof generation for Okta OAuth 2.0 token and API requests.
"""

from .auth import DPoPAuth
from .client import DPoPProofGenerator
from .config import ClientConfiguration
from .errors import DPoPConfigurationError, DPoPError, DPoPProofGenerationError
from .keys import RSAPrivateKeyComponents
from .server import (
    DPoPConfig,
    DPoPValidationError,
    validate_proof,
    verify_binding,
)
from .thumbprint import compute_thumbprint, compute_thumbprint_from_jwk, hash_access_token

__version__ = "0.1.0"
__all__ = [
    "ClientConfiguration",
    "DPoPAuth",
    "DPoPConfig",
    "DPoPConfigurationError",
    "DPoPError",
    "DPoPProofGenerationError",
    "DPoPProofGenerator",
    "DPoPValidationError",
    "RSAPrivateKeyComponents",
    "validate_proof",
    "verify_binding",
    "compute_thumbprint",
    "compute_thumbprint_from_jwk",
    "hash_access_token",
]
