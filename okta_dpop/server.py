"""DPoP proof validation (RFC 9449), used for round-trip and interop checks."""

import hmac
import threading
import time
from dataclasses import dataclass
from typing import Dict, Optional

from .jws import decode_segments, verify_signature
from .keys import jwk_to_public_key
from .thumbprint import compute_thumbprint_from_jwk, hash_access_token


class DPoPValidationError(Exception):
    """DPoP validation error."""

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


@dataclass
class DPoPConfig:
    """DPoP validation configuration."""

    max_proof_age_secs: int = 60
    require_nonce: bool = False
    expected_nonce: Optional[str] = None
    expected_method: str = "POST"
    expected_target: str = ""
    access_token: Optional[str] = None


# JTI cache for replay protection
_jti_cache: Dict[str, float] = {}
_jti_cache_lock = threading.Lock()
_last_cleanup = time.time()


def _check_and_record_jti(jti: str, ttl_seconds: int) -> bool:
    """Check if JTI is a replay and record it if not."""
    global _last_cleanup

    with _jti_cache_lock:
        now = time.time()

        if now - _last_cleanup > 300:
            expired = [k for k, exp in _jti_cache.items() if exp < now]
            for k in expired:
                del _jti_cache[k]
            _last_cleanup = now

        if jti in _jti_cache and _jti_cache[jti] > now:
            return False

        _jti_cache[jti] = now + ttl_seconds
        return True


def _constant_time_eq(a: str, b: str) -> bool:
    """Constant-time string comparison."""
    if len(a) != len(b):
        return False
    return hmac.compare_digest(a.encode(), b.encode())


def validate_proof(proof: str, config: DPoPConfig) -> str:
    """
    Validate a DPoP proof and return the JWK thumbprint.

    Args:
        proof: The DPoP proof JWT
        config: Validation configuration

    Returns:
        The JWK thumbprint on success

    Raises:
        DPoPValidationError: If validation fails
    """
    try:
        header, claims, _, _ = decode_segments(proof)
    except ValueError as e:
        raise DPoPValidationError("INVALID_FORMAT", f"Failed to decode proof: {e}") from e

    if header.get("typ") != "dpop+jwt":
        raise DPoPValidationError("INVALID_HEADER", "typ must be dpop+jwt")

    alg = header.get("alg")
    if alg != "RS256":
        raise DPoPValidationError("UNSUPPORTED_ALG", f"Unsupported algorithm: {alg}")

    jwk = header.get("jwk")
    if not isinstance(jwk, dict) or not jwk:
        raise DPoPValidationError("MISSING_JWK", "Missing JWK in header")
    if "d" in jwk:
        raise DPoPValidationError("INVALID_KEY_PARAMS", "JWK must not contain private parameters")

    try:
        public_key = jwk_to_public_key(jwk)
    except (ValueError, TypeError) as e:
        raise DPoPValidationError("INVALID_KEY_PARAMS", str(e)) from e

    if not verify_signature(proof, public_key):
        raise DPoPValidationError("INVALID_SIGNATURE", "Signature verification failed")

    now = int(time.time())
    iat = claims.get("iat", 0)
    if not isinstance(iat, int):
        raise DPoPValidationError("INVALID_FORMAT", "iat must be an integer")
    if now - iat > config.max_proof_age_secs:
        raise DPoPValidationError("PROOF_EXPIRED", f"Proof expired: iat={iat}, now={now}")
    if iat > now + 5:
        raise DPoPValidationError("PROOF_EXPIRED", f"Proof from future: iat={iat}, now={now}")

    if claims.get("htm") != config.expected_method:
        raise DPoPValidationError(
            "METHOD_MISMATCH",
            f"Expected {config.expected_method}, got {claims.get('htm')}",
        )

    if claims.get("htu") != config.expected_target:
        raise DPoPValidationError(
            "TARGET_MISMATCH",
            f"Expected {config.expected_target}, got {claims.get('htu')}",
        )

    if config.require_nonce:
        proof_nonce = claims.get("nonce")
        if proof_nonce is None:
            raise DPoPValidationError("MISSING_NONCE", "Nonce required but not provided")
        if not isinstance(proof_nonce, str):
            raise DPoPValidationError("INVALID_FORMAT", "nonce must be a string")
        if config.expected_nonce and not _constant_time_eq(proof_nonce, config.expected_nonce):
            raise DPoPValidationError("NONCE_MISMATCH", "Nonce does not match")

    if config.access_token is not None:
        ath = claims.get("ath")
        if ath is None:
            raise DPoPValidationError("MISSING_ATH", "Access token hash required but not provided")
        if not isinstance(ath, str):
            raise DPoPValidationError("INVALID_FORMAT", "ath must be a string")
        if not _constant_time_eq(ath, hash_access_token(config.access_token)):
            raise DPoPValidationError("ATH_MISMATCH", "Access token hash does not match")

    jti = claims.get("jti")
    if not jti:
        raise DPoPValidationError("INVALID_FORMAT", "Missing jti")
    if not isinstance(jti, str):
        raise DPoPValidationError("INVALID_FORMAT", "jti must be a string")
    ttl = config.max_proof_age_secs + 5
    if not _check_and_record_jti(jti, ttl):
        raise DPoPValidationError("REPLAY_DETECTED", "Proof replay detected")

    return compute_thumbprint_from_jwk(jwk)


def verify_binding(proof_thumbprint: str, token_jkt: str) -> None:
    """
    Verify that the proof's key matches the token's cnf.jkt claim.

    Args:
        proof_thumbprint: Thumbprint from validate_proof
        token_jkt: The cnf.jkt claim from the access token

    Raises:
        DPoPValidationError: If thumbprints don't match
    """
    if not _constant_time_eq(proof_thumbprint, token_jkt):
        raise DPoPValidationError(
            "THUMBPRINT_MISMATCH",
            f"Token jkt={token_jkt}, proof jkt={proof_thumbprint}",
        )
