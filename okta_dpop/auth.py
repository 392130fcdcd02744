"""httpx authentication flow that attaches DPoP proofs to requests."""

import logging
import threading
from typing import Dict, Generator, Optional
from urllib.parse import urlparse, urlunparse

import httpx

from .client import DPoPProofGenerator

log = logging.getLogger(__name__)

DPOP_HEADER = "DPoP"
DPOP_NONCE_HEADER = "DPoP-Nonce"
USE_DPOP_NONCE = "use_dpop_nonce"


def normalize_htu(raw_url: str) -> str:
    """
    Build the ``htu`` value for a request URL: scheme, host and path only.

    Scheme and host are lowercased and default ports dropped.
    """
    p = urlparse(raw_url)

    scheme = p.scheme.lower()
    netloc = p.netloc.lower()

    if scheme == "http" and netloc.endswith(":80"):
        netloc = netloc[:-3]
    elif scheme == "https" and netloc.endswith(":443"):
        netloc = netloc[:-4]

    path = p.path
    if scheme in ("http", "https") and not path:
        path = "/"

    return urlunparse((scheme, netloc, path, "", "", ""))


def is_auth_server_nonce_error(response: httpx.Response) -> bool:
    if response.status_code != 400:
        return False
    try:
        body = response.json()
    except ValueError:
        return False
    return isinstance(body, dict) and body.get("error") == USE_DPOP_NONCE


def is_resource_server_nonce_error(response: httpx.Response) -> bool:
    return response.status_code == 401 and USE_DPOP_NONCE in response.headers.get("WWW-Authenticate", "")


class DPoPAuth(httpx.Auth):
    """
    Attach a fresh DPoP proof to every request.

    When an access token is set, the request is sent with
    ``Authorization: DPoP <token>`` and the proof carries ``ath``.
    If the server answers ``use_dpop_nonce`` with a ``DPoP-Nonce`` header,
    the request is resent once with a proof carrying that nonce.

    Example:
        >>> auth = DPoPAuth(DPoPProofGenerator(config))
        >>> with httpx.Client(auth=auth) as client:
        ...     client.post(auth.generator.token_endpoint, data=form)
    """

    requires_request_body = True
    requires_response_body = True

    def __init__(self, generator: DPoPProofGenerator, access_token: Optional[str] = None):
        self.generator = generator
        self._access_token = access_token
        self._nonces: Dict[str, str] = {}
        self._lock = threading.Lock()

    def set_access_token(self, access_token: Optional[str]) -> None:
        """Bind later requests to a new (e.g. refreshed) access token."""
        self._access_token = access_token

    def set_nonce(self, url: str, nonce: str) -> None:
        """Remember the latest nonce issued by the server at ``url``."""
        with self._lock:
            self._nonces[_origin(url)] = nonce

    def get_nonce(self, url: str) -> Optional[str]:
        with self._lock:
            return self._nonces.get(_origin(url))

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        self._prepare(request)
        response = yield request

        nonce = response.headers.get(DPOP_NONCE_HEADER)
        if not nonce:
            return
        self.set_nonce(str(request.url), nonce)

        if is_auth_server_nonce_error(response) or is_resource_server_nonce_error(response):
            log.debug("Server requires DPoP nonce, retrying %s %s", request.method, _origin(str(request.url)))
            self._prepare(request)
            response = yield request

            nonce = response.headers.get(DPOP_NONCE_HEADER)
            if nonce:
                self.set_nonce(str(request.url), nonce)

    def _prepare(self, request: httpx.Request) -> None:
        url = str(request.url)
        access_token = self._access_token
        proof = self.generator.generate_proof(
            nonce=self.get_nonce(url),
            http_method=request.method,
            uri=normalize_htu(url),
            access_token=access_token,
        )
        request.headers[DPOP_HEADER] = proof
        if access_token:
            request.headers["Authorization"] = f"DPoP {access_token}"


def _origin(url: str) -> str:
    p = urlparse(normalize_htu(url))
    return f"{p.scheme}://{p.netloc}"
