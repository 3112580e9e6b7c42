"""
HTTP client for the external ML scoring service.
"""

import logging
from http import cookiejar
from typing import Any, Dict, Optional

import requests

from relay.errors import UpstreamApplicationError, UpstreamUnavailableError

logger = logging.getLogger("rockfall-relay")


def decode_body(response: requests.Response) -> Any:
    """Return the JSON body of a response, or its raw text if it is not JSON."""
    try:
        return response.json()
    except ValueError:
        return response.text


class BlockAllCookies(cookiejar.CookiePolicy):
    """Cookie policy that never stores or sends cookies."""

    return_ok = set_ok = domain_return_ok = path_return_ok = lambda self, *args, **kwargs: False
    netscape = True
    rfc2965 = hide_cookie2 = False


def new_session() -> requests.Session:
    """
    Session shared by all handler threads.

    Cookie persistence is disabled so the jar, the only per-session state
    requests mutates while sending, stays empty. The urllib3 connection
    pool underneath is thread-safe.
    """
    session = requests.Session()
    session.cookies.set_policy(BlockAllCookies())
    return session


class ScoringClient:
    """
    Thin wrapper around the scoring service's /health and /predict endpoints.

    Each call is a single round trip bounded by `timeout`. Transport failures
    raise UpstreamUnavailableError, non-2xx answers raise
    UpstreamApplicationError carrying the upstream status and body.
    """

    def __init__(self, base_url: str, timeout: float, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session if session is not None else new_session()

    def _send(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise UpstreamUnavailableError(self.base_url, reason=str(e)) from e

        body = decode_body(response)
        if not 200 <= response.status_code < 300:
            raise UpstreamApplicationError(response.status_code, body)
        return body

    def health(self) -> Any:
        """Fetch the scoring service's health payload."""
        return self._send("GET", "/health")

    def predict(self, features: Dict[str, float]) -> Any:
        """
        Forward one prediction request.

        Args:
            features: The coerced slope, rainfall and temperature values.

        Returns:
            The upstream PredictionResult payload, untouched.
        """
        logger.info(f"Forwarding prediction request to {self.base_url}/predict")
        return self._send("POST", "/predict", json=features)

    def close(self):
        self.session.close()
