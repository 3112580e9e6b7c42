"""
Shared fixtures: a stand-in for the scoring service's HTTP session.
"""

import json

import pytest
import requests
from fastapi.testclient import TestClient

from api.app import create_app
from relay.config import RelayConfig
from relay.scoring import ScoringClient

UPSTREAM_URL = "http://scoring.test:5000"

SAMPLE_RESULT = {
    "risk_level": "High",
    "confidence": 87.5,
    "probabilities": {"low": 5, "medium": 15, "high": 80},
    "input": {"slope": 35, "rainfall": 120, "temperature": 18},
    "message": "High rockfall risk. Restrict access to the slope.",
}


def make_response(status_code=200, body=None, text=None) -> requests.Response:
    """Build a real requests.Response carrying a JSON or plain-text body."""
    response = requests.Response()
    response.status_code = status_code
    if text is not None:
        response._content = text.encode("utf-8")
        response.headers["Content-Type"] = "text/plain"
    else:
        response._content = json.dumps(body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    response.encoding = "utf-8"
    return response


class StubSession:
    """Records outgoing requests and replays a canned outcome per path."""

    def __init__(self):
        self.calls = []
        self.outcomes = {}
        self.closed = False

    def on(self, method: str, path: str, outcome):
        """Register a Response to return, or an exception to raise."""
        self.outcomes[(method, path)] = outcome

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        path = url[len(UPSTREAM_URL):]
        outcome = self.outcomes.get((method, path))
        if outcome is None:
            raise requests.ConnectionError(f"no stub registered for {method} {path}")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self):
        self.closed = True


@pytest.fixture
def session():
    return StubSession()


@pytest.fixture
def config():
    return RelayConfig(upstream_url=UPSTREAM_URL, upstream_timeout=2.5)


@pytest.fixture
def client(config, session):
    """TestClient for a relay whose scoring service is the stub session."""
    scoring = ScoringClient(config.upstream_url, timeout=config.upstream_timeout, session=session)
    return TestClient(create_app(config, scoring_client=scoring))
