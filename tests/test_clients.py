"""
Tests for the command-line client, smoke test and request simulator.
"""

import sys
import json
from pathlib import Path

import pytest
import requests

from relay import predict as cli

from conftest import SAMPLE_RESULT, make_response

# Scripts are plain files, not packages
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "monitoring"))

from simulate_requests import generate_synthetic_inputs, summarize, send_prediction_request


def envelope(data):
    return {"success": True, "data": data, "timestamp": "2026-10-17T12:00:00Z"}


class TestRequestPrediction:
    """Tests for relay.predict.request_prediction."""

    def test_returns_data_on_success(self, monkeypatch):
        captured = {}

        def fake_post(url, json=None, timeout=None):
            captured.update(url=url, json=json, timeout=timeout)
            return make_response(200, envelope(SAMPLE_RESULT))

        monkeypatch.setattr(cli.requests, "post", fake_post)

        result = cli.request_prediction("http://relay:3000/", 35, 120, 18)
        assert result == SAMPLE_RESULT
        assert captured["url"] == "http://relay:3000/api/predict"
        assert captured["json"] == {"slope": 35, "rainfall": 120, "temperature": 18}

    def test_relay_error_is_shown_verbatim(self, monkeypatch):
        monkeypatch.setattr(
            cli.requests, "post",
            lambda *a, **kw: make_response(422, {"error": "model not ready", "details": {}}),
        )
        with pytest.raises(cli.PredictionFailed, match="model not ready"):
            cli.request_prediction("http://relay:3000", 1, 2, 3)

    def test_unreachable_relay_uses_fallback(self, monkeypatch):
        def refuse(*args, **kwargs):
            raise requests.ConnectionError("refused")

        monkeypatch.setattr(cli.requests, "post", refuse)
        with pytest.raises(cli.PredictionFailed) as excinfo:
            cli.request_prediction("http://relay:3000", 1, 2, 3)
        assert str(excinfo.value) == cli.FALLBACK_ERROR

    def test_error_without_message_uses_fallback(self, monkeypatch):
        monkeypatch.setattr(cli.requests, "post", lambda *a, **kw: make_response(500, text="oops"))
        with pytest.raises(cli.PredictionFailed) as excinfo:
            cli.request_prediction("http://relay:3000", 1, 2, 3)
        assert str(excinfo.value) == cli.FALLBACK_ERROR


class TestFormatPrediction:
    """Tests for the text rendering of a result."""

    def test_contains_result_fields(self):
        text = cli.format_prediction(SAMPLE_RESULT)
        assert "High Risk" in text
        assert "87.5%" in text
        assert "Low:    5%" in text
        assert "Medium: 15%" in text
        assert "High:   80%" in text
        assert "Slope:       35 deg" in text
        assert SAMPLE_RESULT["message"] in text

    def test_tolerates_missing_sections(self):
        text = cli.format_prediction({"risk_level": "Low"})
        assert "Low Risk" in text


class TestCliMain:
    """Tests for the CLI entry point."""

    def test_prints_prediction(self, monkeypatch, capsys):
        monkeypatch.setattr(cli.requests, "post", lambda *a, **kw: make_response(200, envelope(SAMPLE_RESULT)))
        cli.main(["--slope", "35", "--rainfall", "120", "--temperature", "18"])
        assert "High Risk" in capsys.readouterr().out

    def test_exits_with_error(self, monkeypatch, capsys):
        monkeypatch.setattr(
            cli.requests, "post",
            lambda *a, **kw: make_response(400, {"error": "Missing required fields: slope, rainfall, temperature"}),
        )
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["--slope", "1", "--rainfall", "2", "--temperature", "3"])
        assert excinfo.value.code == 1
        assert "Missing required fields" in capsys.readouterr().out


class TestSimulateRequests:
    """Tests for the post-deployment simulator helpers."""

    def test_inputs_within_advisory_ranges(self):
        inputs = generate_synthetic_inputs(50)
        assert len(inputs) == 50
        for item in inputs:
            assert 0 <= item["slope"] <= 90
            assert 0 <= item["rainfall"] <= 500
            assert -50 <= item["temperature"] <= 60

    def test_inputs_reproducible(self):
        assert generate_synthetic_inputs(10, seed=7) == generate_synthetic_inputs(10, seed=7)

    def test_send_records_risk_level(self, monkeypatch):
        import simulate_requests

        monkeypatch.setattr(
            simulate_requests.requests, "post",
            lambda *a, **kw: make_response(200, envelope(SAMPLE_RESULT)),
        )
        result = send_prediction_request("http://relay:3000", {"slope": 1, "rainfall": 2, "temperature": 3})
        assert result["status_code"] == 200
        assert result["risk_level"] == "High"

    def test_summarize(self):
        results = [
            {"status_code": 200, "risk_level": "High", "latency_seconds": 0.1},
            {"status_code": 200, "risk_level": "Low", "latency_seconds": 0.3},
            {"status_code": 503, "error": "ML scoring service unavailable", "latency_seconds": 0.01},
        ]
        summary = summarize(results)
        assert summary["total_requests"] == 3
        assert summary["successful"] == 2
        assert summary["risk_distribution"] == {"High": 1, "Low": 1}
        assert summary["status_codes"] == {"200": 2, "503": 1}
        assert summary["max_latency"] == 0.3
        json.dumps(summary)

    def test_summarize_without_successes(self):
        summary = summarize([{"status_code": None, "error": "refused", "latency_seconds": 0.0}])
        assert summary["success_rate"] == 0.0
        assert "avg_latency" not in summary
