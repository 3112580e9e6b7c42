"""
Command-line client for the rockfall relay.

Submits slope, rainfall and temperature to the relay and prints the risk
assessment the way the web form shows it.

Usage:
    python -m relay.predict --slope 35 --rainfall 120 --temperature 18
"""

import sys
import argparse
from typing import Any, Dict

import requests

DEFAULT_RELAY_URL = "http://localhost:3000"
FALLBACK_ERROR = "Failed to get prediction. Ensure backend is running."


class PredictionFailed(Exception):
    pass


def request_prediction(base_url: str, slope: float, rainfall: float,
                       temperature: float, timeout: float = 30) -> Dict[str, Any]:
    """
    Call POST /api/predict on the relay.

    Returns:
        The PredictionResult found under the envelope's "data" key.

    Raises:
        PredictionFailed: With the relay's error message, or a generic
            fallback when the relay is unreachable or gives none.
    """
    try:
        resp = requests.post(
            f"{base_url.rstrip('/')}/api/predict",
            json={"slope": slope, "rainfall": rainfall, "temperature": temperature},
            timeout=timeout,
        )
    except requests.RequestException as e:
        raise PredictionFailed(FALLBACK_ERROR) from e

    try:
        body = resp.json()
    except ValueError:
        body = None

    if resp.status_code != 200 or not isinstance(body, dict):
        message = body.get("error") if isinstance(body, dict) else None
        raise PredictionFailed(message or FALLBACK_ERROR)

    data = body.get("data")
    if not isinstance(data, dict):
        raise PredictionFailed(FALLBACK_ERROR)
    return data


def format_prediction(prediction: Dict[str, Any]) -> str:
    """Render a PredictionResult as a short text report."""
    probabilities = prediction.get("probabilities") or {}
    echoed = prediction.get("input") or {}

    lines = [
        f"Risk level:  {prediction.get('risk_level')} Risk",
        f"Message:     {prediction.get('message', '')}",
        f"Confidence:  {prediction.get('confidence')}%",
        "Risk probabilities:",
        f"  Low:    {probabilities.get('low')}%",
        f"  Medium: {probabilities.get('medium')}%",
        f"  High:   {probabilities.get('high')}%",
        "Input parameters:",
        f"  Slope:       {echoed.get('slope')} deg",
        f"  Rainfall:    {echoed.get('rainfall')} mm",
        f"  Temperature: {echoed.get('temperature')} C",
    ]
    return "\n".join(lines)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Predict rockfall risk through the relay")
    parser.add_argument("--url", default=DEFAULT_RELAY_URL, help="Base URL of the relay")
    parser.add_argument("--slope", type=float, required=True, help="Slope angle in degrees (0 - 90)")
    parser.add_argument("--rainfall", type=float, required=True, help="Recent 24-hour rainfall in mm (0 - 500)")
    parser.add_argument("--temperature", type=float, required=True, help="Ambient temperature in C (-50 to 60)")
    args = parser.parse_args(argv)

    try:
        prediction = request_prediction(args.url, args.slope, args.rainfall, args.temperature)
    except PredictionFailed as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(format_prediction(prediction))


if __name__ == "__main__":
    main()
