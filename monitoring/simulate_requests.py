"""
Simulate synthetic prediction requests against the deployed relay
and track end-to-end behaviour post-deployment.

Draws slope, rainfall and temperature from the advisory input ranges,
sends each to the relay, and generates a latency and risk-level report.

Usage:
    python monitoring/simulate_requests.py --url http://localhost:3000 --num-requests 50
"""

import os
import json
import time
import argparse
from collections import Counter
from datetime import datetime

import numpy as np
import requests

# Advisory ranges shown on the input form
SLOPE_RANGE = (0.0, 90.0)
RAINFALL_RANGE = (0.0, 500.0)
TEMPERATURE_RANGE = (-50.0, 60.0)


def generate_synthetic_inputs(num_requests: int = 20, seed: int = 42) -> list:
    """Generate random prediction inputs within the advisory ranges."""
    rng = np.random.default_rng(seed)
    inputs = []
    for _ in range(num_requests):
        inputs.append({
            "slope": round(float(rng.uniform(*SLOPE_RANGE)), 1),
            "rainfall": round(float(rng.uniform(*RAINFALL_RANGE)), 1),
            "temperature": round(float(rng.uniform(*TEMPERATURE_RANGE)), 1),
        })
    return inputs


def send_prediction_request(base_url: str, features: dict) -> dict:
    """Send one input to the relay and return the outcome with its latency."""
    start = time.time()
    try:
        resp = requests.post(f"{base_url}/api/predict", json=features, timeout=30)
    except requests.RequestException as e:
        return {
            "input": features,
            "status_code": None,
            "error": str(e),
            "latency_seconds": round(time.time() - start, 4),
        }
    latency = time.time() - start

    try:
        body = resp.json()
    except ValueError:
        body = {"error": resp.text}

    result = {"input": features, "status_code": resp.status_code, "latency_seconds": round(latency, 4)}
    if resp.status_code == 200:
        data = body.get("data") or {}
        result["risk_level"] = data.get("risk_level")
        result["confidence"] = data.get("confidence")
    else:
        result["error"] = body.get("error", "Unknown")
    return result


def summarize(results: list) -> dict:
    """Compute success rate, latency percentiles and risk distribution."""
    ok = [r for r in results if r["status_code"] == 200]
    latencies = [r["latency_seconds"] for r in ok]
    summary = {
        "total_requests": len(results),
        "successful": len(ok),
        "success_rate": len(ok) / len(results) if results else 0.0,
        "risk_distribution": dict(Counter(r["risk_level"] for r in ok)),
        "status_codes": dict(Counter(str(r["status_code"]) for r in results)),
    }
    if latencies:
        summary.update({
            "avg_latency": round(float(np.mean(latencies)), 4),
            "p50_latency": round(float(np.percentile(latencies, 50)), 4),
            "p95_latency": round(float(np.percentile(latencies, 95)), 4),
            "p99_latency": round(float(np.percentile(latencies, 99)), 4),
            "max_latency": round(float(max(latencies)), 4),
        })
    return summary


def run_simulation(base_url: str, num_requests: int = 20, report_path: str = "monitoring/performance_report.json"):
    """Run simulation: send synthetic inputs and collect relay metrics."""
    print(f"\n{'='*60}")
    print(f"  Post-Deployment Relay Tracking")
    print(f"  Endpoint: {base_url}")
    print(f"  Time: {datetime.now().isoformat()}")
    print(f"{'='*60}\n")

    results = []
    for features in generate_synthetic_inputs(num_requests):
        result = send_prediction_request(base_url, features)
        results.append(result)

        if result["status_code"] == 200:
            print(
                f"  slope={features['slope']}, rainfall={features['rainfall']}, "
                f"temperature={features['temperature']} -> "
                f"risk={result['risk_level']}, conf={result['confidence']}, "
                f"latency={result['latency_seconds']:.4f}s"
            )
        else:
            print(f"  Request failed ({result['status_code']}): {result.get('error', 'Unknown')}")

    summary = summarize(results)

    print(f"\n{'='*60}")
    print("  PERFORMANCE REPORT")
    print(f"{'='*60}")
    print(f"  Total Requests:     {summary['total_requests']}")
    print(f"  Successful:         {summary['successful']}")
    print(f"  Success Rate:       {summary['success_rate']*100:.1f}%")
    if "avg_latency" in summary:
        print(f"  Avg Latency:        {summary['avg_latency']:.4f}s")
        print(f"  P50 Latency:        {summary['p50_latency']:.4f}s")
        print(f"  P95 Latency:        {summary['p95_latency']:.4f}s")
        print(f"  P99 Latency:        {summary['p99_latency']:.4f}s")
        print(f"  Max Latency:        {summary['max_latency']:.4f}s")
    print(f"\n  Risk Distribution:  {summary['risk_distribution']}")
    print(f"  Status Codes:       {summary['status_codes']}")

    # Save results
    report_dir = os.path.dirname(report_path)
    if report_dir:
        os.makedirs(report_dir, exist_ok=True)
    report = {
        "timestamp": datetime.now().isoformat(),
        "endpoint": base_url,
        **summary,
        "results": results,
    }
    with open(report_path, "w") as f:
        json.dump(report, f, indent=2, default=str)
    print(f"\n  Report saved to: {report_path}")
    return report


def main():
    parser = argparse.ArgumentParser(description="Simulate requests and track relay performance")
    parser.add_argument("--url", default="http://localhost:3000", help="Relay base URL")
    parser.add_argument("--num-requests", type=int, default=20, help="Number of synthetic requests")
    parser.add_argument("--report", default="monitoring/performance_report.json", help="Report output path")
    args = parser.parse_args()

    run_simulation(args.url.rstrip("/"), args.num_requests, args.report)


if __name__ == "__main__":
    main()
