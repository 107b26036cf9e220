"""
Session Simulator Script - plays back sample game results through the API.

Reads a JSON list of session reports, makes sure each student exists
(profile lookup creates missing ones), posts every report to the session
endpoint and prints the badges earned along the way.

Usage:
    python simulate_sessions.py                              # Uses default URL and sample file
    python simulate_sessions.py http://localhost:8000        # Custom API URL
    python simulate_sessions.py http://backend:8000 my.json  # Custom URL and data file
"""

import json
import os
import sys
import time

import httpx

DEFAULT_DATA_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "sample_sessions.json")

# Unavailable (503) is the only status worth retrying
RETRY_STATUSES = {503}
MAX_ATTEMPTS = 3


def send(client: httpx.Client, method: str, path: str, **kwargs) -> httpx.Response:
    """Send a request, retrying with backoff while the store is unavailable."""
    for attempt in range(1, MAX_ATTEMPTS + 1):
        resp = client.request(method, path, **kwargs)
        if resp.status_code not in RETRY_STATUSES or attempt == MAX_ATTEMPTS:
            return resp
        time.sleep(0.2 * attempt)
    return resp


def load_reports(path: str) -> list:
    with open(path, "r") as f:
        return json.load(f)


def run(client: httpx.Client, reports: list) -> dict:
    """
    Replay ``reports`` against the API behind ``client``.

    Returns a summary dict: sessions recorded, failures, badges earned and
    the final state of every student touched.
    """
    summary = {"sessions": 0, "errors": 0, "badges": [], "students": {}}

    for student_id in sorted({r["studentId"] for r in reports}):
        resp = send(client, "GET", f"/api/students/{student_id}")
        resp.raise_for_status()

    for report in reports:
        resp = send(client, "POST", "/api/sessions", json=report)
        if resp.status_code != 200:
            summary["errors"] += 1
            print(f"  ❌ {report['studentId']} game {report['gameNum']}: "
                  f"{resp.status_code} {resp.json().get('message', '')}")
            continue

        body = resp.json()
        summary["sessions"] += 1
        summary["students"][report["studentId"]] = body["student"]
        badge = body["newBadge"]
        if badge:
            summary["badges"].append({"studentId": report["studentId"], **badge})
            print(f"  🏅 {report['studentId']}: {badge['type']} (score {badge['score']})")
        else:
            print(f"  ✅ {report['studentId']} game {report['gameNum']}: score {report['score']}")

    return summary


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    api_url = argv[0] if argv else os.getenv("API_URL", "http://localhost:8000")
    data_file = argv[1] if len(argv) > 1 else DEFAULT_DATA_FILE

    if not os.path.exists(data_file):
        print(f"Error: Could not find {data_file}")
        return 1

    print(f"Loading sessions from: {data_file}")
    reports = load_reports(data_file)
    print(f"Sending {len(reports)} sessions to: {api_url}")
    print()

    with httpx.Client(base_url=api_url, timeout=30.0) as client:
        summary = run(client, reports)

    print()
    print("=" * 60)
    print("SIMULATION SUMMARY")
    print("=" * 60)
    print(f"  Sessions Recorded: {summary['sessions']}")
    print(f"  Badges Earned:     {len(summary['badges'])}")
    print(f"  Errors:            {summary['errors']}")
    print("=" * 60)
    for student_id, student in sorted(summary["students"].items()):
        print(f"  {student_id}: sessions={student['sessions']} "
              f"highScore={student['highScore']} overallScore={student['overallScore']}")

    return 0 if summary["errors"] == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
