#!/usr/bin/env python3
"""
Buzzhub demo — one quiz round driven over HTTP.

Sends the team list, simulates buzzer presses, then awards points,
pausing between steps so you can watch a display (or `buzzhub listen`)
react. Run with: python examples/quiz_night.py

Requires: pip install httpx
Relay must be running: http://localhost:9090
"""

import random
import sys
import time

import httpx

BASE = "http://localhost:9090"
TEAMS = 4


def main():
    client = httpx.Client(base_url=BASE, timeout=10)

    # ── Health check ──────────────────────────────────────────────
    print("Checking relay health...")
    try:
        resp = client.get("/health")
    except httpx.ConnectError:
        print(f"Relay not reachable at {BASE}. Start it with: buzzhub serve")
        sys.exit(1)
    health = resp.json()
    print(f"  {health['subscribers']} display(s) connected")
    if not health["subscribers"]:
        print("  (events will still be accepted, nobody will see them)")

    # ── Team list ─────────────────────────────────────────────────
    teams = [
        {"id": i + 1, "name": f"Team {i + 1}", "signal": chr(65 + i), "score": 0}
        for i in range(TEAMS)
    ]
    print(f"\n1. Sending {len(teams)} teams...")
    resp = client.post("/publish-update", json={"teams": teams})
    assert resp.status_code == 200, f"Failed: {resp.text}"
    time.sleep(1)

    # ── Three questions ───────────────────────────────────────────
    for question in range(1, 4):
        team = random.choice(teams)
        print(f"\n{question + 1}. Team {team['signal']} buzzes in...")
        resp = client.get("/publish-signal", params={"sig": team["signal"]})
        print(f"   {resp.text}")
        time.sleep(2)

        change = random.choice([10, -5])
        team["score"] += change
        print(f"   {'Right' if change > 0 else 'Wrong'} answer: {change:+d}")
        resp = client.post(
            "/publish-update",
            json={"teamName": team["name"], "scoreChange": change},
        )
        assert resp.status_code == 200, f"Failed: {resp.text}"
        time.sleep(1)

    # ── Final scores ──────────────────────────────────────────────
    print("\nFinal scores:")
    for team in sorted(teams, key=lambda t: t["score"], reverse=True):
        client.get(
            "/publish-score", params={"sig": team["signal"], "score": team["score"]}
        )
        print(f"   {team['name']}: {team['score']}")

    client.close()


if __name__ == "__main__":
    main()
