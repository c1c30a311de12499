#!/usr/bin/env python3
"""
SmartTodo Quickstart — full task lifecycle in one script.

Registers a user → logs in → creates a task → completes it → shows that
another user cannot touch it → deletes it.
Run with: python examples/quickstart.py

Requires: pip install httpx
Backend must be running: http://localhost:8000  (smarttodo serve)
"""

import sys
import uuid

import httpx

BASE = "http://localhost:8000"


def register_and_login(client: httpx.Client, username: str, password: str) -> dict:
    """Register a fresh user and login, returning auth headers."""
    resp = client.post("/api/auth/register", json={"username": username, "password": password})
    assert resp.status_code == 201, f"Registration failed: {resp.text}"

    resp = client.post("/api/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, f"Login failed: {resp.text}"
    token = resp.json()["data"]["token"]
    return {"Authorization": f"Bearer {token}"}


def main():
    run_id = uuid.uuid4().hex[:6]
    client = httpx.Client(base_url=BASE, timeout=10)

    # ── Health check ──────────────────────────────────────────────
    print("Checking backend health...")
    try:
        resp = client.get("/health")
    except httpx.ConnectError:
        print(f"Backend not reachable at {BASE}")
        print("Start it with:  smarttodo serve --reload")
        sys.exit(1)
    health = resp.json()["data"]
    print(f"  Database: {'✓' if health['database'] == 'ok' else '✗'}")

    # ── Accounts ──────────────────────────────────────────────────
    print("\n1. Registering two users...")
    ann = register_and_login(client, f"ann-{run_id}", "pw123")
    bob = register_and_login(client, f"bob-{run_id}", "hunter2")
    print(f"   ann-{run_id} and bob-{run_id} logged in")

    # ── Create task ───────────────────────────────────────────────
    print("\n2. Creating task as ann...")
    resp = client.post("/api/tasks", json={"title": "Buy milk", "description": "2 liters"}, headers=ann)
    assert resp.status_code == 201, f"Failed: {resp.text}"
    task = resp.json()["data"]["task"]
    print(f"   Task {task['id'][:8]}...: {task['title']} [{task['status']}]")

    # ── Ownership ─────────────────────────────────────────────────
    print("\n3. Bob tries to complete ann's task...")
    resp = client.put(f"/api/tasks/{task['id']}", json={"status": "completed"}, headers=bob)
    print(f"   → {resp.status_code} {resp.json()['message']}")
    assert resp.status_code == 403

    # ── Update ────────────────────────────────────────────────────
    print("\n4. Ann completes it...")
    resp = client.put(f"/api/tasks/{task['id']}", json={"status": "completed"}, headers=ann)
    assert resp.status_code == 200, f"Failed: {resp.text}"
    print(f"   → {resp.json()['data']['task']['status']}")

    # ── Delete ────────────────────────────────────────────────────
    print("\n5. Ann deletes it...")
    resp = client.delete(f"/api/tasks/{task['id']}", headers=ann)
    assert resp.status_code == 200, f"Failed: {resp.text}"

    resp = client.get("/api/tasks", headers=ann)
    print(f"   Remaining tasks: {resp.json()['data']['count']}")

    print("\n✓ Complete lifecycle finished.")


if __name__ == "__main__":
    main()
