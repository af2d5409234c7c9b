#!/usr/bin/env python3
"""
tasktrack quickstart: the full lifecycle in one script.

Registers a user → logs in → creates a project → adds tasks →
toggles one → shows that a finished (past-due) task is read-only →
deletes the project.

Run with: python examples/quickstart.py
Requires: pip install httpx
Server must be running: uvicorn tasktrack.main:app --port 3000
"""

import sys
import uuid

import httpx

BASE = "http://localhost:3000/api/v1"


def main():
    run_id = uuid.uuid4().hex[:6]
    client = httpx.Client(base_url=BASE, timeout=10)

    # ── Health check ──────────────────────────────────────────────
    print("Checking backend health...")
    try:
        resp = client.get("/health")
    except httpx.ConnectError:
        print(f"Backend not reachable at {BASE}")
        sys.exit(1)
    print(f"  Database: {'✓' if resp.json()['database'] == 'ok' else '✗'}")

    # ── Register + login ──────────────────────────────────────────
    email = f"demo-{run_id}@example.com"
    print(f"\n1. Registering {email}...")
    resp = client.post("/auth/register", json={
        "email": email, "password": "demo-password", "name": "Demo User",
    })
    assert resp.status_code == 201, f"Failed: {resp.text}"

    resp = client.post("/auth/login", json={"email": email, "password": "demo-password"})
    assert resp.status_code == 200, f"Failed: {resp.text}"
    client.headers["Authorization"] = f"Bearer {resp.json()['token']}"
    print("   Logged in.")

    # ── Project ───────────────────────────────────────────────────
    print("\n2. Creating project...")
    resp = client.post("/projects", json={"name": "Spring cleaning", "description": "Demo"})
    assert resp.status_code == 201, f"Failed: {resp.text}"
    project = resp.json()
    print(f"   Project #{project['id']}: {project['name']}")

    # ── Tasks ─────────────────────────────────────────────────────
    print("\n3. Adding tasks...")
    resp = client.post(f"/projects/{project['id']}/tasks", json={"title": "Wash windows"})
    open_task = resp.json()
    resp = client.post(f"/projects/{project['id']}/tasks", json={
        "title": "File taxes", "finish_date": "2020-01-01",
    })
    past_task = resp.json()
    for t in (open_task, past_task):
        print(f"   #{t['id']} {t['title']}  finished={t['is_finished']}")

    print("\n4. Completing the open task...")
    resp = client.patch(
        f"/projects/{project['id']}/tasks/{open_task['id']}/toggle",
        json={"is_completed": True},
    )
    print(f"   {resp.status_code}: is_completed={resp.json()['is_completed']}")

    print("\n5. Trying to complete the past-due task...")
    resp = client.patch(
        f"/projects/{project['id']}/tasks/{past_task['id']}/toggle",
        json={"is_completed": True},
    )
    print(f"   {resp.status_code}: {resp.json()['detail']}")

    # ── Cleanup ───────────────────────────────────────────────────
    print("\n6. Deleting the project (tasks go with it)...")
    resp = client.delete(f"/projects/{project['id']}")
    print(f"   {resp.status_code}: {resp.json()}")

    print("\nDone.")


if __name__ == "__main__":
    main()
