#!/usr/bin/env python3
"""
Task Manager Quickstart — the whole task lifecycle in one script.

Signs up → logs in → creates tasks → lists → updates → deletes.
Run with: python examples/quickstart.py

Requires: pip install httpx
Backend must be running: http://localhost:2000 (or TASKMANAGER_API_URL)
"""

from _common import create_client


def main():
    client = create_client()

    # ── Create tasks ──────────────────────────────────────────────
    print("\n1. Creating tasks...")
    ids = []
    for title, description in [
        ("Write quarterly report", "Numbers from finance first"),
        ("Book dentist", ""),
    ]:
        resp = client.post("/tasks", json={"title": title, "description": description})
        assert resp.status_code == 201, f"Failed: {resp.text}"
        ids.append(resp.json()["id"])
        print(f"   Task #{ids[-1]}: {title}")

    # ── List (first read fills the cache, second is served from it) ──
    print("\n2. Listing tasks...")
    for _ in range(2):
        resp = client.get("/tasks")
        assert resp.status_code == 200, f"Failed: {resp.text}"
    for task in resp.json():
        mark = "x" if task["completed"] else " "
        print(f"   [{mark}] #{task['id']} {task['title']}")

    # ── Complete the first one (PUT replaces every field) ─────────
    print("\n3. Completing the first task...")
    current = client.get(f"/tasks/{ids[0]}").json()
    resp = client.put(f"/tasks/{ids[0]}", json={
        "title": current["title"],
        "description": current["description"],
        "completed": True,
    })
    assert resp.status_code == 200, f"Failed: {resp.text}"
    print(f"   Task #{ids[0]} completed: {client.get(f'/tasks/{ids[0]}').json()['completed']}")

    # ── Delete the second one ─────────────────────────────────────
    print("\n4. Deleting the second task...")
    resp = client.delete(f"/tasks/{ids[1]}")
    assert resp.status_code == 204, f"Failed: {resp.text}"
    resp = client.get(f"/tasks/{ids[1]}")
    print(f"   GET /tasks/{ids[1]} → {resp.status_code}")

    # ── Without a token ───────────────────────────────────────────
    print("\n5. Asking without a token...")
    resp = client.get("/tasks", headers={"Authorization": ""})
    print(f"   {resp.status_code} {resp.json()}")

    print("\nDone.")


if __name__ == "__main__":
    main()
