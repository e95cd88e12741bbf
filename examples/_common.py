"""
Shared helpers for Task Manager examples.

Handles the health check and authentication (sign up + login) so each
example can focus on its specific workflow.
"""

import os
import sys
import uuid

import httpx

BASE = os.environ.get("TASKMANAGER_API_URL", "http://localhost:2000").rstrip("/")


def check_backend() -> None:
    """Verify the backend is reachable and its database answers."""
    try:
        resp = httpx.get(f"{BASE}/health", timeout=5)
    except httpx.ConnectError:
        print(f"ERROR: Backend not reachable at {BASE}")
        print("Start it with:  taskmanager serve")
        sys.exit(1)

    if resp.status_code != 200:
        print(f"ERROR: Health check returned {resp.status_code}")
        sys.exit(1)

    health = resp.json()
    print("Backend health:")
    print(f"  Version:  {health['version']}")
    print(f"  Database: {health['database']}")

    if health["status"] != "healthy":
        print("\nERROR: Database is not connected. Check TASKMANAGER_DATABASE_URL.")
        sys.exit(1)


def authenticate() -> tuple[str, str]:
    """Sign up a fresh user and log in, returning (email, token).

    Uses a unique email per run so examples are idempotent.
    """
    run_id = uuid.uuid4().hex[:8]
    email = f"demo-{run_id}@example.com"
    password = "demo-password-123"

    resp = httpx.post(
        f"{BASE}/signUp",
        json={"email": email, "password": password},
        timeout=10,
    )
    if resp.status_code not in (201, 409):  # 409 = already exists
        print(f"ERROR: Sign-up failed: {resp.status_code} {resp.text}")
        sys.exit(1)

    resp = httpx.post(
        f"{BASE}/login",
        json={"email": email, "password": password},
        timeout=10,
    )
    if resp.status_code != 200:
        print(f"ERROR: Login failed: {resp.status_code} {resp.text}")
        sys.exit(1)

    return email, resp.json()["token"]


def create_client() -> httpx.Client:
    """Check backend, authenticate, and return an httpx Client with auth headers."""
    check_backend()
    email, token = authenticate()
    print(f"  Auth:     ✓ {email}")
    return httpx.Client(
        base_url=BASE,
        timeout=10,
        headers={"Authorization": f"Bearer {token}"},
    )
