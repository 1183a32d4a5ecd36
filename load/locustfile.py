"""
Locust load script for the marketplace wallet and booking paths.

Simulates:
- Login via /api/v1/auth/login (OAuth2 form, phone as username)
- Customers recharging, reading their wallet summary and transaction pages,
  and booking a worker paid from the wallet
- Workers polling their job list and dashboard and accepting pending jobs

Configure with env vars or Locust UI:
- HOST: pass via `--host http://localhost:8000`
- MARKET_CUSTOMERS / MARKET_WORKERS: CSV of `phone:password` pairs
- MARKET_WORKER_IDS: CSV of worker ids customers may book (required for booking tasks)

Run:
  locust -f load/locustfile.py --host http://localhost:8000
Concurrent wallet tasks exercise the compare-and-set path; expect occasional
409 responses on the same account and no 5xx.
"""

from __future__ import annotations

import logging
import os
import random
import time
from typing import Dict, List, Optional, Tuple

from locust import HttpUser, between, events, task

API = "/api/v1"


# --- Config -------------------------------------------------------------------

def _load_pairs(var: str) -> List[Tuple[str, str]]:
    out: List[Tuple[str, str]] = []
    for piece in os.getenv(var, "").split(","):
        piece = piece.strip()
        if not piece or ":" not in piece:
            continue
        phone, pwd = piece.split(":", 1)
        phone = phone.strip(); pwd = pwd.strip()
        if phone and pwd:
            out.append((phone, pwd))
    return out


CUSTOMERS = _load_pairs("MARKET_CUSTOMERS") or [("9000000001", "password1")]
WORKERS = _load_pairs("MARKET_WORKERS") or [("9000000101", "password1")]
WORKER_IDS = [int(x) for x in os.getenv("MARKET_WORKER_IDS", "").split(",") if x.strip().isdigit()]


# --- Helpers ------------------------------------------------------------------

def _auth_header(token: Optional[str]) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"} if token else {}


def _safe_json(resp) -> Dict:
    try:
        return resp.json()
    except ValueError:
        return {}


class _AuthedUser(HttpUser):
    abstract = True
    credentials: List[Tuple[str, str]] = []

    token: Optional[str] = None
    auth_failures: int = 0
    login_cooldown_until: float = 0.0

    def on_start(self):
        phone, password = random.choice(self.credentials)
        self._login(phone, password)

    def _login(self, phone: str, password: str) -> None:
        r = self.client.post(
            f"{API}/auth/login",
            data={"username": phone, "password": password},
            name="/auth/login",
        )
        if r.status_code != 200:
            self.token = None
            self.auth_failures += 1
            # Backoff on repeated failures
            self.login_cooldown_until = time.time() + min(120.0, (2 ** min(self.auth_failures, 5)))
            return
        self.token = _safe_json(r).get("access_token")
        self.auth_failures = 0

    def _ensure_auth(self) -> bool:
        if self.token:
            return True
        if time.time() < self.login_cooldown_until:
            return False
        self._login(*random.choice(self.credentials))
        return bool(self.token)

    def _get(self, path: str, name: str, **kw):
        r = self.client.get(f"{API}{path}", headers=_auth_header(self.token), name=name, **kw)
        if r.status_code == 401:
            self.token = None
        return r


# --- Customers ----------------------------------------------------------------

class CustomerUser(_AuthedUser):
    wait_time = between(1, 3)
    credentials = CUSTOMERS

    @task(5)
    def wallet_summary(self):
        if self._ensure_auth():
            self._get("/wallet/summary", "/wallet/summary")

    @task(4)
    def transactions_page(self):
        if self._ensure_auth():
            self._get("/wallet/transactions", "/wallet/transactions", params={"limit": 20})

    @task(2)
    def recharge(self):
        if not self._ensure_auth():
            return
        self.client.post(
            f"{API}/wallet/recharge",
            json={"amount": random.choice([100, 250, 500])},
            headers=_auth_header(self.token),
            name="/wallet/recharge",
        )

    @task(1)
    def book_with_wallet(self):
        if not WORKER_IDS or not self._ensure_auth():
            return
        with self.client.post(
            f"{API}/bookings",
            json={
                "worker_id": random.choice(WORKER_IDS),
                "work_type": "Load test",
                "location": "Test city",
                "start_date": "2030-01-01T09:00:00",
                "budget": random.choice([50, 120, 300]),
                "use_wallet": True,
            },
            headers=_auth_header(self.token),
            name="/bookings [wallet]",
            catch_response=True,
        ) as resp:
            # An empty wallet is an expected outcome, not a failure
            if resp.status_code in (201, 400, 409):
                resp.success()


# --- Workers ------------------------------------------------------------------

class WorkerUser(_AuthedUser):
    wait_time = between(2, 5)
    credentials = WORKERS

    @task(4)
    def jobs(self):
        if not self._ensure_auth():
            return
        r = self._get("/workers/jobs", "/workers/jobs", params={"status": "pending", "limit": 10})
        if r.status_code != 200:
            return
        pending = [b["id"] for b in _safe_json(r).get("bookings", [])]
        if pending:
            with self.client.put(
                f"{API}/bookings/{random.choice(pending)}/accept",
                headers=_auth_header(self.token),
                name="/bookings/{id}/accept",
                catch_response=True,
            ) as resp:
                # Racing another worker session on the same booking
                if resp.status_code in (200, 409):
                    resp.success()

    @task(2)
    def dashboard(self):
        if self._ensure_auth():
            self._get("/workers/dashboard-stats", "/workers/dashboard-stats")


# --- Optional event hooks -----------------------------------------------------

@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    logging.getLogger("locust").info(
        "Starting test with %s customers, %s workers, %s bookable worker ids",
        len(CUSTOMERS),
        len(WORKERS),
        len(WORKER_IDS),
    )


@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    logging.getLogger("locust").info("Test finished")
