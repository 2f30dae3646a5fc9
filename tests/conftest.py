"""Shared fixtures for the test suite."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
import pytest
from httpx import ASGITransport, AsyncClient

from academy.config import settings
from academy.db import get_session
from academy.legacy.candidates import Candidate, LegacyArc
from academy.main import app


# ---------------------------------------------------------------------------
# Fake DB session (no real Postgres needed)
# ---------------------------------------------------------------------------

class FakeSession:
    """Stand-in for AsyncSession.

    Each execute() pops the next queued row set (or an exception to raise)
    and records the SQL + params for assertions.
    """

    def __init__(self, results: list[Any] | None = None):
        self._queue = list(results or [])
        self.executed: list[tuple[str, dict[str, Any] | None]] = []
        self.commits = 0
        self.rollbacks = 0

    def queue(self, *results: Any) -> None:
        self._queue.extend(results)

    async def execute(self, stmt, params=None):
        self.executed.append((str(stmt), params))
        rows = self._queue.pop(0) if self._queue else []
        if isinstance(rows, Exception):
            raise rows
        return FakeResult(rows)

    async def commit(self):
        self.commits += 1

    async def rollback(self):
        self.rollbacks += 1

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        pass

    def statements(self) -> list[str]:
        return [sql for sql, _ in self.executed]


class FakeResult:
    def __init__(self, rows: list[dict[str, Any]]):
        self._rows = rows
        self._keys = list(rows[0].keys()) if rows else []

    def keys(self):
        return self._keys

    def fetchall(self):
        return [tuple(r[k] for k in self._keys) for r in self._rows]

    def fetchone(self):
        rows = self.fetchall()
        return rows[0] if rows else None


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def fake_session():
    """Return a FakeSession with nothing queued (queue rows in tests as needed)."""
    return FakeSession()


@pytest.fixture()
def override_session(fake_session):
    """Override the FastAPI dependency so no real DB is needed."""
    async def _override():
        yield fake_session

    app.dependency_overrides[get_session] = _override
    yield fake_session
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(override_session):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def admin_key(monkeypatch):
    monkeypatch.setattr(settings, "admin_api_key", "letmein")
    return "letmein"


@pytest.fixture()
def razorpay_keys(monkeypatch):
    monkeypatch.setattr(settings, "razorpay_key_id", "rzp_test_key")
    monkeypatch.setattr(settings, "razorpay_key_secret", "rzp_test_secret")
    return "rzp_test_key", "rzp_test_secret"


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def make_candidate(
    prime_age: int,
    height_cm: int,
    weight_kg: int,
    cid: str = "p1",
    name: str | None = None,
) -> Candidate:
    return Candidate(
        id=cid,
        name=name or f"Player {cid}",
        position="Midfielder",
        archetype="Engine",
        prime_age=prime_age,
        height_cm=height_cm,
        weight_kg=weight_kg,
        legacy=LegacyArc(
            spark=f"{cid} spark",
            breakthrough=f"{cid} breakthrough",
            peak=f"{cid} peak",
            legacy=f"{cid} legacy",
        ),
    )


def make_lead_row(lead_id: int = 1, **overrides: Any) -> dict[str, Any]:
    """Helper to build a fake legacy_leads row dict."""
    ts = datetime(2026, 2, 15, 12, 0, tzinfo=timezone.utc)
    row = {
        "id": lead_id,
        "source": "Find Your Legacy",
        "name": "Asha Rao",
        "phone": "+919876543210",
        "age": 25,
        "height_cm_input": 176,
        "weight_kg_input": 71,
        "height_cm_bucket": 175,
        "weight_kg_bucket": 70,
        "matched_player_id": "p1",
        "matched_player_name": "Player p1",
        "matched_player_position": "Midfielder",
        "matched_player_archetype": "Engine",
        "matched_player_legacy": {"spark": "s", "breakthrough": "b", "peak": "p", "legacy": "l"},
        "consent": True,
        "status": "NEW",
        "notes": None,
        "created_at": ts,
        "updated_at": ts,
    }
    row.update(overrides)
    return row


def make_product_row(product_id: int = 1, **overrides: Any) -> dict[str, Any]:
    row = {
        "id": product_id,
        "slug": "home-jersey",
        "name": "Home Jersey",
        "description": "Match-day home kit",
        "price": 149900,
        "image_url": None,
        "tags": ["kit"],
        "is_active": True,
    }
    row.update(overrides)
    return row


def make_order_row(order_id: int = 10, **overrides: Any) -> dict[str, Any]:
    ts = datetime(2026, 2, 15, 12, 0, tzinfo=timezone.utc)
    row = {
        "id": order_id,
        "order_number": "FCRB-1771156800000-ABCDEF12",
        "subtotal": 149900,
        "shipping_fee": 5000,
        "total": 154900,
        "customer_name": "Guest",
        "phone": "",
        "email": "",
        "shipping_address": {},
        "status": "PENDING_PAYMENT",
        "payment_provider": None,
        "payment_reference": None,
        "payment_data": None,
        "created_at": ts,
        "updated_at": ts,
    }
    row.update(overrides)
    return row


def make_order_item_row(item_id: int = 100, order_id: int = 10, **overrides: Any) -> dict[str, Any]:
    row = {
        "id": item_id,
        "order_id": order_id,
        "product_id": 1,
        "product_name": "Home Jersey",
        "variant": None,
        "size": "M",
        "quantity": 1,
        "unit_price": 149900,
        "total_price": 149900,
    }
    row.update(overrides)
    return row
