"""HTTP tests for the health, admin and guide endpoints."""

import pytest
from httpx import ASGITransport, AsyncClient

from tourism_api.main import create_app

SUPPORT = {"X-Admin-User": "help@example.com", "X-Admin-Role": "support"}
OPERATOR = {"X-Admin-User": "ops@example.com", "X-Admin-Role": "operator"}
ADMIN = {"X-Admin-User": "root@example.com", "X-Admin-Role": "admin"}


@pytest.fixture
async def client(service):
    """Test client wired to the in-memory PayoutService."""
    app = create_app()
    app.state.payout_service = service
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
async def seeded(client: AsyncClient):
    response = await client.put(
        "/v1/admin/payout-settings/point_definitions",
        json={"value": {"B": 10}},
        headers=OPERATOR,
    )
    assert response.status_code == 200
    response = await client.post(
        "/v1/admin/contributions",
        json={"store_id": "s1", "guide_id": "g1", "month": "2025-03", "type": "B"},
        headers=OPERATOR,
    )
    assert response.status_code == 200
    return client


async def test_health_check(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


async def test_admin_requires_identity(client: AsyncClient):
    response = await client.get("/v1/admin/founders")
    assert response.status_code == 401


async def test_unknown_role_is_rejected(client: AsyncClient):
    response = await client.get(
        "/v1/admin/founders",
        headers={"X-Admin-User": "x", "X-Admin-Role": "owner"},
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_payout_settings(client: AsyncClient):
    response = await client.get("/v1/admin/payout-settings", headers=SUPPORT)
    assert response.status_code == 200
    assert response.json()["payout_amounts"] == {"perpetual_per_store": 1000, "contribution_per_store": 4000}

    response = await client.put(
        "/v1/admin/payout-settings/rank_thresholds",
        json={"value": {"S": 90}},
        headers=SUPPORT,
    )
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"

    response = await client.put(
        "/v1/admin/payout-settings/unknown",
        json={"value": 1},
        headers=OPERATOR,
    )
    assert response.status_code == 400


async def test_contribution_cap_over_http(seeded: AsyncClient):
    response = await seeded.post(
        "/v1/admin/contributions",
        json={"store_id": "s1", "guide_id": "g1", "month": "2025-03", "type": "B"},
        headers=OPERATOR,
    )
    assert response.status_code == 409
    error = response.json()["error"]
    assert error["code"] == "CAPACITY_EXCEEDED"
    assert error["detail"]["limit"] == 1

    response = await seeded.get("/v1/admin/contributions", params={"month": "2025-03"}, headers=SUPPORT)
    [record] = response.json()
    assert record["guide_name"] == "Aiko"

    response = await seeded.delete(f"/v1/admin/contributions/{record['id']}", headers=OPERATOR)
    assert response.json() == {"success": True}


async def test_founders_over_http(client: AsyncClient):
    response = await client.post("/v1/admin/founders", json={"store_id": "s1", "guide_id": "g2"}, headers=OPERATOR)
    assert response.status_code == 200
    assert response.json()["guide_id"] == "g2"

    response = await client.get("/v1/admin/founders", headers=SUPPORT)
    assert [f["store_id"] for f in response.json()] == ["s1"]

    response = await client.delete("/v1/admin/founders/s1", headers=OPERATOR)
    assert response.status_code == 200


async def test_monthly_run_and_locks(seeded: AsyncClient):
    response = await seeded.post("/v1/admin/months/2025-03/calculate", headers=SUPPORT)
    assert response.status_code == 403

    response = await seeded.post("/v1/admin/months/2025-03/calculate", headers=OPERATOR)
    assert response.status_code == 200
    assert response.json() == {
        "month": "2025-03",
        "guides_scored": 1,
        "perpetual_total": 0,
        "contribution_total": 4000,
        "grand_total": 4000,
    }

    response = await seeded.get("/v1/admin/scores", params={"month": "2025-03"}, headers=SUPPORT)
    assert [s["rank"] for s in response.json()] == ["C"]

    response = await seeded.get("/v1/admin/payouts", params={"month": "2025-03", "type": "CONTRIB"}, headers=SUPPORT)
    [payout] = response.json()
    assert payout["amount"] == 4000

    response = await seeded.post("/v1/admin/months/2025-03/lock", json={"reason": "closed"}, headers=OPERATOR)
    assert response.status_code == 200
    assert response.json()["locked"] is True

    response = await seeded.post("/v1/admin/months/2025-03/calculate", headers=OPERATOR)
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"

    response = await seeded.post("/v1/admin/months/2025-03/unlock", json={"reason": "fix"}, headers=OPERATOR)
    assert response.status_code == 403

    response = await seeded.post("/v1/admin/months/2025-03/unlock", json={"reason": ""}, headers=ADMIN)
    assert response.status_code == 409

    response = await seeded.post("/v1/admin/months/2025-03/unlock", json={"reason": "fix"}, headers=ADMIN)
    assert response.status_code == 200
    status = response.json()
    assert status["locked"] is False
    assert [e["action"] for e in status["audit_log"]] == ["unlock", "lock"]


async def test_invalid_month_in_path(client: AsyncClient):
    response = await client.post("/v1/admin/months/2025-3/calculate", headers=OPERATOR)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_marketplace_lookups(client: AsyncClient):
    response = await client.get("/v1/admin/guides", headers=SUPPORT)
    assert [g["id"] for g in response.json()] == ["g1", "g2"]

    response = await client.get("/v1/admin/stores", headers=SUPPORT)
    assert [s["id"] for s in response.json()] == ["s1", "s2", "s3"]


async def test_guide_dashboard(seeded: AsyncClient):
    await seeded.post("/v1/admin/months/2025-03/calculate", headers=OPERATOR)

    response = await seeded.get("/v1/guides/me", headers={"X-Dashboard-Key": "key-g1"})
    assert response.status_code == 200
    assert response.json()["id"] == "g1"

    response = await seeded.get(
        "/v1/guides/me/payouts",
        params={"month": "2025-03"},
        headers={"X-Dashboard-Key": "key-g1"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["grandTotal"] == 4000
    assert data["contribution"]["total"] == 4000
    assert len(data["history"]) == 3

    response = await seeded.get(
        "/v1/guides/me/activity",
        params={"month": "2025-03"},
        headers={"X-Dashboard-Key": "key-g1"},
    )
    assert response.json()["score"]["rank"] == "C"


async def test_unknown_dashboard_key(client: AsyncClient):
    response = await client.get("/v1/guides/me", headers={"X-Dashboard-Key": "missing"})
    assert response.status_code == 404
    response = await client.get("/v1/guides/me")
    assert response.status_code == 404


async def test_unknown_guide_is_not_found(client: AsyncClient):
    response = await client.post(
        "/v1/admin/contributions",
        json={"store_id": "s1", "guide_id": "ghost", "month": "2025-03", "type": "B"},
        headers=OPERATOR,
    )
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"

    response = await client.post("/v1/admin/founders", json={"store_id": "nowhere", "guide_id": "g1"}, headers=OPERATOR)
    assert response.status_code == 404
