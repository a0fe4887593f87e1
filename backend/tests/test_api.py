import uuid

import pytest
from httpx import ASGITransport, AsyncClient

from gridpulse.main import app


@pytest.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


def _transformer_id() -> str:
    return f"TX-{uuid.uuid4().hex[:8]}"


async def _register(client, capacity_kw=150.0, barangay="UP Diliman") -> str:
    tid = _transformer_id()
    resp = await client.post("/api/v1/transformers/", json={
        "transformer_id": tid,
        "name": f"Transformer {tid}",
        "barangay": barangay,
        "capacity_kw": capacity_kw,
    })
    assert resp.status_code == 201
    return tid


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_stateless_forecast_with_alert(client):
    resp = await client.post("/api/v1/forecast/", json={
        "current_hour": 19,
        "recent_mean_kw": 170,
        "transformer_capacity_kw": 150,
        "pattern": {"peak_hour": 19, "peak_load_kw": 150, "base_load_kw": 80},
    })
    assert resp.status_code == 200
    data = resp.json()
    assert len(data["points"]) == 24
    assert data["points"][0]["predicted_load_kw"] == 160.0
    assert data["points"][0]["risk_level"] == "CRITICAL"
    assert data["points"][2]["predicted_load_kw"] == 153.78
    assert data["points"][2]["risk_ratio"] == 1.025
    alert = data["overload_alert"]
    assert alert["alert_type"] == "PREDICTIVE_OVERLOAD"
    assert alert["hours_ahead"] == 2
    assert alert["confidence"] == 0.95
    assert alert["recommended_action"].endswith("Expected in 2 hours - immediate action required.")
    assert data["peak_risk"]["offset_hours"] == 0


@pytest.mark.asyncio
async def test_stateless_forecast_no_alert(client):
    resp = await client.post("/api/v1/forecast/", json={
        "current_hour": 3,
        "recent_mean_kw": 90,
        "transformer_capacity_kw": 400,
        "hourly_averages": {str(h): 90.0 for h in range(24)},
    })
    assert resp.status_code == 200
    data = resp.json()
    assert data["overload_alert"] is None
    assert all(p["risk_level"] == "LOW" for p in data["points"])


@pytest.mark.asyncio
async def test_stateless_forecast_incomplete_baseline(client):
    resp = await client.post("/api/v1/forecast/", json={
        "current_hour": 3,
        "recent_mean_kw": 90,
        "transformer_capacity_kw": 400,
        "hourly_averages": {"0": 90.0, "1": 95.0},
    })
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_stateless_forecast_rejects_bad_hour(client):
    resp = await client.post("/api/v1/forecast/", json={
        "current_hour": 24,
        "recent_mean_kw": 90,
        "transformer_capacity_kw": 400,
    })
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_synthesize_baseline(client):
    resp = await client.post("/api/v1/forecast/baseline", json={
        "peak_hour": 19, "peak_load_kw": 150, "base_load_kw": 80,
    })
    assert resp.status_code == 200
    data = resp.json()
    assert len(data) == 24
    assert data["19"] == 150.0
    assert data["7"] == 80.0


@pytest.mark.asyncio
async def test_transformer_not_found(client):
    resp = await client.get("/api/v1/transformers/NOPE")
    assert resp.status_code == 404
    resp = await client.get("/api/v1/transformers/NOPE/forecast")
    assert resp.status_code == 404
    resp = await client.post("/api/v1/transformers/NOPE/readings", json={"load_kw": 10})
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_transformer_forecast_requires_baseline(client):
    tid = await _register(client)
    resp = await client.get(f"/api/v1/transformers/{tid}/forecast", params={"current_hour": 19})
    assert resp.status_code == 409
    assert "baseline" in resp.json()["detail"].lower()


@pytest.mark.asyncio
async def test_transformer_lifecycle(client):
    tid = await _register(client, capacity_kw=150.0)

    resp = await client.put(f"/api/v1/transformers/{tid}/baseline", json={
        "pattern": {"peak_hour": 19, "peak_load_kw": 150, "base_load_kw": 80},
    })
    assert resp.status_code == 200
    assert resp.json()["has_baseline"] is True

    for load in (165.0, 175.0):
        resp = await client.post(f"/api/v1/transformers/{tid}/readings", json={"load_kw": load})
        assert resp.status_code == 200
    status = resp.json()
    assert status["reading_count"] == 2
    assert status["recent_mean_kw"] == 170.0

    resp = await client.get(f"/api/v1/transformers/{tid}/forecast", params={"current_hour": 19})
    assert resp.status_code == 200
    data = resp.json()
    assert data["current_hour"] == 19
    assert data["recent_mean_kw"] == 170.0
    assert data["forecast"]["overload_alert"]["hours_ahead"] == 2


@pytest.mark.asyncio
async def test_transformer_forecast_without_readings_follows_baseline(client):
    tid = await _register(client, capacity_kw=400.0)
    resp = await client.put(f"/api/v1/transformers/{tid}/baseline", json={
        "hourly_averages": {str(h): 100.0 + h for h in range(24)},
    })
    assert resp.status_code == 200

    resp = await client.get(f"/api/v1/transformers/{tid}/forecast", params={"current_hour": 5})
    assert resp.status_code == 200
    points = resp.json()["forecast"]["points"]
    assert all(p["adjustment_kw"] == 0.0 for p in points)
    assert points[0]["predicted_load_kw"] == 105.0


@pytest.mark.asyncio
async def test_transformer_partial_baseline_rejected(client):
    tid = await _register(client)
    resp = await client.put(f"/api/v1/transformers/{tid}/baseline", json={
        "hourly_averages": {"0": 10.0},
    })
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_transformer_list_filter(client):
    tid = await _register(client, barangay="Barangay Alpha-Test")
    resp = await client.get("/api/v1/transformers/", params={"barangay": "Barangay Alpha-Test"})
    assert resp.status_code == 200
    ids = [t["transformer_id"] for t in resp.json()]
    assert ids == [tid]


@pytest.mark.asyncio
async def test_refresh_and_dashboard(client):
    barangay = f"Barangay {uuid.uuid4().hex[:6]}"
    hot = await _register(client, capacity_kw=150.0, barangay=barangay)
    await _register(client, capacity_kw=150.0, barangay=barangay)  # no baseline, skipped

    await client.put(f"/api/v1/transformers/{hot}/baseline", json={
        "hourly_averages": {str(h): 145.0 for h in range(24)},
    })
    await client.post(f"/api/v1/transformers/{hot}/readings", json={"load_kw": 145.0})

    resp = await client.post("/api/v1/admin/refresh")
    assert resp.status_code == 200
    assert resp.json()["status"] == "refresh_complete"

    resp = await client.get("/api/v1/dashboard/", params={"barangay": barangay})
    assert resp.status_code == 200
    data = resp.json()
    assert data["barangay"] == barangay
    summary = data["summary"]
    assert summary["total_transformers"] == 2
    assert summary["forecasted_transformers"] == 1
    assert summary["alerts_count"] == 1
    assert summary["critical_transformers"] == 1
    assert len(data["alerts"]) == 1
    assert data["alerts"][0]["transformer_id"] == hot
    assert data["alerts"][0]["alert"]["hours_ahead"] == 2
    assert any("Prepare for predicted overload" in r for r in data["recommendations"])
    assert data["refresh_interval_seconds"] == 15


@pytest.mark.asyncio
async def test_dashboard_empty_barangay(client):
    resp = await client.get("/api/v1/dashboard/", params={"barangay": "Nowhere"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["summary"]["total_transformers"] == 0
    assert data["alerts"] == []
    assert data["recommendations"] == []
