"""
HR Desk Backend - Attendance API Tests
=======================================

End-to-end through the attendance app: routing, status codes, JSON shapes,
error format and headers.
"""

import pytest

from hrdesk.services.attendance_service import date_key, now_ms


class TestPingAndHealth:

    @pytest.mark.asyncio
    async def test_ping(self, attendance_client):
        response = await attendance_client.get("/api/ping")

        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        assert isinstance(body["time"], int)
        assert "app" not in body

    @pytest.mark.asyncio
    async def test_health_reports_database(self, attendance_client):
        response = await attendance_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["app"] == "attendance"
        assert body["database"] == "connected"
        assert body["status"] == "healthy"


class TestClockEndpoints:

    @pytest.mark.asyncio
    async def test_clock_in(self, attendance_client):
        response = await attendance_client.post("/api/attendance/clock", json={"type": "in"})

        assert response.status_code == 201
        body = response.json()
        assert set(body) == {"id", "type", "time"}
        assert body["type"] == "in"

    @pytest.mark.asyncio
    async def test_clock_invalid_type(self, attendance_client):
        response = await attendance_client.post("/api/attendance/clock", json={"type": "nap"})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["message"] == 'type must be "in" or "out"'
        assert body["request_id"] == response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{"type": 5}, {"type": None}, {}])
    async def test_clock_rejects_non_string_type(self, attendance_client, payload):
        response = await attendance_client.post("/api/attendance/clock", json=payload)

        assert response.status_code == 400
        assert response.json()["message"] == 'type must be "in" or "out"'

    @pytest.mark.asyncio
    async def test_clock_without_body(self, attendance_client):
        response = await attendance_client.post("/api/attendance/clock")

        assert response.status_code == 400
        assert response.json()["message"] == 'type must be "in" or "out"'

    @pytest.mark.asyncio
    async def test_list_defaults_to_today(self, attendance_client):
        await attendance_client.post("/api/attendance/clock", json={"type": "in"})
        await attendance_client.post("/api/attendance/clock", json={"type": "out"})

        response = await attendance_client.get("/api/attendance")

        assert response.status_code == 200
        events = response.json()
        assert sorted(e["type"] for e in events) == ["in", "out"]
        assert events[0]["time"] <= events[1]["time"]

    @pytest.mark.asyncio
    async def test_list_other_day_is_empty(self, attendance_client):
        response = await attendance_client.get("/api/attendance", params={"date": "2001-01-01"})

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_patch_and_delete(self, attendance_client):
        created = (await attendance_client.post("/api/attendance/clock", json={"type": "in"})).json()

        patched = await attendance_client.patch(
            f"/api/attendance/{created['id']}", json={"type": "out", "time": created["time"] + 1000}
        )
        assert patched.status_code == 200
        assert patched.json() == {"id": created["id"], "type": "out", "time": created["time"] + 1000}

        deleted = await attendance_client.delete(f"/api/attendance/{created['id']}")
        assert deleted.status_code == 200
        assert deleted.json() == {"ok": True}

        assert (await attendance_client.get("/api/attendance")).json() == []

    @pytest.mark.asyncio
    async def test_patch_unknown_event(self, attendance_client):
        response = await attendance_client.patch("/api/attendance/nope", json={"type": "in"})

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_delete_unknown_event(self, attendance_client):
        response = await attendance_client.delete("/api/attendance/nope")

        assert response.status_code == 404


class TestSummaryEndpoint:

    @pytest.mark.asyncio
    async def test_summary_shape(self, attendance_client):
        await attendance_client.post("/api/attendance/clock", json={"type": "in"})
        month = date_key(now_ms())[:7]

        response = await attendance_client.get(f"/api/attendance/summary/{month}")

        assert response.status_code == 200
        body = response.json()
        assert body["month"] == month
        (day,) = body["summary"].values()
        assert set(day) == {"in", "out", "workedMs"}
        assert day["out"] is None
        assert day["workedMs"] is None

    @pytest.mark.asyncio
    async def test_summary_bad_month(self, attendance_client):
        response = await attendance_client.get("/api/attendance/summary/2025-13")

        assert response.status_code == 400
        assert response.json()["message"] == "month must be YYYY-MM"
