import pytest

from proteq.main import app


@pytest.mark.anyio
async def test_health_ok(client, otp_store):
    otp_store.store("juan@proteq.ph", "123456")

    response = await client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["db_ok"] is True
    assert body["scheduler_config_enabled"] is False
    assert body["scheduler_running"] is False
    assert body["otp_pending"] == 1
    assert body["mail_enabled"] is False


@pytest.mark.anyio
async def test_health_degraded_when_db_unreachable(client, monkeypatch):
    def _broken_engine():
        raise RuntimeError("database is down")

    monkeypatch.setattr("proteq.routers.health.get_engine", _broken_engine)

    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "degraded"
    assert response.json()["db_status"] == "error"


@pytest.mark.anyio
async def test_health_reports_running_sweeper(client, monkeypatch):
    class RunningScheduler:
        running = True

    monkeypatch.setattr(app.state, "scheduler", RunningScheduler(), raising=False)

    response = await client.get("/health")

    assert response.json()["scheduler_running"] is True
