"""Tests for the Discord webhook alerts."""
import json

import httpx
import pytest

from longform.monitoring import alerts

WEBHOOK = "https://discord.example/api/webhooks/1/abc"


@pytest.fixture
def captured(monkeypatch):
    """Route the alert client through a MockTransport and record each request body."""
    bodies: list[dict] = []
    status = {"code": 204}
    real_client = httpx.AsyncClient

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(status["code"])

    def client_factory(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(alerts.httpx, "AsyncClient", client_factory)
    monkeypatch.setattr(alerts, "DISCORD_WEBHOOK_URL", WEBHOOK)
    return bodies, status


@pytest.mark.asyncio
async def test_no_webhook_is_a_no_op(monkeypatch, captured):
    bodies, _ = captured
    monkeypatch.setattr(alerts, "DISCORD_WEBHOOK_URL", None)

    await alerts.alert_fetch_failure("No connected relays available")

    assert bodies == []


@pytest.mark.asyncio
async def test_fetch_failure_posts_error_embed(captured):
    bodies, _ = captured

    await alerts.alert_fetch_failure("No connected relays available")

    embed = bodies[0]["embeds"][0]
    assert "No connected relays available" in embed["description"]
    assert embed["color"] == 0xE74C3C


@pytest.mark.asyncio
async def test_relay_health_levels(captured):
    bodies, _ = captured

    await alerts.alert_relay_health(10, 10)
    await alerts.alert_relay_health(3, 10)
    await alerts.alert_relay_health(0, 10)

    assert [b["embeds"][0]["color"] for b in bodies] == [0xF39C12, 0xE74C3C]
    assert "3/10" in bodies[0]["embeds"][0]["description"]


@pytest.mark.asyncio
async def test_webhook_failure_is_swallowed(captured):
    bodies, status = captured
    status["code"] = 500

    await alerts.send_alert("still alive", level="info")

    assert len(bodies) == 1
