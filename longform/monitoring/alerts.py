"""
Discord webhook alerts — fires on failed fetch cycles, relay dropouts
and startup.

Set DISCORD_WEBHOOK_URL in .env to enable. If unset, all calls are no-ops.
"""
from datetime import datetime, timezone

import httpx
from loguru import logger

from config.settings import DISCORD_WEBHOOK_URL

# Colour codes for Discord embeds
_COLOUR = {
    "error":   0xE74C3C,   # red
    "warning": 0xF39C12,   # amber
    "success": 0x2ECC71,   # green
    "info":    0x3498DB,   # blue
}


async def send_alert(message: str, level: str = "error", webhook_url: str | None = None) -> None:
    """
    Send a plain-text alert to Discord.
    level: "error" | "warning" | "info" | "success"
    """
    url = webhook_url or DISCORD_WEBHOOK_URL
    if not url:
        return

    payload = {
        "embeds": [{
            "description": message,
            "color":       _COLOUR.get(level, _COLOUR["error"]),
            "footer":      {"text": f"Longform Reader • {_utcnow()}"},
        }]
    }
    await _post(url, payload)


async def alert_fetch_failure(error: str) -> None:
    await send_alert(
        f"**Fetch cycle failed** — will retry on the next run\n```{error[:500]}```",
        level="error",
    )


async def alert_relay_health(connected: int, total: int) -> None:
    """Call after a connect or reconnect pass when some relays are down."""
    if connected == total:
        return
    level = "error" if connected == 0 else "warning"
    await send_alert(f"**Relays degraded** — {connected}/{total} connected", level=level)


async def alert_startup(connected: int, total: int) -> None:
    await send_alert(f"Longform Reader started — {connected}/{total} relays connected", level="success")


# ── Internal ──────────────────────────────────────────────────────────────────

async def _post(url: str, payload: dict) -> None:
    try:
        async with httpx.AsyncClient(timeout=10) as client:
            resp = await client.post(url, json=payload)
            resp.raise_for_status()
    except httpx.HTTPError as exc:
        # Never let an alert failure crash the main app
        logger.warning(f"[Alerts] Discord webhook failed: {exc}")


def _utcnow() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
