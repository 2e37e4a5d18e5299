"""
Global settings — loads from .env and exposes typed config values to the rest of the app.
Relay URLs, the filter plan and platform indicator phrases live in relays.yaml.
"""
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# ── Paths ──────────────────────────────────────────────────────────────────────
ROOT_DIR = Path(__file__).resolve().parent.parent
LOGS_DIR = Path(os.getenv("LOGS_DIR", str(ROOT_DIR / "logs")))
RELAYS_CONFIG = Path(os.getenv("RELAYS_CONFIG", str(ROOT_DIR / "config" / "relays.yaml")))

# ── General ────────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
FETCH_PROFILES = os.getenv("FETCH_PROFILES", "true").lower() == "true"

# ── Relay I/O ──────────────────────────────────────────────────────────────────
CONNECT_TIMEOUT_MS = int(os.getenv("CONNECT_TIMEOUT_MS", "10000"))
QUERY_TIMEOUT_MS   = int(os.getenv("QUERY_TIMEOUT_MS", "8000"))

# ── Scheduling ─────────────────────────────────────────────────────────────────
REFRESH_INTERVAL_S   = int(os.getenv("REFRESH_INTERVAL_S", "900"))
RECONNECT_INTERVAL_S = int(os.getenv("RECONNECT_INTERVAL_S", "300"))

# ── Extraction ─────────────────────────────────────────────────────────────────
LONGFORM_KIND      = 30023
MIN_CONTENT_LENGTH = int(os.getenv("MIN_CONTENT_LENGTH", "100"))
TITLE_MAX_LENGTH   = int(os.getenv("TITLE_MAX_LENGTH", "60"))
SUMMARY_MAX_LENGTH = int(os.getenv("SUMMARY_MAX_LENGTH", "200"))
WORDS_PER_MINUTE   = int(os.getenv("WORDS_PER_MINUTE", "200"))

# ── Provenance scoring ─────────────────────────────────────────────────────────
TIER_GATE         = float(os.getenv("TIER_GATE", "0.5"))
CLIENT_CONFIDENCE = float(os.getenv("CLIENT_CONFIDENCE", "0.9"))
INDICATOR_WEIGHT  = float(os.getenv("INDICATOR_WEIGHT", "0.3"))
INDICATOR_CAP     = float(os.getenv("INDICATOR_CAP", "0.7"))

# ── View defaults (used by scripts/fetch_once.py) ──────────────────────────────
SOURCE_FILTER = os.getenv("SOURCE_FILTER", "all")
SORT_MODE     = os.getenv("SORT_MODE", "newest")

# ── Discord alerts ─────────────────────────────────────────────────────────────
DISCORD_WEBHOOK_URL = os.getenv("DISCORD_WEBHOOK_URL")
