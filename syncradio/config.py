"""Config & constants"""
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root (one level up from syncradio/)
_ROOT = Path(__file__).parent.parent
load_dotenv(_ROOT / ".env")

# ─── Paths ────────────────────────────────────────────────────────────────────
ROOT_DIR = _ROOT
OUTPUT_DIR = ROOT_DIR / os.getenv("OUTPUT_DIR", "output")
ERRORS_LOG = OUTPUT_DIR / "errors.log"

# ─── Media ────────────────────────────────────────────────────────────────────
BASE_URL = os.getenv("R2_BASE_URL", "").rstrip("/")
TRACK_NAMES = ("1.mp3", "2.mp3", "3.mp3")

# Used whenever a track's length can't be read
FALLBACK_DURATION = 2.0
FETCH_TIMEOUT = float(os.getenv("FETCH_TIMEOUT", "30"))
DURATION_RETRIES = int(os.getenv("DURATION_RETRIES", "0"))

# ─── Playback ─────────────────────────────────────────────────────────────────
TICK_INTERVAL = float(os.getenv("TICK_INTERVAL", "0.1"))   # seconds
OBSERVER_QUEUE_SIZE = int(os.getenv("OBSERVER_QUEUE_SIZE", "50"))

APP_VERSION = "0.1.0"

# ─── Web server ──────────────────────────────────────────────────────────────
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
ALLOWED_ORIGINS = [
    o.strip()
    for o in os.getenv("ALLOWED_ORIGINS", "http://localhost:5173").split(",")
    if o.strip()
]

# ─── Logging / dev mode ───────────────────────────────────────────────────────
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEV_MODE = os.getenv("DEV_MODE", "1").strip() in ("1", "true", "yes")
