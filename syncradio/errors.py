"""Structured error logging: JSON lines to errors.log, no terminal formatting."""
import json
import logging
import sys
from datetime import datetime

from . import config

logger = logging.getLogger(__name__)

_FRIENDLY_MESSAGES = {
    "startup": "Server failed to start.",
    "preflight": "Startup check failed.",
    "duration_table": "Couldn't read track durations.",
}


def format_error(stage: str, detail: str = "", raw: str = "") -> str:
    entry = {
        "timestamp": datetime.now().isoformat(),
        "stage": stage,
        "input": detail,
        "error": raw,
        "python": sys.version.split()[0],
    }

    _append_to_log(entry)
    logger.error("Error at %s: %s", stage, raw)

    if config.DEV_MODE:
        return json.dumps(entry, indent=2)
    return _FRIENDLY_MESSAGES.get(stage, f"Something went wrong ({stage}).")


def _append_to_log(entry: dict):
    try:
        config.ERRORS_LOG.parent.mkdir(parents=True, exist_ok=True)
        with open(config.ERRORS_LOG, "a") as f:
            f.write(json.dumps(entry) + "\n")
    except OSError:
        logger.warning("Could not write %s", config.ERRORS_LOG)
