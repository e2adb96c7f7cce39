"""Small formatting helpers."""


def fmt_time(seconds: float) -> str:
    m, s = divmod(int(seconds), 60)
    return f"{m}:{s:02d}"


def to_millis(ts: float) -> int:
    """Epoch seconds -> epoch milliseconds, as sent on the wire."""
    return int(round(ts * 1000))
