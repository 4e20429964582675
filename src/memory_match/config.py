# memory_match/config.py
import os


def _flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    HOST = os.environ.get("MEMORY_MATCH_HOST", "127.0.0.1")
    PORT = int(os.environ.get("MEMORY_MATCH_PORT", "5000"))
    DEBUG = _flag("MEMORY_MATCH_DEBUG")
    # How long a mismatched pair stays visible (seconds)
    PEEK_DELAY_SEC = float(os.environ.get("PEEK_DELAY_SEC", "1.0"))
    # Elapsed-time counter resolution (seconds)
    TICK_INTERVAL_SEC = float(os.environ.get("TICK_INTERVAL_SEC", "1.0"))
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
