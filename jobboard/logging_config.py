import logging
import sys

from jobboard.config import Settings, settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Per-request and per-statement chatter; the app logs its own events.
QUIET_LOGGERS = ("uvicorn.access", "multipart", "sqlalchemy.engine", "httpx", "httpcore")


def _resolve_level(level: int | str | None, cfg: Settings) -> int:
    if level is None:
        level = cfg.log_level
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return level


def setup_logging(level: int | str | None = None, cfg: Settings = settings) -> None:
    """Send job board logs to stdout at ``cfg.log_level`` unless ``level`` is given.

    Safe to call more than once: existing root handlers are replaced.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(_resolve_level(level, cfg))
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
