# giftfinder/slog.py
# One JSON object per log line, on the "giftfinder" logger.

import hashlib
import json
import logging
import os
from typing import Any

logger = logging.getLogger("giftfinder")
if not logger.handlers:
    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(_handler)
    logger.setLevel(getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO))


def qhash(text: str) -> str:
    """Short hash so free-text profile fields (location) stay out of the logs."""
    norm = " ".join((text or "").lower().split())
    return hashlib.sha256(norm.encode("utf-8")).hexdigest()[:10]


def log_event(event: str, level: int = logging.INFO, **fields: Any) -> None:
    logger.log(level, json.dumps({"event": event, **fields}, ensure_ascii=False, default=str))
