from __future__ import annotations

import logging
from typing import Optional

from core.config import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Attach one stream handler to the root logger (safe to call repeatedly)."""
    root = logging.getLogger()
    root.setLevel((level or settings.log_level or "INFO").upper())
    if not any(getattr(h, "_stock_api_handler", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._stock_api_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    return root
