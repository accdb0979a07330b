"""Logging helpers."""
import logging
import os
from typing import Optional


def configure_logging(service_name: str, level: Optional[str] = None) -> None:
    """Configure structured logging for a service."""

    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=level,
        format=f"%(asctime)s | {service_name} | %(levelname)s | %(name)s | %(message)s",
    )
    # The SDK logs every request at INFO; keep it to warnings.
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
