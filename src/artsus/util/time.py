"""Timestamp helpers; stored timestamps sort lexically in creation order."""

from __future__ import annotations

from datetime import datetime, timezone
import time


def timestamp_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def monotonic() -> float:
    return time.monotonic()
