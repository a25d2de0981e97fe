"""ID utilities."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone


def new_run_id(prefix: str = "refresh") -> str:
    """Return a sortable identifier for a refresh run.

    Example: ``refresh_20250101T020000Z_1a2b3c``.
    """

    ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    return f"{prefix}_{ts}_{uuid.uuid4().hex[:6]}"
