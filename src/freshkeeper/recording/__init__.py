"""Refresh audit logs."""

from __future__ import annotations

from freshkeeper.recording.audit import RefreshLog, log_refresh
from freshkeeper.recording.file_log import FileRefreshLog
from freshkeeper.recording.redis_log import RedisRefreshLog

__all__ = ["FileRefreshLog", "RedisRefreshLog", "RefreshLog", "log_refresh"]
