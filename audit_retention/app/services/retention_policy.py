"""
Retention Policy

Pure configuration consumed by the query/export and purge paths, plus the
deadline arithmetic derived from it. Purge deadlines are never persisted:
they are recomputed from deleted_at on every read and every sweep, so a
changed window takes effect immediately.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from audit_retention.domain.base import as_naive_utc

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class RetentionPolicy:
    retention_days: int = 90
    export_row_cap: int = 10_000
    default_page_size: int = 50
    max_page_size: int = 100
    purge_run_hour: int = 2
    store_timeout_seconds: float = 10.0

    def __post_init__(self):
        if self.retention_days < 0:
            raise ValueError("retention_days must not be negative")
        if self.export_row_cap < 1:
            raise ValueError("export_row_cap must be positive")
        if not 1 <= self.default_page_size <= self.max_page_size:
            raise ValueError("default_page_size must be within [1, max_page_size]")
        if not 0 <= self.purge_run_hour <= 23:
            raise ValueError("purge_run_hour must be within [0, 23]")

    @classmethod
    def from_config(cls, config) -> "RetentionPolicy":
        return cls(
            retention_days=int(config.RETENTION_DAYS),
            export_row_cap=int(config.EXPORT_ROW_CAP),
            default_page_size=int(config.DEFAULT_PAGE_SIZE),
            max_page_size=int(config.MAX_PAGE_SIZE),
            purge_run_hour=int(config.PURGE_RUN_HOUR),
            store_timeout_seconds=float(config.STORE_TIMEOUT_SECONDS),
        )

    @property
    def window(self) -> timedelta:
        return timedelta(days=self.retention_days)

    def purge_deadline(self, deleted_at: datetime) -> datetime:
        return as_naive_utc(deleted_at) + self.window

    def purge_cutoff(self, now: datetime) -> datetime:
        """Documents deleted at or before the cutoff are due"""
        return as_naive_utc(now) - self.window

    def is_due(self, deleted_at: datetime, now: datetime) -> bool:
        return self.purge_deadline(deleted_at) <= as_naive_utc(now)

    def days_remaining(self, deleted_at: datetime, now: datetime) -> int:
        remaining = self.purge_deadline(deleted_at) - as_naive_utc(now)
        return max(0, math.ceil(remaining / ONE_DAY))

    def clamp_limit(self, limit) -> int:
        if limit is None:
            return self.default_page_size
        return max(1, min(int(limit), self.max_page_size))

    def next_run_at(self, now: datetime) -> datetime:
        """Next daily sweep strictly after now (UTC)"""
        now = as_naive_utc(now)
        candidate = now.replace(hour=self.purge_run_hour, minute=0, second=0, microsecond=0)
        if candidate <= now:
            candidate += ONE_DAY
        return candidate
