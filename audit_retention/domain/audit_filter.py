"""
Audit Event Filter

Conjunctive filter over the audit trail, shared by the query and export paths.
"""

from datetime import date, datetime, time
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from .base import as_naive_utc
from .entities import AuditAction, AuditEvent, EntityType


def _parse_bound(value: Any, end_of_day: bool) -> Any:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.max if end_of_day else time.min)
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            day = date.fromisoformat(text)
            return datetime.combine(day, time.max if end_of_day else time.min)
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    return value


class AuditEventFilter(BaseModel):
    """
    Audit event filter - every field optional, all present fields ANDed.

    A date-only date_to covers the whole day.
    """

    model_config = ConfigDict(frozen=True)

    user_id: Optional[UUID] = None
    entity_type: Optional[EntityType] = None
    actions: Optional[List[AuditAction]] = None
    contract_id: Optional[UUID] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None

    @field_validator("date_from", mode="before")
    @classmethod
    def _parse_date_from(cls, value: Any) -> Any:
        return _parse_bound(value, end_of_day=False)

    @field_validator("date_to", mode="before")
    @classmethod
    def _parse_date_to(cls, value: Any) -> Any:
        return _parse_bound(value, end_of_day=True)

    @field_validator("date_from", "date_to")
    @classmethod
    def _to_naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_naive_utc(value) if value is not None else None

    @field_validator("actions")
    @classmethod
    def _empty_actions_mean_any(
        cls, value: Optional[List[AuditAction]]
    ) -> Optional[List[AuditAction]]:
        return value or None

    @model_validator(mode="after")
    def _check_range(self) -> "AuditEventFilter":
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("date_from must not be after date_to")
        return self

    def matches(self, event: AuditEvent) -> bool:
        """In-memory predicate with the same semantics as the store query"""
        if self.user_id is not None and event.user_id != self.user_id:
            return False
        if self.entity_type is not None and event.entity_type != self.entity_type:
            return False
        if self.actions is not None and event.action not in self.actions:
            return False
        if self.contract_id is not None and event.contract_id != self.contract_id:
            return False
        if self.date_from is not None and event.created_at < self.date_from:
            return False
        if self.date_to is not None and event.created_at > self.date_to:
            return False
        return True

