"""
Audit Recorder

Append-only capture of one immutable AuditEvent per qualifying operation.

Every state-changing use case calls ``AuditRecorder.record`` itself, inside
its own unit of work, after the business mutation and before commit. The
recorder never reports success for a write it could not make: store failures
come back as a STORE_UNAVAILABLE error and the caller decides whether the
parent operation fails (all use cases in this service fail closed).
"""

import json
import logging
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from audit_retention.libs.result import Error, Result, Return
from audit_retention.app.services.store_errors import StoreUnavailable, bounded
from audit_retention.app.services.unit_of_work import UnitOfWork
from audit_retention.domain.entities import (
    READ_ACTIONS,
    AuditAction,
    AuditEvent,
    EntityType,
)
from audit_retention.domain.principal import Principal

logger = logging.getLogger(__name__)


class AuditEventInput(BaseModel):
    """Structured event handed to the recorder by a business operation"""

    action: AuditAction
    entity_type: EntityType
    entity_id: str = Field(min_length=1, max_length=255)
    user_id: UUID

    old_value: Optional[Any] = None
    new_value: Optional[Any] = None

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    contract_id: Optional[UUID] = None
    document_id: Optional[UUID] = None

    @field_validator("entity_id")
    @classmethod
    def _entity_id_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("entity_id must not be blank")
        return value

    @model_validator(mode="after")
    def _read_actions_have_no_snapshots(self) -> "AuditEventInput":
        if self.action in READ_ACTIONS and (
            self.old_value is not None or self.new_value is not None
        ):
            raise ValueError(f"{self.action.value} events do not carry snapshots")
        return self

    @classmethod
    def from_principal(cls, principal: Principal, **fields: Any) -> "AuditEventInput":
        return cls(
            user_id=principal.user_id,
            ip_address=principal.ip_address,
            user_agent=principal.user_agent,
            **fields,
        )


def take_snapshot(value: Any) -> Optional[dict]:
    """
    Detached JSON copy of an entity state.

    The JSON round trip is the deep copy: nothing in the result aliases the
    caller's objects, and UUIDs/datetimes become strings.
    """
    if value is None:
        return None
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json")
    snapshot = json.loads(json.dumps(value, default=str))
    if not isinstance(snapshot, dict):
        raise ValueError("snapshot must be a JSON object")
    return snapshot


class AuditRecorder:
    """
    Writes audit events through the caller's unit of work.

    Business Rules:
    - Exactly one row per call; id and created_at assigned server-side
    - user_id must reference a known user at call time
    - No referential check against the audited entity
    - No update path
    """

    def __init__(self, uow: UnitOfWork, store_timeout: float = 10.0):
        self.uow = uow
        self.store_timeout = store_timeout

    async def record(self, event: AuditEventInput) -> Result[AuditEvent]:
        try:
            old_value = take_snapshot(event.old_value)
            new_value = take_snapshot(event.new_value)
        except ValueError as exc:
            return Return.err(
                Error(
                    "VALIDATION_ERROR",
                    "Audit snapshot must be a JSON object",
                    reason=str(exc),
                )
            )

        try:
            user = await bounded(
                self.uow.users.get_by_id(event.user_id), self.store_timeout
            )
            if user is None:
                return Return.err(
                    Error(
                        "UNKNOWN_PRINCIPAL",
                        "Audit events must reference a known user",
                        reason=f"User {event.user_id} not found",
                    )
                )

            audit_event = AuditEvent(
                action=event.action,
                entity_type=event.entity_type,
                entity_id=event.entity_id,
                old_value=old_value,
                new_value=new_value,
                user_id=event.user_id,
                ip_address=event.ip_address,
                user_agent=event.user_agent,
                contract_id=event.contract_id,
                document_id=event.document_id,
            )
            created = await bounded(
                self.uow.audit_events.create(audit_event), self.store_timeout
            )
        except StoreUnavailable as exc:
            logger.error(
                f"Audit event {event.action.value} {event.entity_type.value}/"
                f"{event.entity_id} not recorded: {exc}"
            )
            return Return.err(
                Error(
                    "STORE_UNAVAILABLE",
                    "Audit trail could not be written",
                    reason=str(exc),
                )
            )

        return Return.ok(created)
