"""
Audit Use Cases

All audit-trail retrieval and export logic.
"""

from .get_audit_events_use_case import (
    GetAuditEventsUseCase,
    decode_cursor,
    encode_cursor,
)
from .get_contract_audit_events_use_case import GetContractAuditEventsUseCase
from .export_audit_events_use_case import ExportAuditEventsUseCase
from .get_audit_stats_use_case import GetAuditStatsUseCase

__all__ = [
    "GetAuditEventsUseCase",
    "GetContractAuditEventsUseCase",
    "ExportAuditEventsUseCase",
    "GetAuditStatsUseCase",
    "encode_cursor",
    "decode_cursor",
]
