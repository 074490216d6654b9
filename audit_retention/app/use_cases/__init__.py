"""
Use Cases

Organized into domain folders:
- audit/: Audit trail retrieval, statistics and export
- documents/: Document soft delete, restore and retention purge

Import from subdirectories for better organization.
"""

from .audit import (
    ExportAuditEventsUseCase,
    GetAuditEventsUseCase,
    GetAuditStatsUseCase,
    GetContractAuditEventsUseCase,
)
from .documents import (
    GetCleanupStatsUseCase,
    ListDeletedDocumentsUseCase,
    PermanentDeleteDocumentUseCase,
    PurgeDueDocumentsUseCase,
    RestoreDocumentUseCase,
    SoftDeleteDocumentUseCase,
)

__all__ = [
    # Audit
    "GetAuditEventsUseCase",
    "GetContractAuditEventsUseCase",
    "ExportAuditEventsUseCase",
    "GetAuditStatsUseCase",
    # Documents
    "SoftDeleteDocumentUseCase",
    "RestoreDocumentUseCase",
    "ListDeletedDocumentsUseCase",
    "PurgeDueDocumentsUseCase",
    "PermanentDeleteDocumentUseCase",
    "GetCleanupStatsUseCase",
]
