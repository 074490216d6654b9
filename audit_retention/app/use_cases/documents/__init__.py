"""Document lifecycle use cases: soft delete, restore, trash and purge."""

from .soft_delete_document_use_case import SoftDeleteDocumentUseCase
from .restore_document_use_case import RestoreDocumentUseCase
from .list_deleted_documents_use_case import ListDeletedDocumentsUseCase
from .purge_due_documents_use_case import PurgeDueDocumentsUseCase
from .permanent_delete_document_use_case import PermanentDeleteDocumentUseCase
from .get_cleanup_stats_use_case import GetCleanupStatsUseCase
from .dtos import (
    CleanupStats,
    DeletedDocumentView,
    DocumentResponse,
    PermanentDeleteResponse,
    PurgeFailure,
    PurgeReport,
)

__all__ = [
    "SoftDeleteDocumentUseCase",
    "RestoreDocumentUseCase",
    "ListDeletedDocumentsUseCase",
    "PurgeDueDocumentsUseCase",
    "PermanentDeleteDocumentUseCase",
    "GetCleanupStatsUseCase",
    "CleanupStats",
    "DeletedDocumentView",
    "DocumentResponse",
    "PermanentDeleteResponse",
    "PurgeFailure",
    "PurgeReport",
]
