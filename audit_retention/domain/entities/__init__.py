"""
Audit & Retention Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    AuditAction,
    EntityType,
    UserRole,
    DocumentState,
    READ_ACTIONS,
)

# Export all entities
from .user import User
from .contract import Contract
from .document import Document
from .audit_event import AuditEvent

__all__ = [
    # Enums
    "AuditAction",
    "EntityType",
    "UserRole",
    "DocumentState",
    "READ_ACTIONS",
    # Entities
    "User",
    "Contract",
    "Document",
    "AuditEvent",
]
