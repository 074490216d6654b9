"""
Audit & Retention Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class AuditAction(str, Enum):
    """Tracked operation kind (closed set)"""

    CREATE = "CREATE"
    READ = "READ"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    DOWNLOAD = "DOWNLOAD"
    EXPORT = "EXPORT"
    RESTORE = "RESTORE"


# Actions that describe access, not mutation: they never carry snapshots
READ_ACTIONS = frozenset({AuditAction.READ, AuditAction.DOWNLOAD, AuditAction.EXPORT})


class EntityType(str, Enum):
    """Canonical entity an audit event refers to (closed set)"""

    CONTRACT = "CONTRACT"
    DOCUMENT = "DOCUMENT"
    PARTNER = "PARTNER"
    USER = "USER"
    REMINDER = "REMINDER"


class UserRole(str, Enum):
    """Principal role issued by the identity provider"""

    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    USER = "USER"


class DocumentState(str, Enum):
    """Two-phase deletion lifecycle, derived from the document row"""

    ACTIVE = "ACTIVE"
    SOFT_DELETED = "SOFT_DELETED"
    PURGED = "PURGED"
