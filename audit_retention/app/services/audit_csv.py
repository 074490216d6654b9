"""
Audit CSV rendering

Semicolon-delimited, UTF-8 with BOM for spreadsheet compatibility, fixed
German header row. Quoting is minimal: only fields containing the delimiter,
a double quote or a line break are quoted, with inner quotes doubled.
"""

import csv
import io
import json
from datetime import datetime
from typing import Dict, Iterable, Optional
from uuid import UUID

from audit_retention.domain.entities import (
    AuditAction,
    AuditEvent,
    Contract,
    EntityType,
    User,
)

BOM = "\ufeff"
DELIMITER = ";"
TIMESTAMP_FORMAT = "%d.%m.%Y %H:%M:%S"
UNKNOWN_USER = "Unbekannter Benutzer"

HEADER = [
    "Zeitpunkt",
    "Benutzer",
    "E-Mail",
    "Aktion",
    "Entitätstyp",
    "Entitäts-ID",
    "Vertragsnummer",
    "Vertragstitel",
    "IP-Adresse",
    "Alter Wert",
    "Neuer Wert",
]

ACTION_LABELS: Dict[AuditAction, str] = {
    AuditAction.CREATE: "Erstellt",
    AuditAction.READ: "Gelesen",
    AuditAction.UPDATE: "Aktualisiert",
    AuditAction.DELETE: "Gelöscht",
    AuditAction.DOWNLOAD: "Heruntergeladen",
    AuditAction.EXPORT: "Exportiert",
    AuditAction.RESTORE: "Wiederhergestellt",
}

ENTITY_TYPE_LABELS: Dict[EntityType, str] = {
    EntityType.CONTRACT: "Vertrag",
    EntityType.DOCUMENT: "Dokument",
    EntityType.PARTNER: "Partner",
    EntityType.USER: "Benutzer",
    EntityType.REMINDER: "Erinnerung",
}


def format_timestamp(value: datetime) -> str:
    return value.strftime(TIMESTAMP_FORMAT)


def serialize_snapshot(value: Optional[dict]) -> str:
    if value is None:
        return ""
    return json.dumps(value, ensure_ascii=False, sort_keys=True, default=str)


def render_audit_csv(
    events: Iterable[AuditEvent],
    users: Dict[UUID, User],
    contracts: Dict[UUID, Contract],
) -> str:
    output = io.StringIO()
    writer = csv.writer(
        output,
        delimiter=DELIMITER,
        quotechar='"',
        quoting=csv.QUOTE_MINIMAL,
        lineterminator="\r\n",
    )
    writer.writerow(HEADER)

    for event in events:
        user = users.get(event.user_id)
        contract = contracts.get(event.contract_id) if event.contract_id else None
        writer.writerow(
            [
                format_timestamp(event.created_at),
                user.full_name if user else UNKNOWN_USER,
                user.email if user else "",
                ACTION_LABELS[event.action],
                ENTITY_TYPE_LABELS[event.entity_type],
                event.entity_id,
                contract.contract_number if contract else "",
                contract.title if contract else "",
                event.ip_address or "",
                serialize_snapshot(event.old_value),
                serialize_snapshot(event.new_value),
            ]
        )

    return BOM + output.getvalue()
