"""
Database models.

The service keeps no will data: wills live in the calling system and are
sent with every request. The only table is the append-only audit trail.
"""

import hashlib
import json
from datetime import datetime

from difc_wills import db


class AuditLog(db.Model):
    """
    One validation, compliance or generation event.

    Rows are never updated or deleted. integrity_hash covers HASHED_FIELDS,
    so any later edit to those columns is detectable.
    """
    __tablename__ = 'audit_logs'

    HASHED_FIELDS = (
        'timestamp', 'actor_type', 'actor_id', 'action', 'action_category',
        'resource_type', 'resource_id', 'will_type', 'document_hash',
        'details_json', 'success', 'error_message',
    )

    id = db.Column(db.Integer, primary_key=True)
    timestamp = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    actor_type = db.Column(db.String(20), nullable=False)  # 'user' or 'system'
    actor_id = db.Column(db.String(100), nullable=True)  # client IP for API callers

    action = db.Column(db.String(50), nullable=False, index=True)
    action_category = db.Column(db.String(20), nullable=False)

    resource_type = db.Column(db.String(50), nullable=False)  # 'will', 'pdf', 'ai_draft'
    resource_id = db.Column(db.String(100), nullable=True)
    will_type = db.Column(db.String(30), nullable=True)
    document_hash = db.Column(db.String(64), nullable=True)

    details_json = db.Column(db.Text, nullable=True)
    success = db.Column(db.Boolean, nullable=False)
    error_message = db.Column(db.Text, nullable=True)

    ip_address = db.Column(db.String(45), nullable=True)
    user_agent = db.Column(db.String(500), nullable=True)

    integrity_hash = db.Column(db.String(64), nullable=False)

    def __repr__(self):
        return f'<AuditLog {self.id} {self.action} ({self.will_type or "-"})>'

    @property
    def details(self):
        return json.loads(self.details_json) if self.details_json else None

    def to_dict(self):
        return {
            'id': self.id,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'actorType': self.actor_type,
            'actorId': self.actor_id,
            'action': self.action,
            'actionCategory': self.action_category,
            'resourceType': self.resource_type,
            'resourceId': self.resource_id,
            'willType': self.will_type,
            'documentHash': self.document_hash,
            'details': self.details,
            'success': self.success,
            'errorMessage': self.error_message,
        }

    def compute_integrity_hash(self) -> str:
        """SHA256 over HASHED_FIELDS, '|' separated, with None as ''."""
        parts = []
        for name in self.HASHED_FIELDS:
            value = getattr(self, name)
            if isinstance(value, datetime):
                value = value.isoformat()
            parts.append('' if value is None else str(value))
        return hashlib.sha256('|'.join(parts).encode('utf-8')).hexdigest()

    def verify_integrity(self) -> bool:
        return self.integrity_hash == self.compute_integrity_hash()
