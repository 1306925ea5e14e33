"""
Audit trail for validation, compliance scoring and document generation.

Each event is written as one AuditLog row with an integrity hash. The trail
is append-only. A failure to write an audit row is logged and never fails
the request that caused it.
"""

import json
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from flask import current_app, has_request_context, request

from difc_wills import db
from difc_wills.models import AuditLog
from difc_wills.utils import short_hash
from difc_wills.validation import ComplianceResult, ValidationResult


class AuditAction:
    """Constants for audit actions."""
    VALIDATION_PASSED = 'validation_passed'
    VALIDATION_FAILED = 'validation_failed'
    COMPLIANCE_PASSED = 'compliance_passed'
    COMPLIANCE_FAILED = 'compliance_failed'
    CONTENT_GENERATED = 'content_generated'
    PDF_GENERATED = 'pdf_generated'
    AI_DRAFT_GENERATED = 'ai_draft_generated'
    AI_DRAFT_FAILED = 'ai_draft_failed'


class AuditCategory:
    VALIDATE = 'validate'
    GENERATE = 'generate'


def _request_metadata() -> Tuple[Optional[str], Optional[str]]:
    """(ip_address, user_agent) of the current request, if there is one."""
    if not has_request_context():
        return None, None
    user_agent = request.headers.get('User-Agent')
    return request.remote_addr, user_agent[:500] if user_agent else None


def log_action(
    action: str,
    action_category: str,
    resource_type: str,
    will_type: Optional[str] = None,
    resource_id: Optional[str] = None,
    document_hash: Optional[str] = None,
    actor_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    success: bool = True,
    error_message: Optional[str] = None
) -> Optional[AuditLog]:
    """
    Append an event to the audit trail.

    Args:
        action: AuditAction constant
        action_category: AuditCategory constant
        resource_type: 'will', 'pdf' or 'ai_draft'
        will_type: Will type the event applied to
        resource_id: Identifier of the resource, if any
        document_hash: SHA256 of a generated document
        actor_id: Client IP; events without one are recorded as system events
        details: Structured details, stored as sorted JSON
        success: Whether the action succeeded
        error_message: Error message if the action failed

    Returns:
        The stored AuditLog, or None if it could not be written
    """
    ip_address, user_agent = _request_metadata()

    try:
        entry = AuditLog(
            timestamp=datetime.utcnow(),
            actor_type='user' if (actor_id or ip_address) else 'system',
            actor_id=actor_id or ip_address,
            action=action,
            action_category=action_category,
            resource_type=resource_type,
            resource_id=str(resource_id) if resource_id else None,
            will_type=will_type,
            document_hash=document_hash,
            details_json=json.dumps(details, sort_keys=True) if details else None,
            success=success,
            error_message=error_message,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        entry.integrity_hash = entry.compute_integrity_hash()

        db.session.add(entry)
        db.session.commit()
        return entry

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f'Failed to write audit log ({action}): {str(e)}')
        return None


def log_validation_result(will_type: str, result: ValidationResult,
                          actor_id: Optional[str] = None) -> Optional[AuditLog]:
    return log_action(
        action=AuditAction.VALIDATION_PASSED if result.is_valid else AuditAction.VALIDATION_FAILED,
        action_category=AuditCategory.VALIDATE,
        resource_type='will',
        will_type=will_type,
        actor_id=actor_id,
        details={
            'completeness': result.completeness,
            'errors': result.errors,
            'warning_count': len(result.warnings),
        },
        success=result.is_valid,
    )


def log_compliance_result(will_type: str, result: ComplianceResult,
                          actor_id: Optional[str] = None) -> Optional[AuditLog]:
    return log_action(
        action=AuditAction.COMPLIANCE_PASSED if result.is_compliant else AuditAction.COMPLIANCE_FAILED,
        action_category=AuditCategory.VALIDATE,
        resource_type='will',
        will_type=will_type,
        actor_id=actor_id,
        details={
            'score': result.score,
            'unmet': [r.name for r in result.unmet_requirements],
        },
        success=result.is_compliant,
    )


def log_document_generated(will_type: str, action: str, document_hash: Optional[str] = None,
                           actor_id: Optional[str] = None) -> Optional[AuditLog]:
    """Record template content or PDF generation."""
    return log_action(
        action=action,
        action_category=AuditCategory.GENERATE,
        resource_type='pdf' if action == AuditAction.PDF_GENERATED else 'will',
        resource_id=short_hash(document_hash) or None,
        will_type=will_type,
        document_hash=document_hash,
        actor_id=actor_id,
    )


def log_ai_generation(will_type: str, success: bool, error: Optional[str] = None,
                      actor_id: Optional[str] = None) -> Optional[AuditLog]:
    """Record an AI drafting attempt."""
    return log_action(
        action=AuditAction.AI_DRAFT_GENERATED if success else AuditAction.AI_DRAFT_FAILED,
        action_category=AuditCategory.GENERATE,
        resource_type='ai_draft',
        will_type=will_type,
        actor_id=actor_id,
        success=success,
        error_message=error,
    )


def verify_audit_integrity() -> tuple:
    """
    Recompute the hash of every audit row.

    Returns:
        Tuple of (valid_count, invalid_count, invalid_ids)
    """
    invalid_ids = []
    valid_count = 0

    for entry in AuditLog.query.order_by(AuditLog.id).all():
        if entry.verify_integrity():
            valid_count += 1
        else:
            invalid_ids.append(entry.id)

    return valid_count, len(invalid_ids), invalid_ids
