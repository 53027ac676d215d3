"""
Audit logging module for immutable audit trail.

All significant actions are logged with integrity verification.
This module is append-only - records are never modified or deleted.
"""

import json
from datetime import datetime
from typing import Dict, Any, Optional
from flask import request, current_app

from intake import db
from intake.models import AuditLog


class AuditAction:
    """Constants for audit actions."""
    # Case actions
    CASE_CREATED = 'case_created'
    CASE_UPDATED = 'case_updated'
    CASE_SUBMISSION_FAILED = 'case_submission_failed'
    CASE_LOADED = 'case_loaded'

    # Wizard session actions
    SESSION_STARTED = 'session_started'
    SESSION_CANCELLED = 'session_cancelled'


class AuditCategory:
    """Constants for audit action categories."""
    CREATE = 'create'
    READ = 'read'
    UPDATE = 'update'
    DELETE = 'delete'


def log_action(
    action: str,
    action_category: str,
    resource_type: str,
    resource_id: Optional[str] = None,
    case_id: Optional[str] = None,
    actor_type: str = 'system',
    actor_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    success: bool = True,
    error_message: Optional[str] = None
) -> Optional[AuditLog]:
    """
    Log an action to the audit trail.

    Args:
        action: The action performed (use AuditAction constants)
        action_category: Category of action (use AuditCategory constants)
        resource_type: Type of resource affected ('case', 'session')
        resource_id: Identifier of the resource
        case_id: Associated case ID if the case exists
        actor_type: Type of actor ('user', 'system')
        actor_id: Identifier of the actor (IP address)
        details: Additional structured details
        success: Whether the action succeeded
        error_message: Error message if action failed

    Returns:
        The created AuditLog record, or None if it could not be written
    """
    try:
        ip_address = None
        user_agent = None

        try:
            if request:
                ip_address = request.remote_addr
                user_agent = request.headers.get('User-Agent')

                if actor_type == 'user' and not actor_id:
                    actor_id = ip_address
        except RuntimeError:
            # Outside request context
            pass

        audit_log = AuditLog(
            timestamp=datetime.utcnow(),
            action=action,
            action_category=action_category,
            resource_type=resource_type,
            resource_id=str(resource_id) if resource_id else None,
            case_id=case_id,
            actor_type=actor_type,
            actor_id=actor_id,
            details_json=json.dumps(details, sort_keys=True) if details else None,
            success=success,
            error_message=error_message,
            ip_address=ip_address,
            user_agent=user_agent
        )

        audit_log.integrity_hash = audit_log.compute_integrity_hash()

        db.session.add(audit_log)
        db.session.commit()

        return audit_log

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f'Failed to create audit log: {str(e)}')
        # Audit logging never breaks the request
        return None


def log_case_saved(case_id: str, case_type: str, created: bool) -> Optional[AuditLog]:
    """Log a case insert or update."""
    return log_action(
        action=AuditAction.CASE_CREATED if created else AuditAction.CASE_UPDATED,
        action_category=AuditCategory.CREATE if created else AuditCategory.UPDATE,
        resource_type='case',
        resource_id=case_id,
        case_id=case_id,
        actor_type='user',
        details={'case_type': case_type}
    )


def log_case_failed(case_type: str, error: str, case_id: Optional[str] = None,
                    validation_errors: list = None) -> Optional[AuditLog]:
    """Log a rejected or failed submission."""
    details = {'case_type': case_type}
    if validation_errors:
        details['error_count'] = len(validation_errors)
        details['errors'] = validation_errors
    return log_action(
        action=AuditAction.CASE_SUBMISSION_FAILED,
        action_category=AuditCategory.UPDATE if case_id else AuditCategory.CREATE,
        resource_type='case',
        resource_id=case_id,
        actor_type='user',
        details=details,
        success=False,
        error_message=error
    )


def log_case_loaded(case_id: str, session_id: str) -> Optional[AuditLog]:
    """Log a stored case being opened in a wizard session."""
    return log_action(
        action=AuditAction.CASE_LOADED,
        action_category=AuditCategory.READ,
        resource_type='case',
        resource_id=case_id,
        case_id=case_id,
        actor_type='user',
        details={'session_id': session_id}
    )


def log_session_event(session_id: str, wizard: str, started: bool) -> Optional[AuditLog]:
    """Log a wizard session being started or cancelled."""
    return log_action(
        action=AuditAction.SESSION_STARTED if started else AuditAction.SESSION_CANCELLED,
        action_category=AuditCategory.CREATE if started else AuditCategory.DELETE,
        resource_type='session',
        resource_id=session_id,
        actor_type='user',
        details={'wizard': wizard}
    )


def verify_audit_integrity() -> tuple:
    """
    Verify integrity of all audit log records.

    Returns:
        Tuple of (valid_count, invalid_count, invalid_ids)
    """
    valid_count = 0
    invalid_ids = []

    for log in AuditLog.query.all():
        if log.verify_integrity():
            valid_count += 1
        else:
            invalid_ids.append(log.id)

    return valid_count, len(invalid_ids), invalid_ids


def get_audit_trail_for_case(case_id: str) -> list:
    """
    Get complete audit trail for a case.

    Returns:
        List of audit log dictionaries, oldest first
    """
    logs = AuditLog.query.filter_by(case_id=case_id) \
                         .order_by(AuditLog.timestamp.asc()) \
                         .all()
    return [log.to_dict() for log in logs]
