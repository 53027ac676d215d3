"""
Submission Gateway.

Persists built payloads as CaseRecord rows and reports the outcome as
{id, error}. The gateway owns the table-level constraints (required
columns and column defaults); the wizard only validates step by step.
Nothing is retried: a failed call leaves the wizard's store untouched so
the user can correct and resubmit.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from intake import db
from intake.audit_logger import log_case_saved, log_case_failed
from intake.models import SUB_RECORD_COLUMNS, CaseRecord
from intake.payloads import PAYLOAD_SCHEMAS, build_payload, sections_from_payload


# Columns that must be non-null (lists: non-empty) before a row is written
REQUIRED_COLUMNS = {
    'ciclcar': ('profile_name',),
    'senior_citizen': ('senior_name',),
    'far': ('date', 'receiving_member', 'emergency', 'assistance',
            'unit', 'quantity', 'cost', 'provider'),
    'fa': ('client_name',),
    'pwd': ('last_name', 'first_name'),
    'single_parent': ('full_name',),
    'case': ('identifying_name',),
    'fac': ('head_last_name', 'head_first_name'),
    'ivac': ('province', 'municipality', 'records'),
}

# Stored values for columns the payload leaves null
COLUMN_DEFAULTS = {
    'fac': {
        'head_4ps_beneficiary': False,
        'head_ip_ethnicity': False,
        'vulnerable_older_persons': 0,
        'vulnerable_pregnant_women': 0,
        'vulnerable_lactating_women': 0,
        'vulnerable_pwds': 0,
    },
    'ivac': {
        'status': 'Active',
    },
}


@dataclass
class GatewayError:
    """A failed submission: a message plus field-level problems."""
    message: str
    validation_errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {'message': self.message, 'validation_errors': list(self.validation_errors)}


@dataclass
class GatewayResult:
    """Either an id or an error, never both."""
    id: Optional[str] = None
    error: Optional[GatewayError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'error': self.error.to_dict() if self.error else None}


def check_required(case_type: str, payload: Dict[str, Any]) -> List[str]:
    """Return a message for every required column the payload leaves null."""
    return [
        f'{column} is required'
        for column in REQUIRED_COLUMNS.get(case_type, ())
        if payload.get(column) is None or payload.get(column) == []
    ]


class SubmissionGateway:
    """Writes case payloads through the Flask-SQLAlchemy session."""

    def __init__(self, session=None):
        self.session = session or db.session

    def _fail(self, case_type: str, message: str, case_id: Optional[str] = None,
              validation_errors: Optional[List[str]] = None) -> GatewayResult:
        error = GatewayError(message, validation_errors or [])
        log_case_failed(case_type, message, case_id=case_id, validation_errors=error.validation_errors)
        return GatewayResult(id=None, error=error)

    def _validate(self, case_type: str, payload: Dict[str, Any]) -> Optional[GatewayError]:
        if case_type not in PAYLOAD_SCHEMAS:
            return GatewayError(f'Unknown case type: {case_type}')
        problems = check_required(case_type, payload)
        if problems:
            return GatewayError('Submission rejected: required fields are missing', problems)
        return None

    def _write(self, record: CaseRecord, case_type: str, payload: Dict[str, Any]) -> None:
        payload = dict(payload)
        for column, default in COLUMN_DEFAULTS.get(case_type, {}).items():
            if payload.get(column) is None:
                payload[column] = default
        sub_records = {key: payload.pop(key, None) for key in SUB_RECORD_COLUMNS.get(case_type, ())}
        record.apply_payload(payload)
        if sub_records:
            record.replace_sub_records(sub_records)

    def create(self, case_type: str, payload: Dict[str, Any]) -> GatewayResult:
        """Insert a new case."""
        problem = self._validate(case_type, payload)
        if problem:
            return self._fail(case_type, problem.message, validation_errors=problem.validation_errors)

        try:
            record = CaseRecord(case_type=case_type, table_name=PAYLOAD_SCHEMAS[case_type].table)
            self._write(record, case_type, payload)
            self.session.add(record)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.error(f'Failed to create {case_type} case: {str(e)}')
            return self._fail(case_type, f'Failed to save case: {str(e)}')

        current_app.logger.info(f'Created {case_type} case {record.id}')
        log_case_saved(record.id, case_type, created=True)
        return GatewayResult(id=record.id)

    def update(self, case_type: str, case_id: str, payload: Dict[str, Any]) -> GatewayResult:
        """Update an existing case; sub-record rows are replaced wholesale."""
        problem = self._validate(case_type, payload)
        if problem:
            return self._fail(case_type, problem.message, case_id=case_id,
                              validation_errors=problem.validation_errors)

        try:
            record = self.session.get(CaseRecord, case_id)
            if record is None or record.case_type != case_type:
                return self._fail(case_type, f'Case not found: {case_id}', case_id=case_id)
            self._write(record, case_type, payload)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.error(f'Failed to update {case_type} case {case_id}: {str(e)}')
            return self._fail(case_type, f'Failed to save case: {str(e)}', case_id=case_id)

        current_app.logger.info(f'Updated {case_type} case {case_id}')
        log_case_saved(case_id, case_type, created=False)
        return GatewayResult(id=case_id)

    def save(self, case_type: str, payload: Dict[str, Any], case_id: Optional[str] = None) -> GatewayResult:
        if case_id:
            return self.update(case_type, case_id, payload)
        return self.create(case_type, payload)


def load_case(case_type: str, case_id: str) -> Optional[Dict[str, Any]]:
    """Stored flat record of a case, or None if there is no such case."""
    record = db.session.get(CaseRecord, case_id)
    if record is None or record.case_type != case_type:
        return None
    return record.to_row()


def hydrate_session(session, row: Dict[str, Any]) -> None:
    """Pre-populate a wizard session's store from a stored record."""
    schema = PAYLOAD_SCHEMAS[session.wizard.case_type]
    session.store.load(sections_from_payload(schema, row))


def submit_session(session, gateway: SubmissionGateway, case_id: Optional[str] = None,
                   as_of: Optional[date] = None) -> GatewayResult:
    """
    Final-step submission of a wizard session.

    Builds the payload from the store export and hands it to the gateway.
    The store is reset after a successful save and left as it was after a
    failed one.
    """
    case_id = case_id or session.case_id
    payload = build_payload(session.wizard.schema, session.store.export(),
                            as_of=as_of or date.today())
    result = gateway.save(session.wizard.case_type, payload, case_id=case_id)
    if result.ok:
        session.reset()
    return result
