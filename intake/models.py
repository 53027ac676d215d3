"""
Database models for the intake service.

A submitted wizard becomes a CaseRecord: the case-management columns live
on the row itself and the rest of the flat payload is stored as JSON.
Family rows (CICL/CAR family background, general intake family
composition, FAC family information) are kept in their own tables and are
replaced wholesale whenever the case is updated.
"""

import json
import hashlib
import uuid
from datetime import datetime
from intake import db
from intake.utils import coerce_int, normalize_date


DEFAULT_STATUS = 'active'
DEFAULT_PRIORITY = 'normal'
DEFAULT_VISIBILITY = 'visible'

# Payload keys that are stored as columns instead of inside payload_json
CASE_COLUMNS = ('case_manager', 'status', 'priority', 'visibility')

FAMILY_MEMBER_COLUMNS = (
    'name', 'relationship', 'age', 'sex', 'status',
    'contact_number', 'educational_attainment', 'employment',
)

CASE_FAMILY_MEMBER_COLUMNS = (
    'name', 'age', 'relation', 'status', 'education', 'occupation', 'income',
)

FAC_FAMILY_MEMBER_COLUMNS = (
    'family_member_name', 'relation_to_head', 'birthdate', 'age', 'sex',
    'educational_attainment', 'occupation', 'remarks',
)

# Part 2 family rows of a general intake are numbered from here
PART2_GROUP_BASE = 2000

# Payload list column -> sub-record table, per case type
SUB_RECORD_COLUMNS = {
    'ciclcar': ('family_background',),
    'case': ('family_members', 'family_members2'),
    'fac': ('family_members',),
}


def new_case_id():
    return str(uuid.uuid4())


class CaseRecord(db.Model):
    """
    One intake case of any case type.
    """
    __tablename__ = 'cases'

    id = db.Column(db.String(36), primary_key=True, default=new_case_id)
    case_type = db.Column(db.String(30), nullable=False, index=True)
    table_name = db.Column(db.String(50), nullable=False)

    # Case management
    case_manager = db.Column(db.String(200), nullable=True)
    status = db.Column(db.String(20), default=DEFAULT_STATUS, nullable=False)
    priority = db.Column(db.String(20), default=DEFAULT_PRIORITY, nullable=False)
    visibility = db.Column(db.String(20), default=DEFAULT_VISIBILITY, nullable=False)

    # Flat payload minus the columns above and sub-record tables
    payload_json = db.Column(db.Text, nullable=False, default='{}')

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    family_members = db.relationship(
        'FamilyMember', backref='case', lazy='select',
        order_by='FamilyMember.position', cascade='all, delete-orphan'
    )
    case_family_members = db.relationship(
        'CaseFamilyMember', backref='case', lazy='select',
        order_by='CaseFamilyMember.group_no', cascade='all, delete-orphan'
    )
    fac_family_members = db.relationship(
        'FacFamilyMember', backref='case', lazy='select',
        order_by='FacFamilyMember.position', cascade='all, delete-orphan'
    )
    audit_logs = db.relationship('AuditLog', backref='case', lazy='dynamic')

    def __repr__(self):
        return f'<CaseRecord {self.id} {self.case_type} - {self.status}>'

    def get_payload(self):
        """Deserialize the JSON payload."""
        return json.loads(self.payload_json) if self.payload_json else {}

    def set_payload(self, payload):
        """Serialize the payload to JSON with stable ordering."""
        self.payload_json = json.dumps(payload, indent=2, sort_keys=True)

    def apply_payload(self, payload):
        """
        Copy a built payload onto this record.

        Case-management columns default when the payload leaves them null;
        visibility is only touched when the payload has that column.
        """
        payload = dict(payload)
        self.case_manager = payload.pop('case_manager', None)
        self.status = payload.pop('status', None) or DEFAULT_STATUS
        self.priority = payload.pop('priority', None) or DEFAULT_PRIORITY
        if 'visibility' in payload:
            self.visibility = payload.pop('visibility') or DEFAULT_VISIBILITY
        elif not self.visibility:
            self.visibility = DEFAULT_VISIBILITY
        self.set_payload(payload)

    def replace_family_members(self, rows):
        """Drop existing family rows and insert the given ones in order."""
        self.family_members = [
            FamilyMember.from_row(position, row)
            for position, row in enumerate(rows or [])
        ]

    def replace_sub_records(self, sub_records):
        """Replace every sub-record table of this case type from payload lists."""
        if self.case_type == 'ciclcar':
            self.replace_family_members(sub_records.get('family_background'))
        elif self.case_type == 'case':
            part1 = sub_records.get('family_members') or []
            part2 = sub_records.get('family_members2') or []
            self.case_family_members = (
                [CaseFamilyMember.from_row(index + 1, row) for index, row in enumerate(part1)] +
                [CaseFamilyMember.from_row(PART2_GROUP_BASE + index + 1, row)
                 for index, row in enumerate(part2)]
            )
        elif self.case_type == 'fac':
            self.fac_family_members = [
                FacFamilyMember.from_row(position, row)
                for position, row in enumerate(sub_records.get('family_members') or [])
            ]

    def to_row(self):
        """The flat record as it was submitted, sub-records included."""
        row = self.get_payload()
        row.update({
            'id': self.id,
            'case_manager': self.case_manager,
            'status': self.status,
            'priority': self.priority,
            'visibility': self.visibility,
        })
        if self.case_type == 'ciclcar':
            row['family_background'] = [m.to_row() for m in self.family_members]
        elif self.case_type == 'case':
            members = self.case_family_members
            row['family_members'] = [m.to_row() for m in members if m.group_no <= PART2_GROUP_BASE]
            row['family_members2'] = [m.to_row() for m in members if m.group_no > PART2_GROUP_BASE]
        elif self.case_type == 'fac':
            row['family_members'] = [m.to_row() for m in self.fac_family_members]
        return row

    def to_dict(self):
        """Convert case to dictionary for API responses."""
        return {
            'id': self.id,
            'case_type': self.case_type,
            'table': self.table_name,
            'case_manager': self.case_manager,
            'status': self.status,
            'priority': self.priority,
            'visibility': self.visibility,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
            'record': self.to_row(),
        }


class FamilyMember(db.Model):
    """
    Family background row of a CICL/CAR case.
    """
    __tablename__ = 'family_members'

    id = db.Column(db.Integer, primary_key=True)
    case_id = db.Column(db.String(36), db.ForeignKey('cases.id'), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False, default=0)

    name = db.Column(db.String(200), nullable=True)
    relationship = db.Column(db.String(100), nullable=True)
    age = db.Column(db.String(20), nullable=True)
    sex = db.Column(db.String(20), nullable=True)
    status = db.Column(db.String(50), nullable=True)
    contact_number = db.Column(db.String(50), nullable=True)
    educational_attainment = db.Column(db.String(200), nullable=True)
    employment = db.Column(db.String(200), nullable=True)

    def __repr__(self):
        return f'<FamilyMember {self.position} of {self.case_id}>'

    @classmethod
    def from_row(cls, position, row):
        values = {key: row.get(key) for key in FAMILY_MEMBER_COLUMNS}
        if values['age'] is not None:
            values['age'] = str(values['age'])
        return cls(position=position, **values)

    def to_row(self):
        return {key: getattr(self, key) for key in FAMILY_MEMBER_COLUMNS}


class CaseFamilyMember(db.Model):
    """
    Family composition row of a general case intake.

    group_no is the 1-based row number; part 2 rows start after
    PART2_GROUP_BASE.
    """
    __tablename__ = 'case_family_members'

    id = db.Column(db.Integer, primary_key=True)
    case_id = db.Column(db.String(36), db.ForeignKey('cases.id'), nullable=False, index=True)
    group_no = db.Column(db.Integer, nullable=False)

    name = db.Column(db.String(200), nullable=True)
    age = db.Column(db.String(20), nullable=True)
    relation = db.Column(db.String(100), nullable=True)
    status = db.Column(db.String(50), nullable=True)
    education = db.Column(db.String(200), nullable=True)
    occupation = db.Column(db.String(200), nullable=True)
    income = db.Column(db.String(50), nullable=True)

    def __repr__(self):
        return f'<CaseFamilyMember {self.group_no} of {self.case_id}>'

    @classmethod
    def from_row(cls, group_no, row):
        values = {key: row.get(key) for key in CASE_FAMILY_MEMBER_COLUMNS}
        for key in ('age', 'income'):
            if values[key] is not None:
                values[key] = str(values[key])
        return cls(group_no=group_no, **values)

    def to_row(self):
        return {key: getattr(self, key) for key in CASE_FAMILY_MEMBER_COLUMNS}


class FacFamilyMember(db.Model):
    """
    Family information row of a Family Assistance Card.
    """
    __tablename__ = 'fac_family_members'

    id = db.Column(db.Integer, primary_key=True)
    case_id = db.Column(db.String(36), db.ForeignKey('cases.id'), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False, default=0)

    family_member_name = db.Column(db.String(200), nullable=True)
    relation_to_head = db.Column(db.String(100), nullable=True)
    birthdate = db.Column(db.String(10), nullable=True)  # YYYY-MM-DD
    age = db.Column(db.Integer, nullable=True)
    sex = db.Column(db.String(20), nullable=True)
    educational_attainment = db.Column(db.String(200), nullable=True)
    occupation = db.Column(db.String(200), nullable=True)
    remarks = db.Column(db.Text, nullable=True)

    def __repr__(self):
        return f'<FacFamilyMember {self.position} of {self.case_id}>'

    @classmethod
    def from_row(cls, position, row):
        values = {key: row.get(key) for key in FAC_FAMILY_MEMBER_COLUMNS}
        values['birthdate'] = normalize_date(values['birthdate'])
        values['age'] = coerce_int(values['age'])
        return cls(position=position, **values)

    def to_row(self):
        return {key: getattr(self, key) for key in FAC_FAMILY_MEMBER_COLUMNS}


class AuditLog(db.Model):
    """
    Immutable audit trail for all significant actions.

    This table is append-only. Records are never modified or deleted.
    """
    __tablename__ = 'audit_logs'

    id = db.Column(db.Integer, primary_key=True)

    timestamp = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    # Who performed the action
    actor_type = db.Column(db.String(20), nullable=False)  # 'user', 'system'
    actor_id = db.Column(db.String(100), nullable=True)  # IP address or None for system

    # What was done
    action = db.Column(db.String(50), nullable=False)
    action_category = db.Column(db.String(20), nullable=False)

    # What was affected
    case_id = db.Column(db.String(36), db.ForeignKey('cases.id'), nullable=True)
    resource_type = db.Column(db.String(50), nullable=False)  # 'case', 'session'
    resource_id = db.Column(db.String(100), nullable=True)

    details_json = db.Column(db.Text, nullable=True)

    success = db.Column(db.Boolean, nullable=False)
    error_message = db.Column(db.Text, nullable=True)

    ip_address = db.Column(db.String(45), nullable=True)
    user_agent = db.Column(db.String(500), nullable=True)

    integrity_hash = db.Column(db.String(64), nullable=False)

    def __repr__(self):
        return f'<AuditLog {self.id} - {self.action} by {self.actor_type}>'

    def to_dict(self):
        return {
            'id': self.id,
            'timestamp': self.timestamp.isoformat(),
            'actor_type': self.actor_type,
            'actor_id': self.actor_id,
            'action': self.action,
            'action_category': self.action_category,
            'resource_type': self.resource_type,
            'resource_id': self.resource_id,
            'case_id': self.case_id,
            'details': json.loads(self.details_json) if self.details_json else None,
            'success': self.success,
            'error_message': self.error_message
        }

    def compute_integrity_hash(self):
        """Compute hash of this record's content for tamper detection."""
        content = (f"{self.timestamp}{self.actor_type}{self.actor_id}{self.action}"
                   f"{self.resource_type}{self.resource_id}{self.details_json}")
        return hashlib.sha256(content.encode()).hexdigest()

    def verify_integrity(self):
        return self.integrity_hash == self.compute_integrity_hash()
