"""
Payload Builder

Transforms the exported Section Store into the flat, snake_case record a
case table expects. Each case type is a PayloadSchema: an ordered list of
Column specs saying where a column's value comes from and how it is
defaulted.

Defaulting rules hold for every column:
- text columns: the value, or None when absent/blank
- list columns: the list, or [] for anything that is not a list
- date columns: YYYY-MM-DD or None (see utils.normalize_date)
- number, decimal and flag columns: the coerced value or None

build_payload() is pure. Columns that depend on "today" (ages) receive the
reference date through the as_of argument.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Tuple

from intake.utils import (
    compute_age, coerce_float, coerce_int, is_blank, normalize_date, parse_name, pick, resolve_other
)


# Column kinds
TEXT = 'text'
DATE = 'date'
LIST = 'list'
FLAG = 'flag'
NUMBER = 'number'
DECIMAL = 'decimal'
OTHER = 'other'
DERIVED = 'derived'

RowMap = Tuple[Tuple[str, Tuple[str, ...]], ...]


@dataclass(frozen=True)
class Column:
    """
    One destination column.

    `section` may be a dotted path into nested records
    ('referral.caseDetails'). `fields` are aliases tried in order; for
    OTHER columns they are (select, override). `fallback_sections` are
    searched when the primary section has no value.
    """
    name: str
    section: str = ''
    fields: Tuple[str, ...] = ()
    kind: str = TEXT
    fallback_sections: Tuple[str, ...] = ()
    rows: Optional[RowMap] = None
    derive: Optional[Callable[[Dict[str, Any], Optional[date]], Any]] = None


@dataclass(frozen=True)
class PayloadSchema:
    """Column map for one destination table."""
    table: str
    columns: Tuple[Column, ...]

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]


def text(name, section, *fields, fallback=()):
    return Column(name, section, fields or (name,), TEXT, tuple(fallback))


def date_col(name, section, *fields, fallback=()):
    return Column(name, section, fields or (name,), DATE, tuple(fallback))


def listing(name, section, *fields, rows=None):
    return Column(name, section, fields or (name,), LIST, rows=rows)


def flag(name, section, *fields):
    return Column(name, section, fields or (name,), FLAG)


def number(name, section, *fields):
    return Column(name, section, fields or (name,), NUMBER)


def decimal(name, section, *fields):
    return Column(name, section, fields or (name,), DECIMAL)


def other(name, section, select, override):
    return Column(name, section, (select, override), OTHER)


def derived(name, fn, section='', field=None):
    """A computed column; `section`/`field` name where edit mode puts it back."""
    return Column(name, section, (field,) if field else (), DERIVED, derive=fn)


def case_management(section='caseDetails', fallback=(), visibility=True):
    """The case_manager/status/priority(/visibility) columns every table has."""
    columns = [
        text('case_manager', section, 'caseManager', 'case_manager', fallback=fallback),
        text('status', section, 'status', 'caseStatus', fallback=fallback),
        text('priority', section, 'priority', 'casePriority', 'case_priority', fallback=fallback),
    ]
    if visibility:
        columns.append(
            text('visibility', section, 'visibility', 'caseVisibility', 'case_visibility',
                 fallback=fallback)
        )
    return columns


# ---------------------------------------------------------------------------
# Value extraction
# ---------------------------------------------------------------------------

def get_section(data: Any, path: str) -> Dict[str, Any]:
    """Resolve a (dotted) section path; anything missing reads as {}."""
    current = data
    for part in path.split('.'):
        if not isinstance(current, dict):
            return {}
        current = current.get(part)
    return current if isinstance(current, dict) else {}


def _raw_value(column: Column, data: Dict[str, Any], fields: Tuple[str, ...]) -> Any:
    for path in (column.section,) + column.fallback_sections:
        value = pick(get_section(data, path), *fields)
        if value is not None:
            return value
    return None


def scalar(value: Any) -> Any:
    """value ?? null, with blank strings and empty containers read as absent."""
    if is_blank(value):
        return None
    if isinstance(value, str):
        return value.strip()
    return value


def as_list(value: Any) -> list:
    return list(value) if isinstance(value, list) else []


def as_flag(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ('true', 'yes'):
            return True
        if lowered in ('false', 'no'):
            return False
    return None


def map_rows(items: list, rows: RowMap) -> List[Dict[str, Any]]:
    """Rename each sub-record's keys to destination column names."""
    mapped = []
    for item in items:
        if not isinstance(item, dict):
            continue
        mapped.append({dest: scalar(pick(item, *sources)) for dest, sources in rows})
    return mapped


def column_value(column: Column, data: Dict[str, Any], as_of: Optional[date] = None) -> Any:
    """Compute one column from the store export."""
    if column.kind == DERIVED:
        return column.derive(data, as_of)

    if column.kind == OTHER:
        select, override = column.fields
        section = get_section(data, column.section)
        return scalar(resolve_other(pick(section, select), pick(section, override)))

    value = _raw_value(column, data, column.fields)

    if column.kind == TEXT:
        return scalar(value)
    if column.kind == DATE:
        return normalize_date(value)
    if column.kind == LIST:
        items = as_list(value)
        return map_rows(items, column.rows) if column.rows else items
    if column.kind == FLAG:
        return as_flag(value)
    if column.kind == NUMBER:
        return coerce_int(value)
    if column.kind == DECIMAL:
        return coerce_float(value)

    raise ValueError(f'Unknown column kind: {column.kind}')


def build_payload(schema: PayloadSchema, data: Optional[Dict[str, Any]],
                  as_of: Optional[date] = None) -> Dict[str, Any]:
    """
    Build the flat record for a case table.

    Args:
        schema: Column map of the destination table
        data: Section Store export (section key -> section record)
        as_of: Reference date for derived age columns

    Returns:
        Dict with every column of the schema present
    """
    data = data if isinstance(data, dict) else {}
    return {column.name: column_value(column, data, as_of) for column in schema.columns}


def _assign(sections: Dict[str, Any], path: str, field: str, value: Any) -> None:
    target = sections
    for part in path.split('.'):
        target = target.setdefault(part, {})
    target[field] = value


def sections_from_payload(schema: PayloadSchema, row: Optional[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """
    Reverse mapping used to pre-populate a store from a stored case.

    Values go back under each column's primary section and first field
    alias. Derived columns are skipped unless they name a source field
    (a hand-entered age).
    """
    sections: Dict[str, Dict[str, Any]] = {}
    row = row or {}
    for column in schema.columns:
        if not column.fields or column.name not in row:
            continue
        value = row[column.name]
        if value is None:
            continue
        if column.kind == LIST and column.rows:
            value = [
                {sources[0]: item.get(dest) for dest, sources in column.rows
                 if item.get(dest) is not None}
                for item in value if isinstance(item, dict)
            ]
        _assign(sections, column.section, column.fields[0], value)
    return sections


# ---------------------------------------------------------------------------
# Derived columns
# ---------------------------------------------------------------------------

BIRTH_DATE_ALIASES = ('birthday', 'birthDate', 'birth_date', 'dob', 'dateOfBirth')


def _ciclcar_profile_age(data, as_of):
    profile = get_section(data, 'profileOfCICLCar')
    age = pick(profile, 'age')
    if age is not None:
        return scalar(age)
    return compute_age(pick(profile, *BIRTH_DATE_ALIASES), as_of)


def _sp_name_part(part):
    def derive(data, as_of):
        return parse_name(pick(get_section(data, 'identifying'), 'name'))[part]
    return derive


# ---------------------------------------------------------------------------
# Case tables
# ---------------------------------------------------------------------------

CICLCAR_FAMILY_ROWS: RowMap = (
    ('name', ('name',)),
    ('relationship', ('relationship',)),
    ('age', ('age',)),
    ('sex', ('sex',)),
    ('status', ('status',)),
    ('contact_number', ('contactNumber', 'contact_number')),
    ('educational_attainment', ('educationalAttainment', 'educational_attainment')),
    ('employment', ('employment',)),
)

CICLCAR_SERVICE_ROWS: RowMap = (
    ('type', ('type',)),
    ('service', ('service',)),
    ('date_provided', ('dateProvided', 'date_provided')),
    ('date_completed', ('dateCompleted', 'date_completed')),
)

CICLCAR_SCHEMA = PayloadSchema('ciclcar_case', tuple(
    case_management(fallback=('referral.caseDetails',), visibility=False) + [
        text('profile_name', 'profileOfCICLCar', 'name', 'fullName'),
        text('profile_alias', 'profileOfCICLCar', 'alias'),
        text('profile_sex', 'profileOfCICLCar', 'sex'),
        text('profile_gender', 'profileOfCICLCar', 'gender'),
        date_col('profile_birth_date', 'profileOfCICLCar', *BIRTH_DATE_ALIASES),
        derived('profile_age', _ciclcar_profile_age, 'profileOfCICLCar', 'age'),
        text('profile_status', 'profileOfCICLCar', 'civilStatus', 'status', 'civil_status'),
        text('profile_religion', 'profileOfCICLCar', 'religion'),
        text('profile_address', 'profileOfCICLCar', 'address'),
        text('profile_client_category', 'profileOfCICLCar', 'clientCategory', 'client_category'),
        text('profile_ip_group', 'profileOfCICLCar', 'ipGroup', 'ip_group'),
        text('profile_nationality', 'profileOfCICLCar', 'nationality'),
        text('profile_disability', 'profileOfCICLCar', 'disability'),
        text('profile_contact_number', 'profileOfCICLCar', 'contactNumber', 'contact_number'),
        text('profile_educational_attainment', 'profileOfCICLCar',
             'educationalAttainment', 'educational_attainment'),
        text('profile_educational_status', 'profileOfCICLCar',
             'educationalStatus', 'educational_status'),

        listing('family_background', 'familyBackground', 'members', rows=CICLCAR_FAMILY_ROWS),

        text('violation', 'violationOfCICLCar', 'violation'),
        date_col('violation_date_time_committed', 'violationOfCICLCar',
                 'dateTimeCommitted', 'date_time_committed'),
        text('specific_violation', 'violationOfCICLCar', 'specificViolation', 'specific_violation'),
        text('violation_place_committed', 'violationOfCICLCar', 'placeCommitted', 'place_committed'),
        text('violation_status', 'violationOfCICLCar', 'status'),
        date_col('violation_admission_date', 'violationOfCICLCar', 'admissionDate', 'admission_date'),
        text('repeat_offender', 'violationOfCICLCar', 'repeatOffender', 'repeat_offender'),
        text('violation_previous_offense', 'violationOfCICLCar',
             'previousOffense', 'previouseOffense', 'prevOffense', 'previous_offense'),

        text('record_details', 'recordDetails', 'details', 'recordDetails'),

        text('complainant_name', 'complainant', 'name'),
        text('complainant_alias', 'complainant', 'alias'),
        text('complainant_victim', 'complainant', 'victim'),
        text('complainant_relationship', 'complainant', 'relationship'),
        text('complainant_contact_number', 'complainant', 'contactNumber', 'contact_number'),
        text('complainant_sex', 'complainant', 'sex'),
        date_col('complainant_birth_date', 'complainant', *BIRTH_DATE_ALIASES),
        text('complainant_address', 'complainant', 'address'),

        text('remarks', 'remarks', 'remarks', 'notes'),

        listing('services', 'services', 'services', rows=CICLCAR_SERVICE_ROWS),

        text('referral_region', 'referral', 'region'),
        text('referral_province', 'referral', 'province'),
        text('referral_city', 'referral', 'city'),
        text('referral_barangay', 'referral', 'barangay'),
        text('referral_referred_to', 'referral', 'referredTo', 'referred_to'),
        date_col('referral_date_referred', 'referral', 'dateReferred', 'date_referred'),
        text('referral_reason', 'referral', 'referralReason', 'reason', 'referral_reason'),
    ]
))


SC_SCHEMA = PayloadSchema('sc_case', tuple(
    case_management() + [
        text('senior_name', 'identifying', 'name'),
        text('region', 'identifying'),
        text('province', 'identifying'),
        text('city_municipality', 'identifying', 'cityMunicipality'),
        text('barangay', 'identifying'),
        date_col('date_of_birth', 'identifying', 'birthday', 'dateOfBirth'),
        text('place_of_birth', 'identifying', 'placeOfBirth'),
        text('marital_status', 'identifying', 'maritalStatus'),
        text('gender', 'identifying'),
        text('contact_number', 'identifying', 'contactNumber'),
        text('email_address', 'identifying', 'emailAddress'),
        text('religion', 'identifying'),
        text('ethnic_origin', 'identifying', 'ethnicOrigin'),
        text('language_spoken_written', 'identifying', 'languageSpokenWritten'),
        text('osca_id_number', 'identifying', 'oscaIdNumber'),
        text('gsis', 'identifying'),
        text('tin', 'identifying'),
        text('philhealth', 'identifying'),
        text('sc_association', 'identifying', 'scAssociation'),
        text('other_gov_id', 'identifying', 'otherGovId'),
        text('capability_to_travel', 'identifying', 'capabilityToTravel'),
        text('service_business_employment', 'identifying', 'serviceBusinessEmployment'),
        text('current_pension', 'identifying', 'currentPension'),

        text('name_of_spouse', 'family', 'spouseName'),
        text('fathers_name', 'family', 'fathersName'),
        text('mothers_maiden_name', 'family', 'mothersMaidenName'),
        listing('children', 'family', 'children'),
        text('other_dependents', 'family', 'otherDependents'),

        listing('educational_attainment', 'education', 'educationalAttainment'),
        listing('technical_skills', 'education', 'technicalSkills'),
        listing('community_service_involvement', 'education', 'communityServiceInvolvement'),
        listing('living_with', 'household', 'livingWith'),
        listing('household_condition', 'household', 'householdCondition'),

        listing('source_of_income_assistance', 'economic', 'sourceOfIncomeAssistance'),
        listing('assets_real_immovable', 'economic', 'assetsRealImmovable'),
        listing('assets_personal_movable', 'economic', 'assetsPersonalMovable'),
        listing('needs_commonly_encountered', 'economic', 'needsCommonlyEncountered'),

        listing('medical_concern', 'health', 'medicalConcern'),
        listing('dental_concern', 'health', 'dentalConcern'),
        listing('optical', 'health'),
        listing('hearing', 'health'),
        listing('social', 'health'),
        listing('difficulty', 'health'),
        listing('medicines_for_maintenance', 'health', 'medicinesForMaintenance'),
        text('scheduled_checkup', 'health', 'scheduledCheckup'),
        text('checkup_frequency', 'health', 'checkupFrequency'),

        text('assisting_person', 'interview', 'assistingPerson'),
        text('relation_to_senior', 'interview', 'relationToSenior'),
        text('interviewer', 'interview'),
        date_col('date_of_interview', 'interview', 'dateOfInterview'),
        text('place_of_interview', 'interview', 'placeOfInterview'),
    ]
))


FAR_SCHEMA = PayloadSchema('far_case', tuple(
    case_management(fallback=('familyAssistanceRecord.caseDetails',)) + [
        date_col('date', 'familyAssistanceRecord', 'date', 'assistanceDate'),
        text('receiving_member', 'familyAssistanceRecord', 'receivingMember', 'receiving_member'),
        other('emergency', 'familyAssistanceRecord', 'emergency', 'emergencyOther'),
        text('emergency_other', 'familyAssistanceRecord', 'emergencyOther'),
        other('assistance', 'familyAssistanceRecord', 'assistance', 'assistanceOther'),
        text('assistance_other', 'familyAssistanceRecord', 'assistanceOther'),
        text('unit', 'familyAssistanceRecord'),
        text('quantity', 'familyAssistanceRecord'),
        text('cost', 'familyAssistanceRecord'),
        text('provider', 'familyAssistanceRecord'),
    ]
))


FA_SCHEMA = PayloadSchema('fa_case', tuple(
    case_management() + [
        date_col('interview_date', 'assistance', 'interviewDate'),
        date_col('date_recorded', 'assistance', 'dateRecorded'),
        text('client_name', 'assistance', 'clientName'),
        text('address', 'assistance'),
        text('purpose', 'assistance'),
        text('benificiary_name', 'assistance', 'beneficiaryName'),
        text('contact_number', 'assistance', 'contactNumber'),
        text('prepared_by', 'assistance', 'preparedBy'),
        text('status_report', 'assistance', 'statusReport'),
        text('client_category', 'assistance', 'clientCategory'),
        text('gender', 'assistance'),
        text('four_ps_member', 'assistance', 'fourPsMember'),
        text('transaction', 'assistance'),
        text('notes', 'assistance'),
    ]
))


PWD_SCHEMA = PayloadSchema('pwd_case', tuple(
    case_management() + [
        text('application_type', 'personal', 'applicationType'),
        text('pwd_number', 'personal', 'pwdNumber'),
        date_col('date_applied', 'personal', 'dateApplied'),
        text('last_name', 'personal', 'lastName'),
        text('first_name', 'personal', 'firstName'),
        text('middle_name', 'personal', 'middleName'),
        text('suffix', 'personal'),
        date_col('date_of_birth', 'personal', 'dateOfBirth', 'birthday'),
        text('sex', 'personal'),
        text('civil_status', 'personal', 'civilStatus'),
        listing('type_of_disability', 'disability', 'typeOfDisability'),
        listing('cause_of_disability', 'disability', 'causeOfDisability'),
        text('house_no_street', 'address', 'houseNoStreet'),
        text('barangay', 'address'),
        text('municipality', 'address'),
        text('province', 'address'),
        text('region', 'address'),
        text('landline_number', 'address', 'landlineNumber'),
        text('mobile_no', 'address', 'mobileNo'),
        text('email_address', 'address', 'emailAddress'),
        text('educational_attainment', 'employment', 'educationalAttainment'),
        text('employment_status', 'employment', 'employmentStatus'),
        text('employment_category', 'employment', 'employmentCategory'),
        text('type_of_employment', 'employment', 'typeOfEmployment'),
        text('occupation', 'employment'),
        text('organization_affiliated', 'employment', 'organizationAffiliated'),
        text('contact_person', 'employment', 'contactPerson'),
        text('office_address', 'employment', 'officeAddress'),
        text('tel_no', 'employment', 'telNo'),
        text('sss', 'identification'),
        text('gsis', 'identification'),
        text('pag_ibig', 'identification', 'pagIbig'),
        text('psn', 'identification'),
        text('philhealth', 'identification'),
        text('fathers_name', 'identification', 'fathersName'),
        text('mothers_name', 'identification', 'mothersName'),
        text('accomplished_by', 'processing', 'accomplishedBy'),
        text('certifying_physician', 'processing', 'certifyingPhysician'),
        text('license_no', 'processing', 'licenseNo'),
        text('processing_officer', 'processing', 'processingOfficer'),
        text('approving_officer', 'processing', 'approvingOfficer'),
        text('encoder', 'processing'),
        text('reporting_unit', 'processing', 'reportingUnit'),
        text('control_no', 'processing', 'controlNo'),
    ]
))


SP_SCHEMA = PayloadSchema('sp_case', tuple(
    case_management() + [
        text('full_name', 'identifying', 'name'),
        derived('first_name', _sp_name_part('first_name')),
        derived('last_name', _sp_name_part('last_name')),
        number('age', 'identifying', 'age'),
        text('address', 'identifying'),
        date_col('birth_date', 'identifying', 'birthDate'),
        text('birth_place', 'identifying', 'birthPlace'),
        text('civil_status', 'identifying', 'civilStatus'),
        text('educational_attainment', 'identifying', 'educationalAttainment'),
        text('occupation', 'identifying'),
        text('monthly_income', 'identifying', 'monthlyIncome'),
        text('religion', 'identifying'),
        date_col('interview_date', 'identifying', 'interviewDate'),
        text('year_member', 'membership', 'yearMember'),
        text('skills', 'membership'),
        text('solo_parent_duration', 'membership', 'soloParentDuration'),
        flag('four_ps', 'membership', 'fourPs'),
        text('parents_whereabouts', 'narrative', 'parentsWhereabouts'),
        text('background_information', 'narrative', 'backgroundInformation'),
        text('assessment', 'narrative'),
        text('contact_number', 'contact', 'cellphoneNumber'),
        text('emergency_contact_person', 'contact', 'emergencyContactPerson'),
        text('emergency_contact_number', 'contact', 'emergencyContactNumber'),
        text('notes', 'contact'),
        listing('family_members', 'familyComposition', 'members'),
    ]
))


# General case intake: two parts (client/perpetrator, then victim) saved as
# one row. Part 2 reads the "*2" sections into the "*2" columns.

CASE_FAMILY_ROWS: RowMap = (
    ('name', ('name',)),
    ('age', ('age',)),
    ('relation', ('relation', 'relationship')),
    ('status', ('status', 'civilStatus')),
    ('education', ('education', 'educationalAttainment')),
    ('occupation', ('occupation',)),
    ('income', ('income',)),
)


def _case_part(second):
    suffix = '2' if second else ''
    prefix = 'identifying2' if second else 'identifying'
    identifying = f'IdentifyingData{suffix}'
    party, party_prefix = ('VictimInfo2', 'victim2') if second else ('PerpetratorInfo', 'perpetrator')
    return [
        date_col(f'{prefix}_intake_date', identifying, 'intakeDate', 'intake_date'),
        text(f'{prefix}_name', identifying, 'name', 'fullName'),
        text(f'{prefix}_referral_source', identifying, 'referralSource', 'referral_source'),
        text(f'{prefix}_alias', identifying, 'alias'),
        text(f'{prefix}_age', identifying, 'age'),
        text(f'{prefix}_status', identifying, 'status', 'civilStatus'),
        text(f'{prefix}_occupation', identifying, 'occupation'),
        text(f'{prefix}_income', identifying, 'income'),
        text(f'{prefix}_sex', identifying, 'sex'),
        text(f'{prefix}_address', identifying, 'address'),
        text(f'{prefix}_case_type', identifying, 'caseType', 'case_type'),
        text(f'{prefix}_religion', identifying, 'religion'),
        text(f'{prefix}_educational_attainment', identifying,
             'educationalAttainment', 'educational_attainment'),
        text(f'{prefix}_contact_person', identifying, 'contactPerson', 'contact_person'),
        text(f'{prefix}_birth_place', identifying, 'birthPlace', 'birth_place'),
        text(f'{prefix}_respondent_name', identifying, 'respondentName', 'respondent_name'),
        date_col(f'{prefix}_birthday', identifying, 'birthday', 'birth_date'),

        text(f'{party_prefix}_name', party, 'name'),
        text(f'{party_prefix}_age', party, 'age'),
        text(f'{party_prefix}_alias', party, 'alias'),
        text(f'{party_prefix}_sex', party, 'sex'),
        text(f'{party_prefix}_address', party, 'address'),
        text(f'{party_prefix}_victim_relation', party, 'victimRelation', 'victim_relation'),
        text(f'{party_prefix}_offence_type', party, 'offenceType', 'offence_type'),
        date_col(f'{party_prefix}_commission_datetime', party,
                 'commissionDateTime', 'commissionDatetime', 'commission_datetime'),

        text(f'presenting_problem{suffix}', f'PresentingProblem{suffix}',
             'presentingProblem', 'problem'),
        text(f'background_info{suffix}', f'BackgroundInfo{suffix}', 'backgroundInfo', 'background'),
        text(f'community_info{suffix}', f'CommunityInfo{suffix}', 'communityInfo', 'community'),
        text(f'assessment{suffix}', f'Assessment{suffix}', 'assessment'),
        text(f'recommendation{suffix}', f'Recommendation{suffix}', 'recommendation'),

        listing(f'family_members{suffix}', f'FamilyData{suffix}', 'members', rows=CASE_FAMILY_ROWS),
    ]


CASE_SCHEMA = PayloadSchema('case', tuple(
    case_management(visibility=False) + _case_part(False) + _case_part(True)
))


FAC_FAMILY_ROWS: RowMap = (
    ('family_member_name', ('familyMember', 'name')),
    ('relation_to_head', ('relationToHead',)),
    ('birthdate', ('birthdate',)),
    ('age', ('age',)),
    ('sex', ('sex',)),
    ('educational_attainment', ('educationalAttainment',)),
    ('occupation', ('occupation',)),
    ('remarks', ('remarks',)),
)

FAC_SCHEMA = PayloadSchema('fac_case', tuple(
    case_management() + [
        text('location_region', 'locationOfAffectedFamily', 'region'),
        text('location_province', 'locationOfAffectedFamily', 'province'),
        text('location_district', 'locationOfAffectedFamily', 'district'),
        text('location_city_municipality', 'locationOfAffectedFamily', 'cityMunicipality'),
        text('location_barangay', 'locationOfAffectedFamily', 'barangay'),
        text('location_evacuation_center', 'locationOfAffectedFamily', 'evacuationCenter'),

        text('head_last_name', 'headOfFamily', 'lastName'),
        text('head_first_name', 'headOfFamily', 'firstName'),
        text('head_middle_name', 'headOfFamily', 'middleName'),
        text('head_name_extension', 'headOfFamily', 'nameExtension'),
        date_col('head_birthdate', 'headOfFamily', 'birthdate'),
        number('head_age', 'headOfFamily', 'age'),
        text('head_birthplace', 'headOfFamily', 'birthplace'),
        text('head_sex', 'headOfFamily', 'sex'),
        text('head_civil_status', 'headOfFamily', 'civilStatus'),
        text('head_mothers_maiden_name', 'headOfFamily', 'mothersMaidenName'),
        text('head_religion', 'headOfFamily', 'religion'),
        text('head_occupation', 'headOfFamily', 'occupation'),
        decimal('head_monthly_income', 'headOfFamily', 'monthlyIncome'),
        text('head_id_card_presented', 'headOfFamily', 'idCardPresented'),
        text('head_id_card_number', 'headOfFamily', 'idCardNumber'),
        text('head_contact_number', 'headOfFamily', 'contactNumber'),
        text('head_permanent_address', 'headOfFamily', 'permanentAddress'),
        text('head_alternate_contact_number', 'headOfFamily', 'alternateContactNumber'),
        flag('head_4ps_beneficiary', 'headOfFamily', 'fourPsBeneficiary'),
        flag('head_ip_ethnicity', 'headOfFamily', 'ipEthnicity'),
        text('head_ip_ethnicity_type', 'headOfFamily', 'ipEthnicityType'),

        listing('family_members', 'familyInformation', 'members', rows=FAC_FAMILY_ROWS),

        number('vulnerable_older_persons', 'vulnerableMembers', 'noOfOlderPersons'),
        number('vulnerable_pregnant_women', 'vulnerableMembers', 'noOfPregnantWomen'),
        number('vulnerable_lactating_women', 'vulnerableMembers', 'noOfLactatingWomen'),
        number('vulnerable_pwds', 'vulnerableMembers', 'noOfPWDs'),

        text('house_ownership', 'finalDetails', 'houseOwnership'),
        text('shelter_damage', 'finalDetails', 'shelterDamage'),
        text('barangay_captain', 'finalDetails', 'barangayCaptain'),
        date_col('date_registered', 'finalDetails', 'dateRegistered'),
        text('lswdo_name', 'finalDetails', 'lswdoName'),
    ]
))


# Barangay rows are kept verbatim (counts per barangay)
IVAC_SCHEMA = PayloadSchema('ivac_cases', (
    text('province', 'incidenceOnVAC'),
    text('municipality', 'incidenceOnVAC'),
    listing('records', 'incidenceOnVAC'),
    listing('case_managers', 'incidenceOnVAC', 'caseManagers'),
    text('status', 'incidenceOnVAC'),
    text('reporting_period', 'incidenceOnVAC', 'reportingPeriod'),
    text('notes', 'incidenceOnVAC'),
))


PAYLOAD_SCHEMAS = {
    'ciclcar': CICLCAR_SCHEMA,
    'senior_citizen': SC_SCHEMA,
    'far': FAR_SCHEMA,
    'fa': FA_SCHEMA,
    'pwd': PWD_SCHEMA,
    'single_parent': SP_SCHEMA,
    'case': CASE_SCHEMA,
    'fac': FAC_SCHEMA,
    'ivac': IVAC_SCHEMA,
}


def build_case_payload(case_type: str, data: Optional[Dict[str, Any]],
                       as_of: Optional[date] = None) -> Dict[str, Any]:
    """Build the payload for a case type by name (KeyError if unknown)."""
    return build_payload(PAYLOAD_SCHEMAS[case_type], data, as_of)
