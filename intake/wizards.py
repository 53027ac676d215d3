"""
Wizard catalogue.

Each intake wizard is an ordered list of steps (SectionSpec) plus the
payload schema its store export is flattened into on final submission.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

from intake.payloads import PAYLOAD_SCHEMAS, PayloadSchema
from intake.schemas import (
    CASE_DETAILS_SECTION, FieldRule, OtherRule, SectionSpec, MAPPING,
    choice, date_field, email, flag, narrative, number, phone, tags, text
)


@dataclass(frozen=True)
class WizardDefinition:
    """An intake wizard: its steps and destination schema."""
    name: str
    title: str
    case_type: str
    steps: Tuple[SectionSpec, ...]

    @property
    def schema(self) -> PayloadSchema:
        return PAYLOAD_SCHEMAS[self.case_type]

    def declared_fields(self) -> Dict[str, Tuple[str, ...]]:
        """Section key -> field names, used to type the section store."""
        return {spec.key: tuple(spec.field_names) for spec in self.steps}

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'title': self.title,
            'case_type': self.case_type,
            'table': self.schema.table,
            'steps': [spec.to_dict() for spec in self.steps],
        }


SEXES = ('male', 'female')
CIVIL_STATUSES = ('single', 'married', 'widowed', 'separated', 'live-in', 'annulled')
YES_NO = ('yes', 'no')

FAMILY_MEMBER_FIELDS = (
    text('name', required=True),
    text('relationship', required=True),
    text('age'),
    choice('sex', SEXES),
    text('status'),
    phone('contactNumber'),
    text('educationalAttainment'),
    text('employment'),
)


# ---------------------------------------------------------------------------
# CICL/CAR
# ---------------------------------------------------------------------------

CICLCAR_WIZARD = WizardDefinition(
    name='ciclcar',
    title='CICL/CAR Intake',
    case_type='ciclcar',
    steps=(
        SectionSpec('profileOfCICLCar', 'Profile of CICL/CAR', fields=(
            text('name', required=True),
            text('alias'),
            text('clientCategory', required=True, min_length=1),
            text('ipGroup'),
            choice('sex', SEXES, required=True),
            text('gender'),
            date_field('birthday', required=True),
            text('age'),
            choice('civilStatus', CIVIL_STATUSES),
            text('nationality'),
            text('disability'),
            text('religion'),
            phone('contactNumber'),
            text('address', required=True),
            text('educationalAttainment'),
            text('educationalStatus'),
        )),
        SectionSpec('familyBackground', 'Family Background',
                    list_field='members', item_fields=FAMILY_MEMBER_FIELDS, min_items=1),
        SectionSpec('violationOfCICLCar', 'Violation/Offense of CICL/CAR', fields=(
            text('violation', required=True),
            date_field('dateTimeCommitted', required=True),
            text('specificViolation', required=True),
            text('placeCommitted', required=True),
            text('status'),
            date_field('admissionDate'),
            choice('repeatOffender', YES_NO),
            text('previousOffense'),
        )),
        SectionSpec('recordDetails', 'Record Details', fields=(
            narrative('details'),
        )),
        SectionSpec('complainant', 'Complainant', fields=(
            text('name', required=True),
            text('alias'),
            text('victim'),
            text('relationship'),
            phone('contactNumber'),
            choice('sex', SEXES),
            date_field('birthday'),
            text('address'),
        )),
        SectionSpec('remarks', 'Remarks', fields=(
            narrative('remarks'),
        )),
        SectionSpec('services', 'Services', list_field='services', item_fields=(
            text('type', required=True),
            text('service', required=True),
            date_field('dateProvided', required=True),
            date_field('dateCompleted'),
        )),
        SectionSpec('referral', 'Referral', fields=(
            text('region'),
            text('province'),
            text('city'),
            text('barangay'),
            text('referredTo'),
            date_field('dateReferred'),
            narrative('referralReason'),
            FieldRule('caseDetails', MAPPING),
        )),
        CASE_DETAILS_SECTION,
    ),
)


# ---------------------------------------------------------------------------
# Senior Citizen
# ---------------------------------------------------------------------------

SC_WIZARD = WizardDefinition(
    name='senior_citizen',
    title='Senior Citizen Intake',
    case_type='senior_citizen',
    steps=(
        CASE_DETAILS_SECTION,
        SectionSpec('identifying', 'Identifying Information', fields=(
            text('name', required=True),
            text('region'),
            text('province'),
            text('cityMunicipality'),
            text('barangay'),
            date_field('birthday', required=True),
            text('placeOfBirth'),
            choice('maritalStatus', CIVIL_STATUSES),
            text('gender'),
            phone('contactNumber'),
            email('emailAddress'),
            text('religion'),
            text('ethnicOrigin'),
            text('languageSpokenWritten'),
            text('oscaIdNumber'),
            text('gsis'),
            text('tin'),
            text('philhealth'),
            text('scAssociation'),
            text('otherGovId'),
            choice('capabilityToTravel', YES_NO),
            text('serviceBusinessEmployment'),
            text('currentPension'),
        )),
        SectionSpec('family', 'Family Composition', fields=(
            text('spouseName'),
            text('fathersName'),
            text('mothersMaidenName'),
            text('otherDependents'),
        ), list_field='children', item_fields=(
            text('name', required=True),
            text('occupation'),
            text('income'),
            text('age'),
            text('workingStatus'),
        )),
        SectionSpec('education', 'Education / HR Profile', fields=(
            tags('educationalAttainment'),
            tags('technicalSkills'),
            tags('communityServiceInvolvement'),
        )),
        SectionSpec('household', 'Dependency Profile', fields=(
            tags('livingWith'),
            tags('householdCondition'),
        )),
        SectionSpec('economic', 'Economic Profile', fields=(
            tags('sourceOfIncomeAssistance'),
            tags('assetsRealImmovable'),
            tags('assetsPersonalMovable'),
            tags('needsCommonlyEncountered'),
        )),
        SectionSpec('health', 'Health Profile', fields=(
            tags('medicalConcern'),
            tags('dentalConcern'),
            tags('optical'),
            tags('hearing'),
            tags('social'),
            tags('difficulty'),
            tags('medicinesForMaintenance'),
            choice('scheduledCheckup', YES_NO),
            text('checkupFrequency'),
        )),
        SectionSpec('interview', 'Interview', fields=(
            text('assistingPerson'),
            text('relationToSenior'),
            text('interviewer', required=True),
            date_field('dateOfInterview', required=True),
            text('placeOfInterview'),
        )),
    ),
)


# ---------------------------------------------------------------------------
# Family Assistance Record
# ---------------------------------------------------------------------------

EMERGENCY_TYPES = ('medical', 'food', 'shelter', 'financial', 'other')
ASSISTANCE_TYPES = ('food_pack', 'cash', 'medicine', 'hygiene_kit', 'other')

FAR_WIZARD = WizardDefinition(
    name='far',
    title='Family Assistance Record',
    case_type='far',
    steps=(
        SectionSpec('familyAssistanceRecord', 'Family Assistance Record', fields=(
            date_field('date', required=True),
            text('receivingMember', required=True),
            choice('emergency', EMERGENCY_TYPES, required=True),
            text('emergencyOther'),
            choice('assistance', ASSISTANCE_TYPES, required=True),
            text('assistanceOther'),
            text('unit', required=True, min_length=1),
            number('quantity', required=True),
            number('cost', required=True),
            text('provider', required=True),
        ), other_rules=(
            OtherRule('emergency', 'emergencyOther', message='Please specify other emergency type'),
            OtherRule('assistance', 'assistanceOther', message='Please specify other assistance type'),
        )),
        CASE_DETAILS_SECTION,
    ),
)


# ---------------------------------------------------------------------------
# Financial Assistance
# ---------------------------------------------------------------------------

FA_WIZARD = WizardDefinition(
    name='fa',
    title='Financial Assistance',
    case_type='fa',
    steps=(
        SectionSpec('assistance', 'Financial Assistance', fields=(
            date_field('interviewDate', required=True),
            date_field('dateRecorded'),
            text('clientName', required=True),
            text('address'),
            text('purpose', required=True),
            text('beneficiaryName'),
            phone('contactNumber'),
            text('preparedBy'),
            text('statusReport'),
            text('clientCategory'),
            choice('gender', SEXES),
            choice('fourPsMember', YES_NO),
            text('transaction'),
            narrative('notes'),
        )),
        CASE_DETAILS_SECTION,
    ),
)


# ---------------------------------------------------------------------------
# Persons with Disabilities
# ---------------------------------------------------------------------------

PWD_WIZARD = WizardDefinition(
    name='pwd',
    title='Persons with Disabilities',
    case_type='pwd',
    steps=(
        SectionSpec('personal', 'Personal Information', fields=(
            choice('applicationType', ('new', 'renewal'), required=True),
            text('pwdNumber'),
            date_field('dateApplied'),
            text('lastName', required=True),
            text('firstName', required=True),
            text('middleName'),
            text('suffix'),
            date_field('dateOfBirth', required=True),
            choice('sex', SEXES, required=True),
            choice('civilStatus', CIVIL_STATUSES),
        )),
        SectionSpec('disability', 'Disability', fields=(
            tags('typeOfDisability', required=True),
            tags('causeOfDisability'),
        )),
        SectionSpec('address', 'Residence Address', fields=(
            text('houseNoStreet'),
            text('barangay', required=True),
            text('municipality', required=True),
            text('province'),
            text('region'),
            phone('landlineNumber'),
            phone('mobileNo'),
            email('emailAddress'),
        )),
        SectionSpec('employment', 'Education and Employment', fields=(
            text('educationalAttainment'),
            text('employmentStatus'),
            text('employmentCategory'),
            text('typeOfEmployment'),
            text('occupation'),
            text('organizationAffiliated'),
            text('contactPerson'),
            text('officeAddress'),
            phone('telNo'),
        )),
        SectionSpec('identification', 'ID Reference and Family Background', fields=(
            text('sss'),
            text('gsis'),
            text('pagIbig'),
            text('psn'),
            text('philhealth'),
            text('fathersName'),
            text('mothersName'),
        )),
        SectionSpec('processing', 'Processing', fields=(
            text('accomplishedBy'),
            text('certifyingPhysician'),
            text('licenseNo'),
            text('processingOfficer'),
            text('approvingOfficer'),
            text('encoder'),
            text('reportingUnit'),
            text('controlNo'),
        )),
        CASE_DETAILS_SECTION,
    ),
)


# ---------------------------------------------------------------------------
# Single Parent
# ---------------------------------------------------------------------------

SP_WIZARD = WizardDefinition(
    name='single_parent',
    title='Single Parent Intake',
    case_type='single_parent',
    steps=(
        SectionSpec('identifying', 'Identifying Information', fields=(
            text('name', required=True),
            number('age'),
            text('address', required=True),
            date_field('birthDate', required=True),
            text('birthPlace'),
            choice('civilStatus', CIVIL_STATUSES),
            text('educationalAttainment'),
            text('occupation'),
            text('monthlyIncome'),
            text('religion'),
            date_field('interviewDate'),
        )),
        SectionSpec('familyComposition', 'Family Composition',
                    list_field='members', item_fields=FAMILY_MEMBER_FIELDS, min_items=1),
        SectionSpec('membership', 'Membership', fields=(
            text('yearMember'),
            text('skills'),
            text('soloParentDuration'),
            flag('fourPs'),
        )),
        SectionSpec('narrative', 'Background and Assessment', fields=(
            narrative('parentsWhereabouts'),
            narrative('backgroundInformation'),
            narrative('assessment'),
        )),
        SectionSpec('contact', 'Contact Information', fields=(
            phone('cellphoneNumber'),
            text('emergencyContactPerson'),
            phone('emergencyContactNumber'),
            narrative('notes'),
        )),
        CASE_DETAILS_SECTION,
    ),
)


# ---------------------------------------------------------------------------
# General case intake
# ---------------------------------------------------------------------------

RELATIONS = (
    'father', 'mother', 'spouse', 'son', 'daughter', 'brother', 'sister',
    'grandfather', 'grandmother', 'guardian',
)

CASE_FAMILY_FIELDS = (
    text('name', required=True),
    text('age'),
    choice('relation', RELATIONS, required=True),
    choice('status', CIVIL_STATUSES),
    text('education'),
    text('occupation'),
    text('income'),
)


def _case_steps(second):
    suffix = '2' if second else ''
    part = 'Part 2: ' if second else ''
    party, party_title = ('VictimInfo2', 'Victim') if second else ('PerpetratorInfo', 'Perpetrator')
    return (
        SectionSpec(f'IdentifyingData{suffix}', f'{part}Identifying Data', fields=(
            date_field('intakeDate', required=True),
            text('name', required=True),
            text('referralSource'),
            text('alias'),
            text('age', required=True, min_length=1),
            choice('status', CIVIL_STATUSES),
            text('occupation'),
            text('income'),
            text('sex', required=True, min_length=1),
            text('address', required=True),
            text('caseType', required=True),
            text('religion'),
            text('educationalAttainment'),
            text('contactPerson'),
            date_field('birthday'),
            text('birthPlace'),
            text('respondentName'),
        )),
        SectionSpec(f'FamilyData{suffix}', f'{part}Family Composition',
                    list_field='members', item_fields=CASE_FAMILY_FIELDS),
        SectionSpec(party, f'{part}{party_title} Information', fields=(
            text('name', required=True),
            text('age'),
            text('alias'),
            text('sex'),
            text('address'),
            text('victimRelation'),
            text('offenceType'),
            date_field('commissionDateTime'),
        )),
        SectionSpec(f'PresentingProblem{suffix}', f'{part}Presenting Problem', fields=(
            narrative('presentingProblem'),
        )),
        SectionSpec(f'BackgroundInfo{suffix}', f'{part}Background Information', fields=(
            narrative('backgroundInfo'),
        )),
        SectionSpec(f'CommunityInfo{suffix}', f'{part}Community Information', fields=(
            narrative('communityInfo'),
        )),
        SectionSpec(f'Assessment{suffix}', f'{part}Assessment', fields=(
            narrative('assessment'),
        )),
        SectionSpec(f'Recommendation{suffix}', f'{part}Recommendation', fields=(
            narrative('recommendation'),
        )),
    )


CASE_WIZARD = WizardDefinition(
    name='case',
    title='Case Intake Sheet',
    case_type='case',
    steps=_case_steps(False) + _case_steps(True) + (CASE_DETAILS_SECTION,),
)


# ---------------------------------------------------------------------------
# Family Assistance Card
# ---------------------------------------------------------------------------

FAC_RELATIONS = RELATIONS[:-1] + ('uncle', 'aunt', 'nephew', 'niece', 'cousin', 'other')

FAC_WIZARD = WizardDefinition(
    name='fac',
    title='Family Assistance Card',
    case_type='fac',
    steps=(
        SectionSpec('locationOfAffectedFamily', 'Location of Affected Family', fields=(
            text('region', required=True),
            text('province', required=True),
            text('district'),
            text('cityMunicipality', required=True),
            text('barangay', required=True),
            text('evacuationCenter'),
        )),
        SectionSpec('headOfFamily', 'Head of Family', fields=(
            text('lastName', required=True),
            text('firstName', required=True),
            text('middleName'),
            text('nameExtension'),
            date_field('birthdate', required=True),
            number('age'),
            text('birthplace'),
            choice('sex', SEXES, required=True),
            choice('civilStatus', CIVIL_STATUSES + ('divorced',)),
            text('mothersMaidenName'),
            text('religion'),
            text('occupation'),
            number('monthlyIncome'),
            text('idCardPresented'),
            text('idCardNumber'),
            phone('contactNumber'),
            text('permanentAddress', required=True, min_length=5),
            phone('alternateContactNumber'),
            flag('fourPsBeneficiary'),
            flag('ipEthnicity'),
            text('ipEthnicityType'),
        )),
        SectionSpec('familyInformation', 'Family Information', list_field='members', item_fields=(
            text('familyMember', required=True),
            choice('relationToHead', FAC_RELATIONS, required=True),
            date_field('birthdate'),
            number('age'),
            choice('sex', SEXES),
            text('educationalAttainment'),
            text('occupation'),
            text('remarks'),
        )),
        SectionSpec('vulnerableMembers', 'Vulnerable Members', fields=(
            number('noOfOlderPersons'),
            number('noOfPregnantWomen'),
            number('noOfLactatingWomen'),
            number('noOfPWDs'),
        )),
        SectionSpec('finalDetails', 'Final Details', fields=(
            text('houseOwnership'),
            text('shelterDamage'),
            text('barangayCaptain'),
            date_field('dateRegistered', required=True),
            text('lswdoName'),
        )),
        CASE_DETAILS_SECTION,
    ),
)


# ---------------------------------------------------------------------------
# Incidence on Violence Against Children
# ---------------------------------------------------------------------------

IVAC_STATUSES = ('Active', 'Inactive')

IVAC_COUNT_FIELDS = (
    'vacVictims', 'genderMale', 'genderFemale',
    'age0to4', 'age5to9', 'age10to14', 'age15to17', 'age18Plus',
    'physicalAbuse', 'sexualAbuse', 'psychologicalAbuse', 'neglect', 'violenceOthers',
    'perpImmediateFamily', 'perpCloseRelative', 'perpAcquaintance', 'perpStranger',
    'perpLocalOfficial', 'perpLawOfficer', 'perpOthers',
    'actionLSWDO', 'actionPNP', 'actionNBI', 'actionMedical', 'actionLegal', 'actionOthers',
)

IVAC_WIZARD = WizardDefinition(
    name='ivac',
    title='Incidence on Violence Against Children',
    case_type='ivac',
    steps=(
        SectionSpec('incidenceOnVAC', 'Incidence on VAC', fields=(
            text('province', required=True, default='Misamis Oriental'),
            text('municipality', required=True, default='Villanueva'),
            tags('caseManagers'),
            choice('status', IVAC_STATUSES),
            text('reportingPeriod'),
            narrative('notes'),
        ), list_field='records', min_items=1, item_fields=(
            (text('barangay', required=True),) + tuple(number(name) for name in IVAC_COUNT_FIELDS)
        )),
    ),
)


WIZARDS: Dict[str, WizardDefinition] = {
    wizard.name: wizard
    for wizard in (CICLCAR_WIZARD, SC_WIZARD, FAR_WIZARD, FA_WIZARD, PWD_WIZARD, SP_WIZARD,
                   CASE_WIZARD, FAC_WIZARD, IVAC_WIZARD)
}


def wizard_for_case_type(case_type: str) -> WizardDefinition:
    for wizard in WIZARDS.values():
        if wizard.case_type == case_type:
            return wizard
    raise KeyError(case_type)
