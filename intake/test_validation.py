"""
Unit tests for validation module.
"""

import pytest
from intake.schemas import SectionSpec, OtherRule, text, choice, date_field, tags
from intake.validation import (
    ValidationResult, validate_section, validate_item,
    validate_string, validate_email, validate_phone, validate_date, validate_number, validate_list
)
from intake.wizards import CICLCAR_WIZARD, FAR_WIZARD


def _far_spec():
    return FAR_WIZARD.steps[0]


def _valid_far_values(**overrides):
    values = {
        'date': '2024-03-05',
        'receivingMember': 'Juan Dela Cruz',
        'emergency': 'medical',
        'emergencyOther': '',
        'assistance': 'cash',
        'assistanceOther': '',
        'unit': 'php',
        'quantity': '1',
        'cost': '1500',
        'provider': 'City Social Welfare',
    }
    values.update(overrides)
    return values


class TestValidationResult:
    def test_initially_valid(self):
        result = ValidationResult()
        assert result.is_valid is True
        assert len(result.errors) == 0

    def test_add_error(self):
        result = ValidationResult()
        result.add_error('field', 'message', 'code')
        assert result.is_valid is False
        assert len(result.errors) == 1
        assert result.errors[0].field == 'field'
        assert result.errors[0].message == 'message'
        assert result.errors[0].code == 'code'

    def test_to_dict(self):
        result = ValidationResult()
        result.add_error('field', 'message', 'code', 'section')
        d = result.to_dict()
        assert d['ok'] is False
        assert d['errors'] == [{'field': 'field', 'message': 'message', 'code': 'code', 'section': 'section'}]

    def test_field_messages_keep_first(self):
        result = ValidationResult()
        result.add_error('name', 'first')
        result.add_error('name', 'second')
        assert result.field_messages() == {'name': 'first'}


class TestFieldValidators:
    def test_required_string_min_length(self):
        result = ValidationResult()
        assert validate_string('A', 'name', result, min_length=2) is False
        assert result.errors[0].code == 'min_length'

    def test_optional_blank_string(self):
        result = ValidationResult()
        assert validate_string('  ', 'name', result, required=False) is False
        assert result.is_valid is True

    def test_html_rejected(self):
        result = ValidationResult()
        assert validate_string('<b>Ana</b>', 'name', result) is False
        assert result.errors[0].code == 'invalid_chars'

    def test_email(self):
        result = ValidationResult()
        assert validate_email('ana@example.org', 'email', result) is True
        assert validate_email('ana.example.org', 'email', result) is False

    def test_phone(self):
        result = ValidationResult()
        assert validate_phone('0917 123 4567', 'phone', result) is True
        assert validate_phone('call me', 'phone', result) is False

    def test_date(self):
        result = ValidationResult()
        assert validate_date('2024-03-05', 'date', result) is True
        assert validate_date('yesterday', 'date', result) is False
        assert result.errors[0].code == 'format'

    def test_number(self):
        result = ValidationResult()
        assert validate_number('1500.50', 'cost', result) is True
        assert validate_number(3, 'cost', result) is True
        assert validate_number('a lot', 'cost', result) is False

    def test_list_min_items(self):
        result = ValidationResult()
        assert validate_list([], 'members', result, required=False, min_items=1) is False
        assert result.errors[0].code == 'required'


class TestSectionValidation:
    def test_valid_far_section(self):
        result = validate_section(_far_spec(), _valid_far_values())
        assert result.is_valid, result.errors

    def test_missing_required_fields(self):
        result = validate_section(_far_spec(), {})
        fields = {e.field for e in result.errors}
        assert {'date', 'receivingMember', 'emergency', 'assistance', 'unit',
                'quantity', 'cost', 'provider'} <= fields
        assert all(e.section == 'familyAssistanceRecord' for e in result.errors)

    def test_invalid_choice(self):
        result = validate_section(_far_spec(), _valid_far_values(emergency='earthquake'))
        assert result.field_messages()['emergency'].startswith('Must be one of')

    def test_other_requires_override(self):
        result = validate_section(_far_spec(), _valid_far_values(emergency='other'))
        assert not result.is_valid
        assert 'emergencyOther' in result.field_messages()

    def test_other_override_too_short(self):
        result = validate_section(_far_spec(), _valid_far_values(assistance='other', assistanceOther='x'))
        assert 'assistanceOther' in result.field_messages()

    def test_other_with_override_passes(self):
        result = validate_section(_far_spec(), _valid_far_values(emergency='other', emergencyOther='Flood'))
        assert result.is_valid

    def test_override_ignored_when_not_other(self):
        result = validate_section(_far_spec(), _valid_far_values(emergencyOther=''))
        assert result.is_valid

    def test_sub_list_section_needs_entries(self):
        family = CICLCAR_WIZARD.steps[1]
        assert not validate_section(family, {'members': []}).is_valid
        assert validate_section(family, {'members': [{'name': 'Rosa', 'relationship': 'Mother'}]}).is_valid

    def test_custom_section(self):
        spec = SectionSpec('custom', 'Custom', fields=(
            text('name', required=True),
            choice('kind', ('a', 'other')),
            text('kindOther'),
            date_field('when'),
            tags('labels'),
        ), other_rules=(OtherRule('kind', 'kindOther'),))
        result = validate_section(spec, {'name': 'Ok', 'kind': 'a', 'when': '', 'labels': ['x']})
        assert result.is_valid


class TestItemValidation:
    def test_family_member_requires_name_and_relationship(self):
        family = CICLCAR_WIZARD.steps[1]
        result = validate_item(family, {'name': '', 'relationship': ''})
        assert set(result.field_messages()) == {'name', 'relationship'}

    @pytest.mark.parametrize('sex,valid', [('female', True), ('', True), ('unknown', False)])
    def test_family_member_sex(self, sex, valid):
        family = CICLCAR_WIZARD.steps[1]
        result = validate_item(family, {'name': 'Rosa', 'relationship': 'Mother', 'sex': sex})
        assert result.is_valid is valid
