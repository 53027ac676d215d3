"""
Per-step validation for intake wizard sections.

Validation Rules Documentation:
===============================

1. REQUIRED TEXT
   - Required text fields need at least their min_length (2 by default)
     non-whitespace characters, max 500 chars (5000 for narratives)
   - HTML tags are never allowed

2. DATES
   - Required date fields must parse as a calendar date
   - Optional date fields are validated only when provided

3. CHOICES
   - Must be one of the declared options

4. CONTACT DETAILS
   - Phone: 7-20 chars, digits/spaces/hyphens/parens/plus only
   - Email: standard address format

5. CONDITIONAL "OTHER" FIELDS
   - When the controlling select is "other", the paired free-text field is
     required with at least 2 characters

6. REPEATABLE ROWS
   - Each sub-record is validated against the section's item rules before
     it is added or replaced
   - Sections with min_items cannot be advanced while the list is shorter
   - Submitting the step re-checks every stored row

Field errors never leave the section form: they are returned to the
caller to be shown inline and the store is not touched.
"""

import re
from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field

from intake.schemas import (
    FieldRule, SectionSpec, TEXT, DATE, EMAIL, PHONE, CHOICE, FLAG, LIST, NUMBER, MAPPING
)
from intake.utils import normalize_date, OTHER_SENTINEL


@dataclass
class ValidationError:
    """Represents a single validation error with precise field path."""
    field: str
    message: str
    code: str
    section: str = ''  # For grouping errors by section


@dataclass
class ValidationResult:
    """Container for validation results."""
    errors: List[ValidationError] = field(default_factory=list)
    is_valid: bool = True

    def add_error(self, field: str, message: str, code: str = 'invalid', section: str = ''):
        """Add a validation error."""
        self.errors.append(ValidationError(field, message, code, section))
        self.is_valid = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON response."""
        return {
            'ok': self.is_valid,
            'errors': [
                {'field': e.field, 'message': e.message, 'code': e.code, 'section': e.section}
                for e in self.errors
            ]
        }

    def field_messages(self) -> Dict[str, str]:
        """First message per field, for inline display."""
        messages = {}
        for error in self.errors:
            messages.setdefault(error.field, error.message)
        return messages


# Regex patterns
EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')
PHONE_PATTERN = re.compile(r'^[0-9\s\-+()]{7,20}$')
HTML_TAG_PATTERN = re.compile(r'<[^>]+>')
NUMBER_PATTERN = re.compile(r'^-?\d+(\.\d+)?$')


def coerce_to_bool(value: Any) -> Optional[bool]:
    """Coerce various inputs to boolean."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.lower() in ('true', '1', 'yes', 'on')
    if isinstance(value, int):
        return value == 1
    return None


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == '')


def validate_boolean(value: Any, field_name: str, result: ValidationResult,
                     required: bool = True, section: str = '') -> bool:
    """Validate a boolean field with strict type checking."""
    if value is None or value == '':
        if required:
            result.add_error(field_name, 'This field is required', 'required', section)
        return False

    if coerce_to_bool(value) is None:
        result.add_error(field_name, 'Must be true or false', 'type', section)
        return False

    return True


def validate_string(value: Any, field_name: str, result: ValidationResult,
                    required: bool = True, min_length: int = 0, max_length: int = 500,
                    allow_html: bool = False, section: str = '') -> bool:
    """Validate a string field."""
    if _is_missing(value):
        if required:
            result.add_error(field_name, 'This field is required', 'required', section)
        return False

    str_value = str(value).strip()

    if len(str_value) < min_length:
        result.add_error(field_name, f'Minimum {min_length} characters required', 'min_length', section)
        return False

    if len(str_value) > max_length:
        result.add_error(field_name, f'Maximum {max_length} characters allowed', 'max_length', section)
        return False

    if not allow_html and HTML_TAG_PATTERN.search(str_value):
        result.add_error(field_name, 'HTML tags are not allowed', 'invalid_chars', section)
        return False

    return True


def validate_email(value: Any, field_name: str, result: ValidationResult,
                   required: bool = True, section: str = '') -> bool:
    """Validate an email address."""
    if _is_missing(value):
        if required:
            result.add_error(field_name, 'This field is required', 'required', section)
        return False

    str_value = str(value).strip()

    if len(str_value) > 254:
        result.add_error(field_name, 'Email address is too long', 'max_length', section)
        return False

    if not EMAIL_PATTERN.match(str_value):
        result.add_error(field_name, 'Please enter a valid email address', 'format', section)
        return False

    return True


def validate_phone(value: Any, field_name: str, result: ValidationResult,
                   required: bool = True, section: str = '') -> bool:
    """Validate a phone number."""
    if _is_missing(value):
        if required:
            result.add_error(field_name, 'This field is required', 'required', section)
        return False

    if not PHONE_PATTERN.match(str(value).strip()):
        result.add_error(field_name, 'Please enter a valid phone number', 'format', section)
        return False

    return True


def validate_date(value: Any, field_name: str, result: ValidationResult,
                  required: bool = True, section: str = '') -> bool:
    """Validate a date field (anything normalize_date understands)."""
    if _is_missing(value):
        if required:
            result.add_error(field_name, 'This field is required', 'required', section)
        return False

    if normalize_date(value) is None:
        result.add_error(field_name, 'Please enter a valid date (YYYY-MM-DD)', 'format', section)
        return False

    return True


def validate_enum(value: Any, field_name: str, allowed: List[str],
                  result: ValidationResult, required: bool = True, section: str = '') -> bool:
    """Validate an enum field with strict matching."""
    if _is_missing(value):
        if required:
            result.add_error(field_name, 'This field is required', 'required', section)
        return False

    if str(value).strip() not in allowed:
        result.add_error(field_name, f'Must be one of: {", ".join(allowed)}', 'enum', section)
        return False

    return True


def validate_number(value: Any, field_name: str, result: ValidationResult,
                    required: bool = True, section: str = '') -> bool:
    """Validate a numeric field given as a number or numeric string."""
    if _is_missing(value):
        if required:
            result.add_error(field_name, 'This field is required', 'required', section)
        return False

    if isinstance(value, bool) or not NUMBER_PATTERN.match(str(value).strip()):
        result.add_error(field_name, 'Must be a valid number', 'type', section)
        return False

    return True


def validate_list(value: Any, field_name: str, result: ValidationResult,
                  required: bool = True, min_items: int = 0, section: str = '') -> bool:
    """Validate a list field (tags or sub-records)."""
    if value is None or value == '':
        value = []

    if not isinstance(value, list):
        result.add_error(field_name, 'Must be a list', 'type', section)
        return False

    needed = max(min_items, 1 if required else 0)
    if len(value) < needed:
        if needed == 1:
            result.add_error(field_name, 'At least one entry is required', 'required', section)
        else:
            result.add_error(field_name, f'At least {needed} entries are required', 'min_items', section)
        return False

    return True


def validate_field(rule: FieldRule, value: Any, result: ValidationResult, section: str = '') -> bool:
    """Dispatch one field rule to its validator."""
    if rule.kind == TEXT:
        return validate_string(value, rule.name, result, required=rule.required,
                               min_length=rule.min_length, max_length=rule.max_length,
                               section=section)
    if rule.kind == DATE:
        return validate_date(value, rule.name, result, required=rule.required, section=section)
    if rule.kind == EMAIL:
        return validate_email(value, rule.name, result, required=rule.required, section=section)
    if rule.kind == PHONE:
        return validate_phone(value, rule.name, result, required=rule.required, section=section)
    if rule.kind == CHOICE:
        return validate_enum(value, rule.name, list(rule.choices), result,
                             required=rule.required, section=section)
    if rule.kind == FLAG:
        return validate_boolean(value, rule.name, result, required=rule.required, section=section)
    if rule.kind == NUMBER:
        return validate_number(value, rule.name, result, required=rule.required, section=section)
    if rule.kind == LIST:
        return validate_list(value, rule.name, result, required=rule.required, section=section)
    if rule.kind == MAPPING:
        if value in (None, '') or isinstance(value, dict):
            return True
        result.add_error(rule.name, 'Must be an object', 'type', section)
        return False

    raise ValueError(f'Unknown field kind: {rule.kind}')


def validate_section(spec: SectionSpec, values: Dict[str, Any]) -> ValidationResult:
    """
    Validate one step's values against its section definition.

    Args:
        spec: The section definition
        values: Field values as submitted by the step

    Returns:
        ValidationResult with field-level errors
    """
    result = ValidationResult()
    values = values or {}

    for rule in spec.fields:
        validate_field(rule, values.get(rule.name), result, section=spec.key)

    for other in spec.other_rules:
        if values.get(other.select) == OTHER_SENTINEL:
            override = values.get(other.override)
            if _is_missing(override) or len(str(override).strip()) < other.min_length:
                result.add_error(other.override, other.message, 'required', spec.key)

    if spec.is_sub_list:
        items = values.get(spec.list_field)
        if spec.min_items:
            validate_list(items, spec.list_field, result, min_items=spec.min_items, section=spec.key)
        if isinstance(items, list):
            validate_rows(spec, items, result)

    return result


def validate_rows(spec: SectionSpec, items: List[Any], result: ValidationResult) -> None:
    """Check every stored sub-record; errors are reported as members[1].name."""
    for index, item in enumerate(items):
        path = f'{spec.list_field}[{index}]'
        if not isinstance(item, dict):
            result.add_error(path, 'Must be an object', 'type', spec.key)
            continue
        for error in validate_item(spec, item).errors:
            result.add_error(f'{path}.{error.field}', error.message, error.code, spec.key)


def validate_item(spec: SectionSpec, values: Dict[str, Any]) -> ValidationResult:
    """Validate one sub-record of a repeatable-row section."""
    result = ValidationResult()
    values = values if isinstance(values, dict) else {}
    for rule in spec.item_fields:
        validate_field(rule, values.get(rule.name), result, section=spec.key)
    return result
