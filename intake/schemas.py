"""
Declarative section definitions.

Each wizard step is described by a SectionSpec: the fields it owns, how
each is validated, the conditional "other" pairs, and for repeatable-row
sections the list field and the rules for one sub-record.
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple


# Field kinds
TEXT = 'text'
DATE = 'date'
EMAIL = 'email'
PHONE = 'phone'
CHOICE = 'choice'
FLAG = 'flag'
LIST = 'list'
NUMBER = 'number'
MAPPING = 'mapping'

MAX_TEXT_LENGTH = 500
MAX_NARRATIVE_LENGTH = 5000


@dataclass(frozen=True)
class FieldRule:
    """A single input of a section."""
    name: str
    kind: str = TEXT
    required: bool = False
    min_length: int = 0
    max_length: int = MAX_TEXT_LENGTH
    choices: Tuple[str, ...] = ()
    label: str = ''
    default: Any = None

    @property
    def display_label(self) -> str:
        return self.label or self.name

    def empty_value(self):
        """Initial value for a field that was never written."""
        if self.default is not None:
            return self.default
        if self.kind == LIST:
            return []
        if self.kind == FLAG:
            return False
        if self.kind == MAPPING:
            return {}
        return ''


@dataclass(frozen=True)
class OtherRule:
    """A select whose "other" option requires a free-text override."""
    select: str
    override: str
    min_length: int = 2
    message: str = 'Please specify'


@dataclass(frozen=True)
class SectionSpec:
    """
    One wizard step.

    For repeatable-row sections `list_field` names the list of sub-records,
    `item_fields` validates one sub-record and `min_items` is the number of
    rows needed before the wizard may advance.
    """
    key: str
    title: str
    fields: Tuple[FieldRule, ...] = ()
    other_rules: Tuple[OtherRule, ...] = ()
    list_field: Optional[str] = None
    item_fields: Tuple[FieldRule, ...] = ()
    min_items: int = 0

    @property
    def is_sub_list(self) -> bool:
        return self.list_field is not None

    @property
    def field_names(self) -> List[str]:
        names = [f.name for f in self.fields]
        if self.list_field and self.list_field not in names:
            names.append(self.list_field)
        return names

    def get_field(self, name: str) -> Optional[FieldRule]:
        for rule in self.fields:
            if rule.name == name:
                return rule
        return None

    def to_dict(self) -> dict:
        return {
            'key': self.key,
            'title': self.title,
            'fields': [
                {
                    'name': f.name,
                    'kind': f.kind,
                    'required': f.required,
                    'choices': list(f.choices),
                    'label': f.display_label,
                }
                for f in self.fields
            ],
            'list_field': self.list_field,
            'item_fields': [f.name for f in self.item_fields],
            'min_items': self.min_items,
        }


def text(name: str, required: bool = False, min_length: int = 0, **kwargs) -> FieldRule:
    if required and not min_length:
        min_length = 2
    return FieldRule(name, TEXT, required=required, min_length=min_length, **kwargs)


def narrative(name: str, required: bool = False, **kwargs) -> FieldRule:
    return FieldRule(name, TEXT, required=required, min_length=2 if required else 0,
                     max_length=MAX_NARRATIVE_LENGTH, **kwargs)


def date_field(name: str, required: bool = False, **kwargs) -> FieldRule:
    return FieldRule(name, DATE, required=required, **kwargs)


def choice(name: str, choices, required: bool = False, **kwargs) -> FieldRule:
    return FieldRule(name, CHOICE, required=required, choices=tuple(choices), **kwargs)


def tags(name: str, required: bool = False, **kwargs) -> FieldRule:
    return FieldRule(name, LIST, required=required, **kwargs)


def flag(name: str, **kwargs) -> FieldRule:
    return FieldRule(name, FLAG, **kwargs)


def phone(name: str, required: bool = False, **kwargs) -> FieldRule:
    return FieldRule(name, PHONE, required=required, **kwargs)


def email(name: str, required: bool = False, **kwargs) -> FieldRule:
    return FieldRule(name, EMAIL, required=required, **kwargs)


def number(name: str, required: bool = False, **kwargs) -> FieldRule:
    return FieldRule(name, NUMBER, required=required, **kwargs)


# Case management fields shared by every case type
CASE_STATUSES = ('active', 'pending', 'closed', 'archived')
CASE_PRIORITIES = ('low', 'normal', 'high', 'urgent')
CASE_VISIBILITIES = ('visible', 'hidden')

CASE_DETAIL_FIELDS = (
    text('caseManager'),
    choice('status', CASE_STATUSES),
    choice('priority', CASE_PRIORITIES),
    choice('visibility', CASE_VISIBILITIES),
)

CASE_DETAILS_SECTION = SectionSpec(
    key='caseDetails',
    title='Case Details',
    fields=CASE_DETAIL_FIELDS,
)
