"""
Section forms and wizard navigation.

A SectionForm is the server-side counterpart of one wizard step: it hydrates
defaults from the Section Store, records live single-field edits, and on
step submission validates and bulk-merges the step's values. Repeatable-row
steps go through a SubListEditor which rewrites the whole list on every add,
edit or remove. Sub-records are addressed by position, so one writer at a
time is assumed.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from intake.schemas import SectionSpec
from intake.section_store import SectionStore
from intake.utils import OTHER_SENTINEL, is_blank, resolve_other
from intake.validation import ValidationResult, validate_section, validate_item


PRISTINE = 'pristine'
EDITING = 'editing'


@dataclass
class StepResult:
    """Outcome of submitting a step or a sub-record."""
    ok: bool
    values: Dict[str, Any] = field(default_factory=dict)
    validation: ValidationResult = field(default_factory=ValidationResult)
    advanced: bool = False
    finished: bool = False

    @property
    def errors(self) -> Dict[str, str]:
        """Inline message per field."""
        return self.validation.field_messages()

    def to_dict(self) -> Dict[str, Any]:
        data = self.validation.to_dict()
        data.update({
            'ok': self.ok,
            'values': self.values,
            'advanced': self.advanced,
            'finished': self.finished,
        })
        return data


class SectionForm:
    """One wizard step bound to its section of the store."""

    def __init__(self, store: SectionStore, spec: SectionSpec):
        self.store = store
        self.spec = spec
        self.state = PRISTINE

    @property
    def section(self) -> str:
        return self.spec.key

    def initial_values(self) -> Dict[str, Any]:
        """
        Default values for every declared field.

        Fields never written start as '' (or [] / False / {} for list,
        checkbox and nested fields) so inputs never start out undefined.
        """
        current = self.store.read(self.section)
        values = dict(current)
        for rule in self.spec.fields:
            if values.get(rule.name) is None:
                values[rule.name] = rule.empty_value()
        if self.spec.list_field and not isinstance(values.get(self.spec.list_field), list):
            values[self.spec.list_field] = []
        return self.unresolve(values)

    def unresolve(self, values: Dict[str, Any]) -> Dict[str, Any]:
        """
        Undo "other" substitution when a step is reopened.

        A stored free-text value in a select goes back to the override
        field and the select shows OTHER_SENTINEL again.
        """
        for other in self.spec.other_rules:
            rule = self.spec.get_field(other.select)
            selected = values.get(other.select)
            if rule is None or not rule.choices or is_blank(selected) or selected in rule.choices:
                continue
            if is_blank(values.get(other.override)):
                values[other.override] = selected
            values[other.select] = OTHER_SENTINEL
        return values

    def change(self, field_name: str, value: Any) -> None:
        """Live update of a single field."""
        self.store.set_field(self.section, field_name, value)
        self.state = EDITING

    def resolve(self, values: Dict[str, Any]) -> Dict[str, Any]:
        """Apply every "other" substitution of this section."""
        resolved = dict(values)
        for rule in self.spec.other_rules:
            if rule.select in resolved:
                resolved[rule.select] = resolve_other(resolved.get(rule.select),
                                                      resolved.get(rule.override))
        return resolved

    def submit(self, values: Optional[Dict[str, Any]] = None) -> StepResult:
        """
        Validate and merge the step.

        Args:
            values: Submitted values; fields not supplied fall back to what
                the store already holds.

        Returns:
            StepResult; on failure the store is left untouched
        """
        merged = self.initial_values()
        if values:
            merged.update(values)

        result = validate_section(self.spec, merged)
        if not result.is_valid:
            self.state = EDITING
            return StepResult(ok=False, values=merged, validation=result)

        final = self.resolve(merged)
        self.store.write(self.section, final)
        self.state = PRISTINE
        return StepResult(ok=True, values=final, validation=result)


class SubListEditor:
    """Add/edit/remove rows of a repeatable-row section by index."""

    def __init__(self, store: SectionStore, spec: SectionSpec):
        if not spec.is_sub_list:
            raise ValueError(f'Section {spec.key!r} has no list field')
        self.store = store
        self.spec = spec
        current = store.get(spec.key, spec.list_field)
        self.items: List[Dict[str, Any]] = current if isinstance(current, list) else []

    @property
    def can_advance(self) -> bool:
        return len(self.items) >= self.spec.min_items

    def _check_index(self, index: int) -> None:
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < len(self.items):
            raise IndexError(f'No {self.spec.list_field} entry at index {index!r}')

    def _save(self, items: List[Dict[str, Any]]) -> None:
        self.items = items
        self.store.write(self.spec.key, {self.spec.list_field: items})

    def add(self, values: Dict[str, Any]) -> StepResult:
        """Append a validated sub-record."""
        values = values if isinstance(values, dict) else {}
        result = validate_item(self.spec, values)
        if not result.is_valid:
            return StepResult(ok=False, values=values, validation=result)
        self._save(self.items + [dict(values)])
        return StepResult(ok=True, values=dict(values), validation=result)

    def edit(self, index: int, values: Dict[str, Any]) -> StepResult:
        """Replace the sub-record at index."""
        self._check_index(index)
        values = values if isinstance(values, dict) else {}
        result = validate_item(self.spec, values)
        if not result.is_valid:
            return StepResult(ok=False, values=values, validation=result)
        items = list(self.items)
        items[index] = dict(values)
        self._save(items)
        return StepResult(ok=True, values=dict(values), validation=result)

    def remove(self, index: int) -> Dict[str, Any]:
        """Drop the sub-record at index and return it."""
        self._check_index(index)
        removed = self.items[index]
        self._save([item for i, item in enumerate(self.items) if i != index])
        return removed


class WizardSession:
    """
    Navigation state and store for one wizard run.

    Each session owns its own SectionStore; nothing is shared between
    sessions.
    """

    def __init__(self, session_id: str, wizard, case_id: Optional[str] = None):
        self.id = session_id
        self.wizard = wizard
        self.case_id = case_id
        self.store = SectionStore(wizard.declared_fields())
        self.current_index = 0
        self.completed = set()
        self._forms: Dict[str, SectionForm] = {}

    def __repr__(self):
        return f'<WizardSession {self.id} {self.wizard.name} step {self.current_index}>'

    @property
    def steps(self) -> List[SectionSpec]:
        return list(self.wizard.steps)

    @property
    def current_step(self) -> SectionSpec:
        return self.wizard.steps[self.current_index]

    @property
    def is_last_step(self) -> bool:
        return self.current_index == len(self.wizard.steps) - 1

    def step(self, section: str) -> SectionSpec:
        for spec in self.wizard.steps:
            if spec.key == section:
                return spec
        raise KeyError(section)

    def form(self, section: str) -> SectionForm:
        spec = self.step(section)
        if section not in self._forms:
            self._forms[section] = SectionForm(self.store, spec)
        return self._forms[section]

    def sub_list(self, section: str) -> SubListEditor:
        return SubListEditor(self.store, self.step(section))

    def go_to(self, index: int) -> None:
        if not 0 <= index < len(self.wizard.steps):
            raise IndexError(f'No step at index {index}')
        self.current_index = index

    def back(self) -> int:
        if self.current_index > 0:
            self.current_index -= 1
        return self.current_index

    def next(self) -> bool:
        """
        Mark the current step complete and move forward.

        Returns True when the wizard moved to another step, False when the
        current step was the last one (the caller submits) or is a
        repeatable-row step that still needs entries.
        """
        spec = self.current_step
        if spec.is_sub_list and not self.sub_list(spec.key).can_advance:
            return False
        self.completed.add(self.current_index)
        if self.is_last_step:
            return False
        self.current_index += 1
        return True

    def submit_step(self, section: str, values: Optional[Dict[str, Any]] = None) -> StepResult:
        """
        Submit a step and advance when it is the current one.

        On repeatable-row steps the list itself is ignored here: rows only
        change through SubListEditor, and submitting re-validates the rows
        already stored along with the row count.
        """
        spec = self.step(section)
        if spec.is_sub_list and values:
            values = {name: value for name, value in values.items() if name != spec.list_field}
        step_result = self.form(section).submit(values)

        if not step_result.ok:
            return step_result

        if spec.key == self.current_step.key:
            was_last = self.is_last_step
            step_result.advanced = self.next()
            step_result.finished = was_last
        return step_result

    def reset(self) -> None:
        """Clear collected data and return to the first step."""
        self.store.reset()
        self.current_index = 0
        self.completed = set()
        self._forms = {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            'session_id': self.id,
            'wizard': self.wizard.name,
            'case_type': self.wizard.case_type,
            'case_id': self.case_id,
            'current_step': self.current_step.key,
            'current_index': self.current_index,
            'completed': sorted(self.completed),
            'steps': [spec.key for spec in self.wizard.steps],
            'data': self.store.export(),
        }
