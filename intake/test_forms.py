"""
Section Form Tests

Step hydration, live edits, step submission, "other" substitution,
repeatable rows and wizard navigation.
"""

import pytest
from intake.forms import EDITING, PRISTINE, SectionForm, SubListEditor, WizardSession
from intake.section_store import SectionStore
from intake.wizards import CICLCAR_WIZARD, FAR_WIZARD, IVAC_WIZARD, SC_WIZARD


FAR_VALUES = {
    'date': '2024-03-05',
    'receivingMember': 'Juan Dela Cruz',
    'emergency': 'medical',
    'assistance': 'cash',
    'unit': 'php',
    'quantity': '1',
    'cost': '1500',
    'provider': 'City Social Welfare',
}

MEMBER = {'name': 'Rosa Cruz', 'relationship': 'Mother', 'age': '40', 'sex': 'female'}


@pytest.fixture
def far_session():
    return WizardSession('s1', FAR_WIZARD)


@pytest.fixture
def ciclcar_session():
    return WizardSession('s2', CICLCAR_WIZARD)


class TestSectionForm:
    def test_initial_values_default_to_empty(self, far_session):
        values = far_session.form('familyAssistanceRecord').initial_values()
        assert values['receivingMember'] == ''
        assert values['emergencyOther'] == ''
        assert set(values) >= set(FAR_VALUES)

    def test_initial_values_hydrate_from_store(self, far_session):
        far_session.store.write('familyAssistanceRecord', {'unit': 'pack'})
        assert far_session.form('familyAssistanceRecord').initial_values()['unit'] == 'pack'

    def test_list_and_flag_defaults(self):
        session = WizardSession('s3', SC_WIZARD)
        values = session.form('education').initial_values()
        assert values['educationalAttainment'] == []
        assert session.form('family').initial_values()['children'] == []

    def test_declared_defaults_prefill(self):
        session = WizardSession('s4', IVAC_WIZARD)
        values = session.form('incidenceOnVAC').initial_values()
        assert values['province'] == 'Misamis Oriental'
        assert values['municipality'] == 'Villanueva'
        assert values['caseManagers'] == []
        assert values['records'] == []

    def test_live_change_writes_single_field(self, far_session):
        form = far_session.form('familyAssistanceRecord')
        form.change('unit', 'pack')
        assert form.state == EDITING
        assert far_session.store.read('familyAssistanceRecord') == {'unit': 'pack'}

    def test_live_edits_survive_navigation(self, far_session):
        far_session.form('familyAssistanceRecord').change('provider', 'DSWD')
        far_session.go_to(1)
        far_session.back()
        assert far_session.form('familyAssistanceRecord').initial_values()['provider'] == 'DSWD'

    def test_submit_valid_merges(self, far_session):
        result = far_session.form('familyAssistanceRecord').submit(FAR_VALUES)
        assert result.ok
        stored = far_session.store.read('familyAssistanceRecord')
        assert stored['receivingMember'] == 'Juan Dela Cruz'
        assert far_session.form('familyAssistanceRecord').state == PRISTINE

    def test_submit_invalid_leaves_store_untouched(self, far_session):
        far_session.store.write('familyAssistanceRecord', {'unit': 'pack'})
        result = far_session.form('familyAssistanceRecord').submit({'receivingMember': 'J'})
        assert not result.ok
        assert 'receivingMember' in result.validation.field_messages()
        assert far_session.store.read('familyAssistanceRecord') == {'unit': 'pack'}

    def test_resubmitting_identical_values_is_noop(self, far_session):
        form = far_session.form('familyAssistanceRecord')
        form.submit(FAR_VALUES)
        before = far_session.store.export()
        form.submit(FAR_VALUES)
        assert far_session.store.export() == before

    def test_other_substitution_on_submit(self, far_session):
        values = dict(FAR_VALUES, emergency='other', emergencyOther='Flood')
        result = far_session.form('familyAssistanceRecord').submit(values)
        assert result.ok
        stored = far_session.store.read('familyAssistanceRecord')
        assert stored['emergency'] == 'Flood'
        assert stored['emergencyOther'] == 'Flood'

    def test_other_without_override_rejected(self, far_session):
        values = dict(FAR_VALUES, assistance='other', assistanceOther='')
        result = far_session.form('familyAssistanceRecord').submit(values)
        assert not result.ok
        assert 'assistanceOther' in result.validation.field_messages()

    def test_reopened_step_shows_other_again(self, far_session):
        form = far_session.form('familyAssistanceRecord')
        form.submit(dict(FAR_VALUES, emergency='other', emergencyOther='Flood'))
        values = form.initial_values()
        assert values['emergency'] == 'other'
        assert values['emergencyOther'] == 'Flood'
        assert form.submit(values).ok

    def test_standalone_form(self):
        store = SectionStore()
        form = SectionForm(store, FAR_WIZARD.steps[0])
        assert form.submit(FAR_VALUES).ok
        assert store.get('familyAssistanceRecord', 'provider') == 'City Social Welfare'


class TestSubListEditor:
    def test_requires_list_section(self):
        with pytest.raises(ValueError):
            SubListEditor(SectionStore(), FAR_WIZARD.steps[0])

    def test_add_edit_remove(self, ciclcar_session):
        editor = ciclcar_session.sub_list('familyBackground')
        assert not editor.can_advance

        assert editor.add(MEMBER).ok
        assert editor.add({'name': 'Pedro Cruz', 'relationship': 'Father'}).ok
        assert editor.can_advance
        assert [m['name'] for m in ciclcar_session.store.get('familyBackground', 'members')] == \
            ['Rosa Cruz', 'Pedro Cruz']

        assert editor.edit(1, {'name': 'Pedro Cruz', 'relationship': 'Stepfather'}).ok
        assert ciclcar_session.store.get('familyBackground', 'members')[1]['relationship'] == 'Stepfather'

        removed = editor.remove(0)
        assert removed['name'] == 'Rosa Cruz'
        assert [m['name'] for m in ciclcar_session.store.get('familyBackground', 'members')] == ['Pedro Cruz']

    def test_invalid_item_not_added(self, ciclcar_session):
        editor = ciclcar_session.sub_list('familyBackground')
        result = editor.add({'name': '', 'relationship': 'Mother'})
        assert not result.ok
        assert editor.items == []
        assert ciclcar_session.store.get('familyBackground', 'members') is None

    @pytest.mark.parametrize('index', [-1, 1, 5])
    def test_out_of_range_index(self, ciclcar_session, index):
        editor = ciclcar_session.sub_list('familyBackground')
        editor.add(MEMBER)
        with pytest.raises(IndexError):
            editor.edit(index, MEMBER)
        with pytest.raises(IndexError):
            editor.remove(index)

    def test_items_mirror_store(self, ciclcar_session):
        ciclcar_session.store.write('familyBackground', {'members': [MEMBER]})
        assert ciclcar_session.sub_list('familyBackground').items == [MEMBER]


class TestWizardNavigation:
    def test_submit_step_advances(self, far_session):
        result = far_session.submit_step('familyAssistanceRecord', FAR_VALUES)
        assert result.ok and result.advanced
        assert far_session.current_step.key == 'caseDetails'
        assert 0 in far_session.completed

    def test_invalid_step_does_not_advance(self, far_session):
        result = far_session.submit_step('familyAssistanceRecord', {})
        assert not result.ok
        assert far_session.current_index == 0

    def test_last_step_finishes(self, far_session):
        far_session.submit_step('familyAssistanceRecord', FAR_VALUES)
        result = far_session.submit_step('caseDetails', {'status': 'active'})
        assert result.ok
        assert result.finished
        assert not result.advanced
        assert far_session.is_last_step

    def test_sub_list_step_blocks_next_while_empty(self, ciclcar_session):
        ciclcar_session.go_to(1)
        assert not ciclcar_session.next()
        result = ciclcar_session.submit_step('familyBackground')
        assert not result.ok
        assert ciclcar_session.current_index == 1

        ciclcar_session.sub_list('familyBackground').add(MEMBER)
        result = ciclcar_session.submit_step('familyBackground')
        assert result.ok and result.advanced
        assert ciclcar_session.current_step.key == 'violationOfCICLCar'

    def test_sub_list_step_ignores_submitted_rows(self, ciclcar_session):
        ciclcar_session.go_to(1)
        ciclcar_session.sub_list('familyBackground').add({'name': 'Rosa', 'relationship': 'Mother'})

        result = ciclcar_session.submit_step('familyBackground', {'members': [{'sex': 'robot'}]})

        assert result.ok and result.advanced
        assert ciclcar_session.store.get('familyBackground', 'members') == [
            {'name': 'Rosa', 'relationship': 'Mother'}
        ]

    def test_sub_list_step_rechecks_stored_rows(self, ciclcar_session):
        ciclcar_session.go_to(1)
        ciclcar_session.store.write('familyBackground', {'members': [{'sex': 'robot'}, 'garbage']})

        result = ciclcar_session.submit_step('familyBackground')

        assert not result.ok
        assert 'members[0].name' in result.errors
        assert 'members[0].sex' in result.errors
        assert result.errors['members[1]'] == 'Must be an object'
        assert ciclcar_session.current_index == 1

    def test_step_fields_submit_beside_rows(self):
        session = WizardSession('s3', SC_WIZARD)
        result = session.submit_step('family', {'spouseName': 'Ana Cruz', 'children': ['garbage', 3]})
        assert result.ok
        assert session.store.read('family')['spouseName'] == 'Ana Cruz'
        assert session.store.get('family', 'children') == []

    def test_back_stops_at_first_step(self, far_session):
        assert far_session.back() == 0
        far_session.go_to(1)
        assert far_session.back() == 0

    def test_go_to_out_of_range(self, far_session):
        with pytest.raises(IndexError):
            far_session.go_to(10)

    def test_unknown_section(self, far_session):
        with pytest.raises(KeyError):
            far_session.form('nope')

    def test_reset(self, far_session):
        far_session.submit_step('familyAssistanceRecord', FAR_VALUES)
        far_session.reset()
        assert far_session.store.export() == {}
        assert far_session.current_index == 0
        assert far_session.completed == set()

    def test_ivac_needs_a_barangay_record(self):
        session = WizardSession('s5', IVAC_WIZARD)
        result = session.submit_step('incidenceOnVAC', {'status': 'Active'})
        assert not result.ok
        assert 'records' in result.errors

        session.sub_list('incidenceOnVAC').add({'barangay': 'Poblacion', 'vacVictims': '2'})
        result = session.submit_step('incidenceOnVAC', {'status': 'Active'})
        assert result.ok and result.finished
        assert session.store.read('incidenceOnVAC')['province'] == 'Misamis Oriental'
