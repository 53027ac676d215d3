"""
API Tests

Drive whole wizards through the JSON endpoints.
"""

from intake.models import AuditLog, CaseRecord


FAR_VALUES = {
    'date': '2024-03-05',
    'receivingMember': 'Juan Dela Cruz',
    'emergency': 'other',
    'emergencyOther': 'Flood damage',
    'assistance': 'cash',
    'unit': 'php',
    'quantity': '1',
    'cost': '1500',
    'provider': 'City Social Welfare',
}


def _start(client, wizard='far'):
    response = client.post(f'/api/wizards/{wizard}/sessions')
    assert response.status_code == 201
    return response.get_json()['session']['session_id']


class TestWizardListing:
    def test_list_wizards(self, client):
        data = client.get('/api/wizards').get_json()
        names = {w['name'] for w in data['wizards']}
        assert names == {
            'ciclcar', 'senior_citizen', 'far', 'fa', 'pwd', 'single_parent', 'case', 'fac', 'ivac',
        }

    def test_unknown_wizard(self, client):
        assert client.post('/api/wizards/nope/sessions').status_code == 404

    def test_security_headers(self, client):
        response = client.get('/api/wizards')
        assert response.headers['X-Content-Type-Options'] == 'nosniff'
        assert response.headers['X-Frame-Options'] == 'DENY'

    def test_csrf_token(self, client):
        assert client.get('/api/csrf-token').get_json()['csrf_token']


class TestSessionLifecycle:
    def test_start_and_get(self, client):
        session_id = _start(client)
        data = client.get(f'/api/sessions/{session_id}').get_json()
        assert data['session']['current_step'] == 'familyAssistanceRecord'
        assert data['session']['data'] == {}
        assert AuditLog.query.filter_by(action='session_started').count() == 1

    def test_unknown_session(self, client):
        response = client.get('/api/sessions/missing')
        assert response.status_code == 404
        assert response.get_json()['ok'] is False

    def test_cancel(self, client):
        session_id = _start(client)
        assert client.delete(f'/api/sessions/{session_id}').status_code == 200
        assert client.get(f'/api/sessions/{session_id}').status_code == 404


class TestSections:
    def test_initial_values(self, client):
        session_id = _start(client)
        data = client.get(f'/api/sessions/{session_id}/sections/familyAssistanceRecord').get_json()
        assert data['values']['receivingMember'] == ''
        assert data['section']['key'] == 'familyAssistanceRecord'

    def test_unknown_section(self, client):
        session_id = _start(client)
        assert client.get(f'/api/sessions/{session_id}/sections/nope').status_code == 404

    def test_live_update_single_field(self, client):
        session_id = _start(client)
        response = client.patch(f'/api/sessions/{session_id}/sections/familyAssistanceRecord',
                                json={'field': 'unit', 'value': 'pack'})
        assert response.get_json()['values'] == {'unit': 'pack'}

        response = client.patch(f'/api/sessions/{session_id}/sections/familyAssistanceRecord',
                                json={'values': {'provider': 'DSWD'}})
        assert response.get_json()['values'] == {'unit': 'pack', 'provider': 'DSWD'}

    def test_live_update_requires_field(self, client):
        session_id = _start(client)
        response = client.patch(f'/api/sessions/{session_id}/sections/familyAssistanceRecord', json={})
        assert response.status_code == 400

    def test_input_is_sanitized(self, client):
        session_id = _start(client)
        response = client.patch(f'/api/sessions/{session_id}/sections/familyAssistanceRecord',
                                json={'field': 'provider', 'value': '<script>x()</script>DSWD'})
        assert response.get_json()['values']['provider'] == 'DSWD'

    def test_invalid_step(self, client):
        session_id = _start(client)
        response = client.post(f'/api/sessions/{session_id}/sections/familyAssistanceRecord/submit',
                               json={'receivingMember': ''})
        assert response.status_code == 422
        data = response.get_json()
        assert data['ok'] is False
        assert any(e['field'] == 'receivingMember' for e in data['errors'])
        assert data['session']['current_index'] == 0

    def test_valid_step_advances(self, client):
        session_id = _start(client)
        response = client.post(f'/api/sessions/{session_id}/sections/familyAssistanceRecord/submit',
                               json=FAR_VALUES)
        assert response.status_code == 200
        data = response.get_json()
        assert data['advanced'] is True
        assert data['values']['emergency'] == 'Flood damage'
        assert data['session']['current_step'] == 'caseDetails'

        data = client.post(f'/api/sessions/{session_id}/back').get_json()
        assert data['session']['current_step'] == 'familyAssistanceRecord'


class TestSubList:
    def test_family_members(self, client):
        session_id = _start(client, 'ciclcar')
        base = f'/api/sessions/{session_id}/sections/familyBackground/items'

        response = client.post(base, json={'name': 'Rosa', 'relationship': 'Mother'})
        assert response.status_code == 201
        client.post(base, json={'name': 'Pedro', 'relationship': 'Father'})
        client.post(base, json={'name': 'Lito', 'relationship': 'Brother'})

        response = client.put(f'{base}/1', json={'name': 'Pedro', 'relationship': 'Stepfather'})
        assert [m['relationship'] for m in response.get_json()['items']] == ['Mother', 'Stepfather', 'Brother']

        response = client.delete(f'{base}/0')
        data = response.get_json()
        assert data['removed']['name'] == 'Rosa'
        assert [m['name'] for m in data['items']] == ['Pedro', 'Lito']

    def test_invalid_item(self, client):
        session_id = _start(client, 'ciclcar')
        response = client.post(f'/api/sessions/{session_id}/sections/familyBackground/items',
                               json={'name': ''})
        assert response.status_code == 422

    def test_step_submit_cannot_replace_rows(self, client):
        session_id = _start(client, 'ciclcar')
        base = f'/api/sessions/{session_id}/sections/familyBackground'
        client.post(f'{base}/items', json={'name': 'Rosa', 'relationship': 'Mother'})

        response = client.post(f'{base}/submit', json={'members': [{'sex': 'robot'}]})

        assert response.status_code == 200
        assert client.get(base).get_json()['items'] == [{'name': 'Rosa', 'relationship': 'Mother'}]

    def test_step_submit_rechecks_live_edited_rows(self, client):
        session_id = _start(client, 'ciclcar')
        base = f'/api/sessions/{session_id}/sections/familyBackground'
        client.patch(base, json={'values': {'members': [{'sex': 'robot'}]}})

        response = client.post(f'{base}/submit', json={})

        assert response.status_code == 422
        fields = [e['field'] for e in response.get_json()['errors']]
        assert 'members[0].name' in fields
        assert 'members[0].sex' in fields

    def test_bad_index(self, client):
        session_id = _start(client, 'ciclcar')
        response = client.delete(f'/api/sessions/{session_id}/sections/familyBackground/items/3')
        assert response.status_code == 404

    def test_not_a_list_section(self, client):
        session_id = _start(client, 'ciclcar')
        response = client.post(f'/api/sessions/{session_id}/sections/remarks/items', json={})
        assert response.status_code == 400


class TestFinalSubmission:
    def test_payload_preview(self, client):
        session_id = _start(client)
        client.post(f'/api/sessions/{session_id}/sections/familyAssistanceRecord/submit', json=FAR_VALUES)
        data = client.get(f'/api/sessions/{session_id}/payload').get_json()
        assert data['table'] == 'far_case'
        assert data['payload']['emergency'] == 'Flood damage'
        assert data['payload']['status'] is None

    def test_submit_creates_case(self, client):
        session_id = _start(client)
        client.post(f'/api/sessions/{session_id}/sections/familyAssistanceRecord/submit', json=FAR_VALUES)
        client.post(f'/api/sessions/{session_id}/sections/caseDetails/submit',
                    json={'caseManager': 'Ms. Reyes'})

        response = client.post(f'/api/sessions/{session_id}/submit')
        assert response.status_code == 201
        data = response.get_json()
        assert data['error'] is None
        record = CaseRecord.query.one()
        assert data['id'] == record.id
        assert record.case_manager == 'Ms. Reyes'
        assert record.status == 'active'

        session = client.get(f'/api/sessions/{session_id}').get_json()['session']
        assert session['data'] == {}

    def test_submit_failure_keeps_data(self, client):
        session_id = _start(client)
        client.patch(f'/api/sessions/{session_id}/sections/familyAssistanceRecord',
                     json={'field': 'unit', 'value': 'pack'})

        response = client.post(f'/api/sessions/{session_id}/submit')
        assert response.status_code == 422
        data = response.get_json()
        assert data['id'] is None
        assert 'provider is required' in data['error']['validation_errors']

        session = client.get(f'/api/sessions/{session_id}').get_json()['session']
        assert session['data'] == {'familyAssistanceRecord': {'unit': 'pack'}}

    def test_edit_existing_case(self, client):
        session_id = _start(client)
        client.post(f'/api/sessions/{session_id}/sections/familyAssistanceRecord/submit', json=FAR_VALUES)
        case_id = client.post(f'/api/sessions/{session_id}/submit').get_json()['id']

        response = client.post(f'/api/cases/far/{case_id}/sessions')
        assert response.status_code == 201
        session = response.get_json()['session']
        assert session['case_id'] == case_id
        assert session['data']['familyAssistanceRecord']['receivingMember'] == 'Juan Dela Cruz'

        edit_id = session['session_id']
        values = client.get(f'/api/sessions/{edit_id}/sections/familyAssistanceRecord').get_json()['values']
        assert values['emergency'] == 'other'
        assert values['emergencyOther'] == 'Flood damage'

        client.patch(f'/api/sessions/{edit_id}/sections/familyAssistanceRecord',
                     json={'field': 'provider', 'value': 'DSWD'})
        response = client.post(f'/api/sessions/{edit_id}/submit')
        assert response.status_code == 200
        assert response.get_json()['id'] == case_id
        assert CaseRecord.query.count() == 1

    def test_edit_unknown_case(self, client):
        assert client.post('/api/cases/far/missing/sessions').status_code == 404
        assert client.post('/api/cases/nope/x/sessions').status_code == 404
