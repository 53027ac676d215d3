"""
Flask routes for the intake wizard API.

Every endpoint is JSON. Wizard sessions live in the app's SessionRegistry;
a stored case is only touched by final submission and by opening an edit
session.
"""

from datetime import date

from flask import Blueprint, request, jsonify, current_app
from flask_wtf.csrf import generate_csrf

from intake.audit_logger import log_case_loaded, log_session_event
from intake.forms import EDITING
from intake.gateway import SubmissionGateway, hydrate_session, load_case, submit_session
from intake.payloads import build_payload
from intake.security import limiter, rate_limit, sanitize_payload, get_client_ip
from intake.wizards import WIZARDS, wizard_for_case_type


api_bp = Blueprint('api', __name__, url_prefix='/api')


def _registry():
    return current_app.extensions['intake_sessions']


def _error(message, code, status):
    return jsonify({
        'ok': False,
        'errors': [{'field': '', 'message': message, 'code': code}]
    }), status


def _not_found(message):
    return _error(message, 'not_found', 404)


def _json_body():
    """Sanitized JSON body ({} when there is none)."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return {}
    return sanitize_payload(payload)


def _lookup(session_id):
    try:
        return _registry().get(session_id)
    except KeyError:
        return None


def _step_response(session, result):
    body = result.to_dict()
    body['session'] = session.to_dict()
    return jsonify(body), (200 if result.ok else 422)


@api_bp.route('/csrf-token', methods=['GET'])
@limiter.exempt
def api_csrf_token():
    """Hand out a CSRF token for the mutating endpoints."""
    return jsonify({'ok': True, 'csrf_token': generate_csrf()}), 200


@api_bp.route('/wizards', methods=['GET'])
@limiter.exempt
def api_wizards():
    """List the available wizards with their steps."""
    return jsonify({'ok': True, 'wizards': [w.to_dict() for w in WIZARDS.values()]}), 200


@api_bp.route('/wizards/<name>/sessions', methods=['POST'])
@rate_limit('session_start')
def api_start_session(name):
    """Start a new, empty wizard session."""
    wizard = WIZARDS.get(name)
    if wizard is None:
        return _not_found(f'Unknown wizard: {name}')

    session = _registry().create(wizard)
    current_app.logger.info(f'Started {name} session {session.id} for {get_client_ip()}')
    log_session_event(session.id, name, started=True)
    return jsonify({'ok': True, 'session': session.to_dict()}), 201


@api_bp.route('/cases/<case_type>/<case_id>/sessions', methods=['POST'])
@rate_limit('session_start')
def api_edit_session(case_type, case_id):
    """Start a session pre-populated from a stored case."""
    try:
        wizard = wizard_for_case_type(case_type)
    except KeyError:
        return _not_found(f'Unknown case type: {case_type}')

    row = load_case(case_type, case_id)
    if row is None:
        return _not_found(f'Case not found: {case_id}')

    session = _registry().create(wizard)
    session.case_id = case_id
    hydrate_session(session, row)
    log_case_loaded(case_id, session.id)
    return jsonify({'ok': True, 'session': session.to_dict()}), 201


@api_bp.route('/sessions/<session_id>', methods=['GET'])
def api_get_session(session_id):
    session = _lookup(session_id)
    if session is None:
        return _not_found('Session not found or expired')
    return jsonify({'ok': True, 'session': session.to_dict()}), 200


@api_bp.route('/sessions/<session_id>', methods=['DELETE'])
def api_cancel_session(session_id):
    session = _lookup(session_id)
    if session is None:
        return _not_found('Session not found or expired')
    _registry().discard(session_id)
    log_session_event(session_id, session.wizard.name, started=False)
    return jsonify({'ok': True}), 200


@api_bp.route('/sessions/<session_id>/sections/<section>', methods=['GET'])
def api_get_section(session_id, section):
    """Initial values of a step (what the form mounts with)."""
    session = _lookup(session_id)
    if session is None:
        return _not_found('Session not found or expired')
    try:
        form = session.form(section)
    except KeyError:
        return _not_found(f'Unknown section: {section}')

    body = {'ok': True, 'section': form.spec.to_dict(), 'values': form.initial_values()}
    if form.spec.is_sub_list:
        editor = session.sub_list(section)
        body['items'] = editor.items
        body['can_advance'] = editor.can_advance
    return jsonify(body), 200


@api_bp.route('/sessions/<session_id>/sections/<section>', methods=['PATCH'])
@rate_limit('field_update')
def api_update_section(session_id, section):
    """
    Live update.

    Accepts {"field": name, "value": v} for a single field or
    {"values": {...}} for several at once; nothing is validated here.
    """
    session = _lookup(session_id)
    if session is None:
        return _not_found('Session not found or expired')
    try:
        form = session.form(section)
    except KeyError:
        return _not_found(f'Unknown section: {section}')

    body = _json_body()
    if isinstance(body.get('values'), dict):
        session.store.write_field_or_values(section, body['values'])
        form.state = EDITING
    elif isinstance(body.get('field'), str):
        form.change(body['field'], body.get('value'))
    else:
        return _error('Expected "field" and "value", or "values"', 'missing_payload', 400)

    return jsonify({'ok': True, 'values': session.store.read(section)}), 200


@api_bp.route('/sessions/<session_id>/sections/<section>/submit', methods=['POST'])
@rate_limit('step_submit')
def api_submit_step(session_id, section):
    """Validate and merge a step, advancing when it is the current one."""
    session = _lookup(session_id)
    if session is None:
        return _not_found('Session not found or expired')
    try:
        result = session.submit_step(section, _json_body())
    except KeyError:
        return _not_found(f'Unknown section: {section}')
    return _step_response(session, result)


@api_bp.route('/sessions/<session_id>/sections/<section>/items', methods=['POST'])
@rate_limit('step_submit')
def api_add_item(session_id, section):
    session = _lookup(session_id)
    if session is None:
        return _not_found('Session not found or expired')
    try:
        editor = session.sub_list(section)
    except KeyError:
        return _not_found(f'Unknown section: {section}')
    except ValueError as e:
        return _error(str(e), 'not_a_list', 400)

    result = editor.add(_json_body())
    body = result.to_dict()
    body.update({'items': editor.items, 'can_advance': editor.can_advance})
    return jsonify(body), (201 if result.ok else 422)


@api_bp.route('/sessions/<session_id>/sections/<section>/items/<int:index>', methods=['PUT'])
@rate_limit('step_submit')
def api_edit_item(session_id, section, index):
    session = _lookup(session_id)
    if session is None:
        return _not_found('Session not found or expired')
    try:
        editor = session.sub_list(section)
        result = editor.edit(index, _json_body())
    except KeyError:
        return _not_found(f'Unknown section: {section}')
    except IndexError as e:
        return _not_found(str(e))
    except ValueError as e:
        return _error(str(e), 'not_a_list', 400)

    body = result.to_dict()
    body.update({'items': editor.items, 'can_advance': editor.can_advance})
    return jsonify(body), (200 if result.ok else 422)


@api_bp.route('/sessions/<session_id>/sections/<section>/items/<int:index>', methods=['DELETE'])
@rate_limit('step_submit')
def api_remove_item(session_id, section, index):
    session = _lookup(session_id)
    if session is None:
        return _not_found('Session not found or expired')
    try:
        editor = session.sub_list(section)
        removed = editor.remove(index)
    except KeyError:
        return _not_found(f'Unknown section: {section}')
    except IndexError as e:
        return _not_found(str(e))
    except ValueError as e:
        return _error(str(e), 'not_a_list', 400)

    return jsonify({
        'ok': True,
        'removed': removed,
        'items': editor.items,
        'can_advance': editor.can_advance
    }), 200


@api_bp.route('/sessions/<session_id>/back', methods=['POST'])
def api_back(session_id):
    session = _lookup(session_id)
    if session is None:
        return _not_found('Session not found or expired')
    session.back()
    return jsonify({'ok': True, 'session': session.to_dict()}), 200


@api_bp.route('/sessions/<session_id>/payload', methods=['GET'])
def api_preview_payload(session_id):
    """The record final submission would send, without sending it."""
    session = _lookup(session_id)
    if session is None:
        return _not_found('Session not found or expired')
    payload = build_payload(session.wizard.schema, session.store.export(), as_of=date.today())
    return jsonify({'ok': True, 'table': session.wizard.schema.table, 'payload': payload}), 200


@api_bp.route('/sessions/<session_id>/submit', methods=['POST'])
@rate_limit('final_submit')
def api_submit_session(session_id):
    """
    Final submission.

    On success the session's store is cleared; on failure it is kept so
    the user can fix the problem and resubmit.
    """
    session = _lookup(session_id)
    if session is None:
        return _not_found('Session not found or expired')

    body = _json_body()
    case_id = body.get('case_id') or session.case_id
    created = not case_id

    result = submit_session(session, SubmissionGateway(), case_id=case_id)
    response = result.to_dict()
    response['ok'] = result.ok
    if not result.ok:
        current_app.logger.error(
            f'Submission failed for session {session_id}: {result.error.message}'
        )
        return jsonify(response), 422

    return jsonify(response), (201 if created else 200)

