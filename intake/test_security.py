"""
Security Tests

Tests for security features:
- Input sanitization
- CSRF protection
- Rate limit configuration
- Security headers
"""

import unittest

from intake import create_app
from intake.security import RATE_LIMITS, sanitize_string, sanitize_payload


class TestInputSanitization(unittest.TestCase):
    """Test input sanitization functions."""

    def test_sanitize_string_removes_dangerous_chars(self):
        dangerous = '<script>alert("xss")</script>'
        sanitized = sanitize_string(dangerous)
        self.assertNotIn('<', sanitized)
        self.assertNotIn('>', sanitized)

    def test_sanitize_string_removes_event_handlers(self):
        sanitized = sanitize_string('<img src=x onerror=alert(1)>Ana')
        self.assertEqual(sanitized, 'Ana')

    def test_sanitize_string_preserves_safe_text(self):
        safe = "Juan Dela Cruz-O'Brien"
        self.assertEqual(sanitize_string(safe), safe)

    def test_sanitize_string_handles_unicode(self):
        unicode_text = 'Niño Peñaflorida'
        self.assertEqual(sanitize_string(unicode_text), unicode_text)

    def test_sanitize_string_trims_whitespace(self):
        self.assertEqual(sanitize_string('  Juan  '), 'Juan')

    def test_sanitize_string_empty_input(self):
        self.assertEqual(sanitize_string(''), '')
        self.assertEqual(sanitize_string(None), '')

    def test_sanitize_payload_nested(self):
        payload = {
            'values': {
                'name': '<script>alert(1)</script>Rosa',
                'address': '123 <b>Rizal</b> Street',
            },
            'members': [
                {'name': '<img src=x onerror=alert(1)>'},
                'safe string'
            ]
        }

        sanitized = sanitize_payload(payload)

        self.assertEqual(sanitized['values']['name'], 'Rosa')
        self.assertEqual(sanitized['values']['address'], '123 Rizal Street')
        self.assertNotIn('<', sanitized['members'][0]['name'])
        self.assertEqual(sanitized['members'][1], 'safe string')

    def test_sanitize_payload_preserves_types(self):
        payload = {
            'string': 'test',
            'integer': 42,
            'float': 3.14,
            'boolean': True,
            'null': None,
            'list': [1, 2, 3]
        }

        sanitized = sanitize_payload(payload)

        self.assertEqual(sanitized, payload)

    def test_sanitize_very_long_string(self):
        self.assertEqual(len(sanitize_string('A' * 20000)), 10000)


class TestCSRFProtection(unittest.TestCase):
    """Mutating endpoints require a CSRF token when protection is on."""

    def setUp(self):
        self.app = create_app({
            'TESTING': True,
            'SECRET_KEY': 'test',
            'SQLALCHEMY_DATABASE_URI': 'sqlite://',
            'WTF_CSRF_ENABLED': True,
            'RATELIMIT_ENABLED': False,
        })
        self.client = self.app.test_client()

    def test_post_without_token_rejected(self):
        response = self.client.post('/api/wizards/far/sessions')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['errors'][0]['code'], 'csrf')

    def test_post_with_token_accepted(self):
        token = self.client.get('/api/csrf-token').get_json()['csrf_token']
        response = self.client.post('/api/wizards/far/sessions', headers={'X-CSRFToken': token})
        self.assertEqual(response.status_code, 201)

    def test_reads_need_no_token(self):
        self.assertEqual(self.client.get('/api/wizards').status_code, 200)


class TestSecurityConfiguration(unittest.TestCase):

    def test_rate_limits_defined_for_mutating_endpoints(self):
        for name in ('session_start', 'field_update', 'step_submit', 'final_submit'):
            self.assertIn('per minute', RATE_LIMITS[name])

    def test_security_headers_on_errors(self):
        app = create_app({
            'TESTING': True,
            'SQLALCHEMY_DATABASE_URI': 'sqlite://',
            'WTF_CSRF_ENABLED': False,
            'RATELIMIT_ENABLED': False,
        })
        response = app.test_client().get('/api/sessions/missing')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.headers['Cache-Control'], 'no-store')
        self.assertEqual(response.headers['X-Frame-Options'], 'DENY')


if __name__ == '__main__':
    unittest.main()
