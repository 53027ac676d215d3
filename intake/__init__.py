"""
Social Services Intake Application

Multi-step intake wizards for case records (CICL/CAR, Senior Citizen,
Family Assistance, Financial Assistance, PWD, Single Parent).

Enhanced with:
- CSRF protection
- Rate limiting
- Security headers
- Audit logging
"""

import os
from datetime import datetime
from flask import Flask, request, g
from flask_sqlalchemy import SQLAlchemy
from flask_wtf.csrf import CSRFError

# Initialize extensions
db = SQLAlchemy()


def create_app(test_config=None):
    """Application factory pattern."""
    app = Flask(__name__, instance_relative_config=True)

    app.config.from_mapping(
        SECRET_KEY=os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production'),
        SQLALCHEMY_DATABASE_URI=os.environ.get('DATABASE_URL', 'sqlite:///intake.db'),
        SQLALCHEMY_TRACK_MODIFICATIONS=False,

        # Idle wizard sessions are dropped after this many seconds
        INTAKE_SESSION_TTL=int(os.environ.get('INTAKE_SESSION_TTL', 3600)),

        # CSRF settings
        WTF_CSRF_ENABLED=True,
        WTF_CSRF_TIME_LIMIT=3600,  # 1 hour
        WTF_CSRF_SSL_STRICT=False,  # Disabled for development

        # Rate limiting settings
        RATELIMIT_STORAGE_URI=os.environ.get('RATELIMIT_STORAGE_URI',
                                             os.environ.get('REDIS_URL', 'memory://')),
        RATELIMIT_STRATEGY='fixed-window',
        RATELIMIT_HEADERS_ENABLED=True,
    )

    if test_config is None:
        # Load instance config if it exists
        app.config.from_pyfile('config.py', silent=True)
    else:
        app.config.from_mapping(test_config)

    # Ensure instance folder exists
    try:
        os.makedirs(app.instance_path)
    except OSError:
        pass

    db.init_app(app)

    # Imported after db init to avoid circular imports
    from intake.security import add_security_headers, init_security
    from intake.section_store import SessionRegistry
    init_security(app)

    app.extensions['intake_sessions'] = SessionRegistry(app.config['INTAKE_SESSION_TTL'])

    from intake.routes import api_bp
    app.register_blueprint(api_bp)

    @app.after_request
    def after_request(response):
        """Add security headers to all responses."""
        return add_security_headers(response)

    @app.before_request
    def before_request():
        """Log request start and drop abandoned wizard sessions."""
        g.request_start_time = datetime.utcnow()
        purged = app.extensions['intake_sessions'].purge_expired()
        if purged:
            app.logger.info(f'Purged {purged} expired wizard session(s)')

    @app.after_request
    def log_request(response):
        """Log request completion."""
        if hasattr(g, 'request_start_time'):
            duration = (datetime.utcnow() - g.request_start_time).total_seconds()
            app.logger.info(
                f'{request.method} {request.path} - {response.status_code} - {duration:.3f}s'
            )
        return response

    with app.app_context():
        from intake import models  # noqa: F401  (registers tables)
        db.create_all()

    @app.errorhandler(404)
    def not_found(error):
        return {'ok': False, 'errors': [{'field': '', 'message': 'Not found', 'code': 'not_found'}]}, 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return {'ok': False, 'errors': [{'field': '', 'message': 'Method not allowed',
                                         'code': 'method_not_allowed'}]}, 405

    @app.errorhandler(CSRFError)
    def csrf_error(error):
        app.logger.warning(f'CSRF failure on {request.path}: {error.description}')
        return {'ok': False, 'errors': [{'field': '', 'message': error.description,
                                         'code': 'csrf'}]}, 400

    @app.errorhandler(429)
    def rate_limited(error):
        return {'ok': False, 'errors': [{'field': '', 'message': 'Too many requests',
                                         'code': 'rate_limited'}]}, 429

    @app.errorhandler(500)
    def internal_error(error):
        """Handle internal errors."""
        db.session.rollback()
        app.logger.error(f'Internal error: {str(error)}')
        return {'ok': False, 'errors': [{'field': '', 'message': 'Internal server error',
                                         'code': 'internal_error'}]}, 500

    return app
