"""
DIFC Will Validator

JSON API for checking UAE wills against the DIFC will templates and the DIFC
registration checklist, rendering template-based wills to text and PDF, and
drafting wills with an AI model.

Configuration comes from environment variables, then instance/config.py (or
the test_config mapping passed to create_app).
"""

import logging
import os
import uuid
from datetime import datetime

from flask import Flask, g, request
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def _env_config():
    return {
        'SECRET_KEY': os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production'),
        'SQLALCHEMY_DATABASE_URI': os.environ.get('DATABASE_URL', 'sqlite:///difc_wills.db'),
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'MAX_CONTENT_LENGTH': 1024 * 1024,
        'LOG_LEVEL': os.environ.get('LOG_LEVEL', 'INFO'),

        'WTF_CSRF_ENABLED': True,
        'WTF_CSRF_SSL_STRICT': os.environ.get('CSRF_SSL_STRICT', 'false').lower() == 'true',

        'RATELIMIT_STORAGE_URI': os.environ.get('REDIS_URL', 'memory://'),
        'RATELIMIT_STRATEGY': 'fixed-window',
        'RATELIMIT_HEADERS_ENABLED': True,

        'OPENAI_API_KEY': os.environ.get('OPENAI_API_KEY', ''),
        'OPENAI_MODEL': os.environ.get('OPENAI_MODEL', 'gpt-4o'),
        'AI_TEMPERATURE': float(os.environ.get('AI_TEMPERATURE', '0.3')),
    }


def create_app(test_config=None):
    """Application factory."""
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_mapping(_env_config())

    if test_config is None:
        app.config.from_pyfile('config.py', silent=True)
    else:
        app.config.from_mapping(test_config)

    os.makedirs(app.instance_path, exist_ok=True)
    app.logger.setLevel(getattr(logging, str(app.config['LOG_LEVEL']).upper(), logging.INFO))

    db.init_app(app)

    from difc_wills.security import add_security_headers, init_security
    init_security(app)

    from difc_wills.routes import api_bp
    app.register_blueprint(api_bp)

    @app.before_request
    def start_timer():
        g.request_id = request.headers.get('X-Request-Id') or uuid.uuid4().hex[:12]
        g.request_start_time = datetime.utcnow()

    @app.after_request
    def finish_request(response):
        response = add_security_headers(response)
        if 'request_id' in g:
            response.headers['X-Request-Id'] = g.request_id
            duration = (datetime.utcnow() - g.request_start_time).total_seconds()
            app.logger.info(
                f'[{g.request_id}] {request.method} {request.path} - {response.status_code} - {duration:.3f}s'
            )
        return response

    with app.app_context():
        from difc_wills import models  # noqa: F401
        db.create_all()

    _register_error_handlers(app)
    return app


def _register_error_handlers(app):
    def _error(message, status):
        return {'ok': False, 'error': message}, status

    @app.errorhandler(400)
    def bad_request(error):
        return _error('Bad request', 400)

    @app.errorhandler(404)
    def not_found(error):
        return _error('Not found', 404)

    @app.errorhandler(405)
    def method_not_allowed(error):
        return _error('Method not allowed', 405)

    @app.errorhandler(413)
    def payload_too_large(error):
        return _error('Payload too large', 413)

    @app.errorhandler(429)
    def rate_limited(error):
        app.logger.warning(f'Rate limit exceeded: {request.remote_addr} {request.path}')
        return _error('Rate limit exceeded. Please try again later.', 429)

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        app.logger.error(f'Internal error: {str(error)}')
        return _error('Internal server error', 500)
