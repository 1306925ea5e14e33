"""
Security hardening for the JSON API.

- CSRF tokens on every state-changing request (Flask-WTF)
- Per-endpoint rate limits (Flask-Limiter)
- Markup stripping on all incoming strings
- Response headers that keep will data out of caches and frames
"""

import re
from typing import Any

from flask import jsonify, request
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_wtf.csrf import CSRFError, CSRFProtect


csrf = CSRFProtect()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["500 per day", "100 per hour"]
)


# Applied only where the app config does not already set a value
SECURITY_CONFIG = {
    'WTF_CSRF_TIME_LIMIT': 3600,
    'WTF_CSRF_SSL_STRICT': True,
    'WTF_CSRF_HEADERS': ['X-CSRFToken', 'X-CSRF-Token'],
}

# Per-endpoint limits; AI drafting is billed per call
RATE_LIMITS = {
    'validate': "60 per minute",
    'content': "30 per minute",
    'pdf': "10 per minute",
    'generate': "10 per hour",
}

SECURITY_HEADERS = {
    'Content-Security-Policy': "default-src 'none'; frame-ancestors 'none'",
    'X-Content-Type-Options': 'nosniff',
    'X-Frame-Options': 'DENY',
    'Referrer-Policy': 'no-referrer',
    # Responses carry personal and estate data
    'Cache-Control': 'no-store',
}

MAX_STRING_LENGTH = 10000
MAX_PAYLOAD_DEPTH = 8


def add_security_headers(response):
    """after_request handler adding SECURITY_HEADERS."""
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


def init_security(app):
    """Initialize security extensions with the app."""
    for key, value in SECURITY_CONFIG.items():
        app.config.setdefault(key, value)

    csrf.init_app(app)
    limiter.init_app(app)

    @app.errorhandler(CSRFError)
    def csrf_error(error):
        app.logger.warning(f'CSRF rejected for {get_client_ip()}: {error.description}')
        return jsonify({
            'ok': False,
            'errors': [{'field': '', 'message': error.description, 'code': 'csrf_error'}]
        }), 400


SCRIPT_BLOCK = re.compile(r'<(script|style)\b[^>]*>.*?</\1\s*>', re.DOTALL | re.IGNORECASE)
MARKUP_TAG = re.compile(r'</?[a-zA-Z][^>]*>')
INLINE_HANDLER = re.compile(r'\bon[a-z]+\s*=', re.IGNORECASE)
# C0 controls other than tab and newline
CONTROL_CHARS = re.compile(r'[\x00-\x08\x0b-\x1f\x7f]')


def sanitize_string(value: Any, max_length: int = MAX_STRING_LENGTH) -> str:
    """
    Strip markup and control characters from a string.

    Arabic and other non-Latin text passes through unchanged. Non-string
    input is converted with str(); None becomes ''.
    """
    if value is None:
        return ''
    text = value if isinstance(value, str) else str(value)

    for pattern in (SCRIPT_BLOCK, INLINE_HANDLER, MARKUP_TAG, CONTROL_CHARS):
        text = pattern.sub('', text)

    return text[:max_length].strip()


def sanitize_payload(payload: Any, _depth: int = 0) -> Any:
    """
    Recursively sanitize the strings in a decoded JSON payload.

    Returns a new structure and leaves numbers, booleans and None as they
    are. Containers nested deeper than MAX_PAYLOAD_DEPTH are dropped.
    """
    if isinstance(payload, (dict, list)) and _depth >= MAX_PAYLOAD_DEPTH:
        return None
    if isinstance(payload, dict):
        return {str(k): sanitize_payload(v, _depth + 1) for k, v in payload.items()}
    if isinstance(payload, list):
        return [sanitize_payload(item, _depth + 1) for item in payload]
    if isinstance(payload, str):
        return sanitize_string(payload)
    return payload


def get_client_ip() -> str:
    """Client address for audit records, honouring proxy headers."""
    for header in ('X-Forwarded-For', 'X-Real-Ip'):
        value = request.headers.get(header)
        if value:
            return value.split(',')[0].strip()
    return request.remote_addr or 'unknown'
