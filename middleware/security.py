# middleware/security.py
"""
Response header middleware
"""

from flask import after_this_request, current_app
from functools import wraps

CORS_ALLOW_METHODS = 'POST, OPTIONS'
CORS_ALLOW_HEADERS = 'Content-Type'


def security_headers(response):
    """Add security headers to all responses"""
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['Referrer-Policy'] = 'no-referrer'

    return response


def apply_cors_headers(response):
    """Set the configured CORS headers on a response"""
    response.headers['Access-Control-Allow-Origin'] = current_app.contact_config.cors_origin
    response.headers['Access-Control-Allow-Methods'] = CORS_ALLOW_METHODS
    response.headers['Access-Control-Allow-Headers'] = CORS_ALLOW_HEADERS
    return response


def cors_headers(f):
    """
    Decorator that sets the CORS headers on every response the view produces,
    including error responses and responses built by error handlers.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        after_this_request(apply_cors_headers)
        return f(*args, **kwargs)
    return decorated_function
