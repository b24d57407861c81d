"""Decorators for OutagePulse API routes."""

from typing import Callable
from functools import wraps

from flask import current_app, request, jsonify


def require_api_key(f: Callable) -> Callable:
    """Decorator to require API key authentication.

    The expected key is read from the runtime Config of the cycle runner
    attached to the current app.

    Args:
        f: Function to decorate

    Returns:
        Decorated function
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        api_key = request.headers.get('Authorization', '')

        if not api_key.startswith('Bearer '):
            return jsonify({
                'success': False,
                'error': {
                    'code': 'MISSING_AUTH',
                    'message': 'Missing Authorization header'
                }
            }), 401

        from ..api.routes import RUNNER_EXTENSION

        key = api_key[7:]
        expected_key = current_app.extensions[RUNNER_EXTENSION].config.api.api_key
        if not expected_key:
            return jsonify({
                'success': False,
                'error': {
                    'code': 'CONFIG_ERROR',
                    'message': 'API key not configured'
                }
            }), 500

        if key != expected_key:
            return jsonify({
                'success': False,
                'error': {
                    'code': 'INVALID_KEY',
                    'message': 'Invalid API key'
                }
            }), 403

        return f(*args, **kwargs)

    return decorated
