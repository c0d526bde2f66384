"""Decorators for the auth blueprint."""

from functools import wraps

from flask import g

from conexion.errors import AuthenticationError


def login_required(f=None):
    """Reject the request with 401 if no caller could be resolved.

    Usage:
    @login_required
    def protected_view():
        ...
    """

    def decorator(func):
        @wraps(func)
        def decorated_function(*args, **kwargs):
            if not g.get("user"):
                raise AuthenticationError()
            return func(*args, **kwargs)

        return decorated_function

    if f:
        return decorator(f)
    return decorator


def current_user_id():
    """Return the uid of the caller loaded for this request, if any."""
    user = g.get("user")
    return user["uid"] if user else None
