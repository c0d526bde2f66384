"""Utility functions for the application."""

from __future__ import annotations

import datetime

from conexion.errors import ValidationError

_GENERIC_MESSAGES = {
    "This field is required.",
    "Not a valid integer value.",
    "Not a valid date value.",
    "Not a valid datetime value.",
    "Not a valid choice.",
}


def validate_form(form):
    """Validate a submitted form, raising its first field error.

    Raises:
        ValidationError: If any field fails validation.
    """
    if form.validate_on_submit():
        return form
    for field_name, messages in form.errors.items():
        if messages:
            message = messages[0]
            label = getattr(form, field_name, None)
            if label is not None and message in _GENERIC_MESSAGES:
                message = f"{label.label.text}: {message}"
            raise ValidationError(message)
    raise ValidationError("Solicitud inválida")


def optional_bool(field):
    """Return a BooleanField's value, or None if the client did not send it."""
    if not field.raw_data:
        return None
    return bool(field.data)


def as_utc(value):
    """Attach UTC to naive datetimes and lift plain dates to midnight UTC."""
    if value is None:
        return None
    if not isinstance(value, datetime.datetime):
        value = datetime.datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value.astimezone(datetime.timezone.utc)


def parse_datetime(value):
    """Parse an ISO date or datetime string to an aware UTC datetime.

    Raises:
        ValidationError: If the value is not ISO formatted.
    """
    if not value:
        return None
    try:
        return as_utc(datetime.datetime.fromisoformat(value))
    except ValueError as e:
        raise ValidationError(f"Fecha inválida: {value}") from e
