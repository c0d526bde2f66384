"""The activity blueprint."""

from flask import Blueprint

bp = Blueprint("activity", __name__, url_prefix="/activities")

from . import routes  # noqa: E402

__all__ = ["routes"]
