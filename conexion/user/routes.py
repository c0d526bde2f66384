from flask import current_app, jsonify, request

from conexion.auth.decorators import current_user_id, login_required
from conexion.core.db import get_db
from conexion.utils import validate_form

from . import bp
from .forms import CompleteProfileForm, UpdateProfileForm
from .services import UserService


def _sent(field):
    return field.data if field.raw_data else None


@bp.route("/me", methods=["GET"])
@login_required
def my_profile():
    """Return the caller's profile with leader, service and courses."""
    return jsonify(UserService.get_my_profile(get_db(), current_user_id()))


@bp.route("/me/complete", methods=["POST"])
@login_required
def complete_profile():
    """Complete the caller's profile after sign-up."""
    form = validate_form(CompleteProfileForm())
    result = UserService.complete_profile(
        get_db(),
        current_user_id(),
        name=form.name.data.strip(),
        role=form.role.data,
        gender=form.gender.data,
        phone=form.phone.data or None,
        birthdate=form.birthdate.data,
    )
    current_app.logger.info(f"Profile completed for {current_user_id()}")
    return jsonify(result)


@bp.route("/me", methods=["PATCH"])
@login_required
def update_profile():
    """Patch the caller's profile."""
    form = validate_form(UpdateProfileForm())
    result = UserService.update_my_profile(
        get_db(),
        current_user_id(),
        name=_sent(form.name),
        gender=_sent(form.gender),
        phone=_sent(form.phone),
        birthdate=form.birthdate.data,
    )
    return jsonify(result)


@bp.route("/me/dashboard", methods=["GET"])
@login_required
def dashboard():
    """Return the caller with their groups and courses."""
    return jsonify(UserService.get_dashboard(get_db(), current_user_id()))


@bp.route("/by-email", methods=["GET"])
@login_required
def user_by_email():
    """Look a user up by exact email."""
    email = request.args.get("email", "")
    return jsonify(UserService.get_user_by_email(get_db(), current_user_id(), email))


@bp.route("/search", methods=["GET"])
@login_required
def search_users():
    """Search users by a fragment of their email."""
    term = request.args.get("q", "")
    results = UserService.search_users_by_email(
        get_db(),
        current_user_id(),
        term,
        limit=current_app.config["SEARCH_RESULTS_LIMIT"],
    )
    return jsonify(results)


@bp.route("/<string:leader_id>/disciples", methods=["GET"])
@login_required
def disciples_by_leader(leader_id):
    """List the disciples assigned to a leader."""
    return jsonify(
        UserService.get_disciples_by_leader(get_db(), current_user_id(), leader_id)
    )
