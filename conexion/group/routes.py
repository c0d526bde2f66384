"""Routes for the group blueprint."""

from flask import current_app, jsonify

from conexion.auth.decorators import current_user_id, login_required
from conexion.core.db import get_db
from conexion.errors import NotFoundError
from conexion.utils import validate_form

from . import bp
from .forms import GroupForm, JoinGroupForm, UpdateGroupForm
from .services import GroupService


@bp.route("/", methods=["POST"])
@login_required
def create_group():
    """Create a new group led by the caller."""
    form = validate_form(GroupForm())
    group_id = GroupService.create_group(
        get_db(),
        current_user_id(),
        name=form.name.data.strip(),
        address=form.address.data.strip(),
        district=form.district.data.strip(),
        day=form.day.data,
        time=form.time.data,
        min_age=form.minAge.data,
        max_age=form.maxAge.data,
        co_leader_id=form.coLeaderId.data or None,
    )
    return jsonify({"groupId": group_id}), 201


@bp.route("/join", methods=["POST"])
@login_required
def join_group():
    """Join a group with an invitation code."""
    form = validate_form(JoinGroupForm())
    result = GroupService.join_group(
        get_db(), current_user_id(), form.invitationCode.data
    )
    current_app.logger.info(f"User {current_user_id()} joined {result['groupId']}")
    return jsonify(result)


@bp.route("/leader", methods=["GET"])
@login_required
def groups_as_leader():
    """List the groups the caller leads."""
    return jsonify(GroupService.get_groups_as_leader(get_db(), current_user_id()))


@bp.route("/disciple", methods=["GET"])
@login_required
def group_as_disciple():
    """Return the group the caller belongs to as a disciple."""
    return jsonify(GroupService.get_group_as_disciple(get_db(), current_user_id()))


@bp.route("/code/<string:invitation_code>", methods=["GET"])
@login_required
def group_by_invitation_code(invitation_code):
    """Preview a group before joining it."""
    group = GroupService.get_group_by_invitation_code(get_db(), invitation_code)
    if group is None:
        raise NotFoundError("Código de invitación inválido")
    return jsonify(group)


@bp.route("/<string:group_id>", methods=["GET"])
@login_required
def view_group(group_id):
    """Display a single group with its members."""
    return jsonify(GroupService.get_group_by_id(get_db(), current_user_id(), group_id))


@bp.route("/<string:group_id>", methods=["PATCH"])
@login_required
def edit_group(group_id):
    """Edit a group's name or address."""
    form = validate_form(UpdateGroupForm())
    result = GroupService.update_group(
        get_db(),
        current_user_id(),
        group_id,
        name=form.name.data if form.name.raw_data else None,
        address=form.address.data if form.address.raw_data else None,
    )
    return jsonify(result)
