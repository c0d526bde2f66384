from flask import jsonify

from conexion.auth.decorators import current_user_id, login_required
from conexion.core.db import get_db
from conexion.utils import parse_datetime, validate_form

from . import bp
from .forms import ActivityForm, RespondForm, UpdateActivityForm
from .services import ActivityService


@bp.route("/group/<string:group_id>", methods=["GET"])
@login_required
def activities_by_group(group_id):
    """List a group's activities."""
    return jsonify(
        ActivityService.get_activities_by_group(get_db(), current_user_id(), group_id)
    )


@bp.route("/", methods=["POST"])
@login_required
def create_activity():
    """Create an activity in a group the caller leads."""
    form = validate_form(ActivityForm())
    activity_id = ActivityService.create_activity(
        get_db(),
        current_user_id(),
        group_id=form.groupId.data,
        name=form.name.data,
        address=form.address.data,
        date_time=parse_datetime(form.dateTime.data),
        description=form.description.data,
    )
    return jsonify({"activityId": activity_id}), 201


@bp.route("/<string:activity_id>", methods=["GET"])
@login_required
def view_activity(activity_id):
    """Show an activity with the responses of the group's members."""
    return jsonify(
        ActivityService.get_activity_with_responses(
            get_db(), current_user_id(), activity_id
        )
    )


@bp.route("/<string:activity_id>", methods=["PATCH"])
@login_required
def edit_activity(activity_id):
    """Edit an activity the caller created."""
    form = validate_form(UpdateActivityForm())
    result = ActivityService.update_activity(
        get_db(),
        current_user_id(),
        activity_id,
        name=form.name.data if form.name.raw_data else None,
        address=form.address.data if form.address.raw_data else None,
        date_time=parse_datetime(form.dateTime.data),
        description=form.description.data if form.description.raw_data else None,
    )
    return jsonify(result)


@bp.route("/<string:activity_id>", methods=["DELETE"])
@login_required
def delete_activity(activity_id):
    """Delete an activity the caller created."""
    return jsonify(
        ActivityService.delete_activity(get_db(), current_user_id(), activity_id)
    )


@bp.route("/<string:activity_id>/response", methods=["POST"])
@login_required
def respond(activity_id):
    """Answer an activity invitation."""
    form = validate_form(RespondForm())
    response_id = ActivityService.respond_to_activity(
        get_db(), current_user_id(), activity_id, form.status.data
    )
    return jsonify({"responseId": response_id})


@bp.route("/<string:activity_id>/response", methods=["GET"])
@login_required
def my_response(activity_id):
    """Return the caller's answer to an activity."""
    return jsonify(
        ActivityService.get_my_activity_response(
            get_db(), current_user_id(), activity_id
        )
    )
