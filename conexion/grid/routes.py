from flask import current_app, jsonify, request

from conexion.auth.decorators import current_user_id, login_required
from conexion.core.db import get_db
from conexion.utils import validate_form

from . import bp
from .forms import GridForm, GridMemberForm
from .services import GridService


@bp.route("/search", methods=["GET"])
@login_required
def search_grids():
    """Search grids by a fragment of their name."""
    results = GridService.search_grids_by_name(
        get_db(),
        current_user_id(),
        request.args.get("q", ""),
        limit=current_app.config["SEARCH_RESULTS_LIMIT"],
    )
    return jsonify(results)


@bp.route("/", methods=["POST"])
@login_required
def create_grid():
    """Create the caller's grid."""
    form = validate_form(GridForm())
    grid_id = GridService.create_grid(get_db(), current_user_id(), form.name.data)
    return jsonify({"gridId": grid_id}), 201


@bp.route("/mine", methods=["GET"])
@login_required
def my_grid():
    """Return the caller's grid, or null."""
    return jsonify(GridService.get_my_grid(get_db(), current_user_id()))


@bp.route("/mine/members", methods=["GET"])
@login_required
def grid_members():
    """List the members of the caller's grid."""
    return jsonify(GridService.get_grid_members(get_db(), current_user_id()))


@bp.route("/mine/members", methods=["POST"])
@login_required
def add_grid_member():
    """Add a user to the caller's grid by email."""
    form = validate_form(GridMemberForm())
    return jsonify(
        GridService.add_member_to_grid(
            get_db(), current_user_id(), form.userEmail.data
        )
    )


@bp.route("/mine/members/<string:member_id>", methods=["DELETE"])
@login_required
def remove_grid_member(member_id):
    """Take a user out of the caller's grid."""
    return jsonify(
        GridService.remove_member_from_grid(get_db(), current_user_id(), member_id)
    )


@bp.route("/mine/stats", methods=["GET"])
@login_required
def grid_stats():
    """Headcounts for the caller's grid."""
    return jsonify(GridService.get_grid_stats(get_db(), current_user_id()))


@bp.route("/<string:grid_id>", methods=["PATCH"])
@login_required
def edit_grid(grid_id):
    """Rename a grid."""
    form = validate_form(GridForm())
    return jsonify(
        GridService.update_grid(get_db(), current_user_id(), grid_id, form.name.data)
    )
