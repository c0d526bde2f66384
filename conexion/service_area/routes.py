from flask import jsonify

from conexion.auth.decorators import current_user_id, login_required
from conexion.core.db import get_db
from conexion.errors import NotFoundError
from conexion.utils import validate_form

from . import bp
from .forms import AssignServiceForm, ServiceAreaForm
from .services import ServiceAreaService


@bp.route("/", methods=["GET"])
@login_required
def list_services():
    """List every service area."""
    return jsonify(ServiceAreaService.get_all_services(get_db()))


@bp.route("/mine", methods=["GET"])
@login_required
def my_service():
    """Return the caller's service area."""
    return jsonify(ServiceAreaService.get_my_service(get_db(), current_user_id()))


@bp.route("/mine", methods=["POST"])
@login_required
def assign_my_service():
    """Join a service area."""
    form = validate_form(AssignServiceForm())
    return jsonify(
        ServiceAreaService.assign_service_to_user(
            get_db(), current_user_id(), form.serviceId.data
        )
    )


@bp.route("/mine", methods=["DELETE"])
@login_required
def leave_my_service():
    """Leave the caller's service area."""
    return jsonify(
        ServiceAreaService.remove_service_from_user(get_db(), current_user_id())
    )


@bp.route("/<string:service_id>", methods=["GET"])
@login_required
def view_service(service_id):
    """Show a single service area."""
    service = ServiceAreaService.get_service_by_id(get_db(), service_id)
    if service is None:
        raise NotFoundError("Servicio no encontrado")
    return jsonify(service)


@bp.route("/", methods=["POST"])
@login_required
def create_service():
    """Create a service area."""
    form = validate_form(ServiceAreaForm())
    service_id = ServiceAreaService.create_service(
        get_db(), current_user_id(), form.name.data
    )
    return jsonify({"serviceId": service_id}), 201


@bp.route("/<string:service_id>", methods=["PATCH"])
@login_required
def edit_service(service_id):
    """Rename a service area."""
    form = validate_form(ServiceAreaForm())
    return jsonify(
        ServiceAreaService.update_service(
            get_db(),
            current_user_id(),
            service_id,
            name=form.name.data if form.name.raw_data else None,
        )
    )


@bp.route("/<string:service_id>", methods=["DELETE"])
@login_required
def delete_service(service_id):
    """Delete a service area."""
    return jsonify(
        ServiceAreaService.delete_service(get_db(), current_user_id(), service_id)
    )


@bp.route("/users/<string:target_id>", methods=["POST"])
@login_required
def assign_user_service(target_id):
    """Assign a service area to another user."""
    form = validate_form(AssignServiceForm())
    return jsonify(
        ServiceAreaService.assign_service_to_user_for_admin(
            get_db(), current_user_id(), target_id, form.serviceId.data
        )
    )


@bp.route("/users/<string:target_id>", methods=["DELETE"])
@login_required
def remove_user_service(target_id):
    """Clear another user's service area."""
    return jsonify(
        ServiceAreaService.remove_service_from_user_for_admin(
            get_db(), current_user_id(), target_id
        )
    )
