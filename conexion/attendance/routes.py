from flask import jsonify, request

from conexion.auth.decorators import current_user_id, login_required
from conexion.core.db import get_db
from conexion.errors import ValidationError
from conexion.utils import optional_bool, validate_form

from . import bp
from .forms import AttendanceForm, UpdateAttendanceForm
from .services import AttendanceService


def _year_arg():
    year = request.args.get("year", type=int)
    if year is None:
        raise ValidationError("Debes indicar el año")
    return year


@bp.route("/", methods=["POST"])
@login_required
def record_attendance():
    """Record attendance for the caller."""
    form = validate_form(AttendanceForm())
    record_id = AttendanceService.record_attendance(
        get_db(),
        current_user_id(),
        date=form.date.data,
        type=form.type.data,
        count=form.count.data,
        attended=optional_bool(form.attended),
        service=form.service.data or None,
    )
    return jsonify({"recordId": record_id}), 201


@bp.route("/<string:record_id>", methods=["PATCH"])
@login_required
def edit_attendance(record_id):
    """Edit one of the caller's records."""
    form = validate_form(UpdateAttendanceForm())
    result = AttendanceService.update_attendance(
        get_db(),
        current_user_id(),
        record_id,
        date=form.date.data,
        type=form.type.data if form.type.raw_data else None,
        count=form.count.data,
        attended=optional_bool(form.attended),
        service=form.service.data or None,
    )
    return jsonify(result)


@bp.route("/<string:record_id>", methods=["DELETE"])
@login_required
def delete_attendance(record_id):
    """Delete one of the caller's records."""
    return jsonify(
        AttendanceService.delete_attendance(get_db(), current_user_id(), record_id)
    )


@bp.route("/mine", methods=["GET"])
@login_required
def my_records():
    """List the caller's records, optionally filtered by type and month."""
    records = AttendanceService.get_my_attendance_records(
        get_db(),
        current_user_id(),
        type=request.args.get("type"),
        month=request.args.get("month", type=int),
        year=request.args.get("year", type=int),
    )
    return jsonify(records)


@bp.route("/co-leaders", methods=["GET"])
@login_required
def co_leaders():
    """List the caller's opposite-gender co-leaders."""
    return jsonify(AttendanceService.get_co_leaders(get_db(), current_user_id()))


@bp.route("/users/<string:target_id>", methods=["GET"])
@login_required
def records_by_user(target_id):
    """List a disciple's records for their leader."""
    return jsonify(
        AttendanceService.get_attendance_records_by_user_id(
            get_db(), current_user_id(), target_id
        )
    )


@bp.route("/report", methods=["GET"])
@login_required
def my_report():
    """Report the caller's totals for a month or a year."""
    return jsonify(
        AttendanceService.get_my_monthly_report(
            get_db(),
            current_user_id(),
            year=_year_arg(),
            month=request.args.get("month", type=int),
        )
    )


@bp.route("/group-report", methods=["GET"])
@login_required
def group_report():
    """Report the caller's and their disciples' totals."""
    return jsonify(
        AttendanceService.get_group_attendance_report(
            get_db(),
            current_user_id(),
            year=_year_arg(),
            month=request.args.get("month", type=int),
            disciple_id=request.args.get("discipleId") or None,
            group_id=request.args.get("groupId") or None,
        )
    )
