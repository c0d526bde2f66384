from flask import current_app, jsonify, request

from conexion.auth.decorators import current_user_id, login_required
from conexion.core.constants import PERIOD_MONTH
from conexion.core.db import get_db, utcnow
from conexion.utils import parse_datetime

from . import bp
from .services import StatsService
from .utils import validate_period_type


def _group_arg():
    return request.args.get("groupId") or None


def _period_args():
    period_type = validate_period_type(request.args.get("periodType", PERIOD_MONTH))
    reference_date = parse_datetime(request.args.get("referenceDate")) or utcnow()
    return period_type, reference_date


@bp.route("/gender", methods=["GET"])
@login_required
def gender_distribution():
    """Count the caller's disciples by gender."""
    return jsonify(
        StatsService.get_gender_distribution(get_db(), current_user_id(), _group_arg())
    )


@bp.route("/age", methods=["GET"])
@login_required
def age_distribution():
    """Count the caller's disciples by age band."""
    return jsonify(
        StatsService.get_age_distribution(get_db(), current_user_id(), _group_arg())
    )


@bp.route("/attendance-trends", methods=["GET"])
@login_required
def attendance_trends():
    """Monthly attendance totals by type and service slot."""
    period_type, reference_date = _period_args()
    return jsonify(
        StatsService.get_attendance_trends(
            get_db(), current_user_id(), period_type, reference_date, _group_arg()
        )
    )


@bp.route("/services", methods=["GET"])
@login_required
def service_distribution():
    """Attendance totals per worship service slot."""
    period_type, reference_date = _period_args()
    return jsonify(
        StatsService.get_service_distribution(
            get_db(), current_user_id(), period_type, reference_date, _group_arg()
        )
    )


@bp.route("/school", methods=["GET"])
@login_required
def school_participation():
    """Count disciples active and inactive in the school."""
    return jsonify(
        StatsService.get_school_participation(get_db(), current_user_id(), _group_arg())
    )


@bp.route("/popular-courses", methods=["GET"])
@login_required
def popular_courses():
    """Rank the courses the caller's disciples take."""
    limit = request.args.get(
        "limit", default=current_app.config["POPULAR_COURSES_LIMIT"], type=int
    )
    return jsonify(
        StatsService.get_popular_courses(
            get_db(), current_user_id(), _group_arg(), limit=limit
        )
    )
