from flask import current_app, jsonify

from conexion.auth.decorators import current_user_id, login_required
from conexion.core.db import get_db
from conexion.errors import NotFoundError
from conexion.utils import optional_bool, validate_form

from . import bp
from .forms import CourseForm, CourseIdsForm, SchoolStatusForm, WeekForm
from .services import CourseService


def _sent(field):
    return field.data if field.raw_data else None


@bp.route("/", methods=["GET"])
@login_required
def list_courses():
    """List every course."""
    return jsonify(CourseService.get_all_courses(get_db()))


@bp.route("/mine", methods=["GET"])
@login_required
def my_courses():
    """List the caller's courses with their weekly progress."""
    return jsonify(CourseService.get_my_courses(get_db(), current_user_id()))


@bp.route("/progress/<string:disciple_id>", methods=["GET"])
@login_required
def disciple_progress(disciple_id):
    """Show a disciple's course progress to their leader."""
    return jsonify(
        CourseService.get_disciple_course_progress(
            get_db(), current_user_id(), disciple_id
        )
    )


@bp.route("/<string:course_id>", methods=["GET"])
@login_required
def view_course(course_id):
    """Show a single course."""
    course = CourseService.get_course_by_id(get_db(), course_id)
    if course is None:
        raise NotFoundError("Curso no encontrado")
    return jsonify(course)


@bp.route("/", methods=["POST"])
@login_required
def create_course():
    """Create a course."""
    form = validate_form(CourseForm())
    duration_weeks = form.durationWeeks.data
    if duration_weeks is None:
        duration_weeks = current_app.config["COURSE_DEFAULT_DURATION_WEEKS"]
    course_id = CourseService.create_course(
        get_db(),
        current_user_id(),
        name=form.name.data or "",
        description=form.description.data or None,
        start_date=form.startDate.data,
        end_date=form.endDate.data,
        duration_weeks=duration_weeks,
    )
    return jsonify({"courseId": course_id}), 201


@bp.route("/<string:course_id>", methods=["PATCH"])
@login_required
def edit_course(course_id):
    """Edit a course."""
    form = validate_form(CourseForm())
    result = CourseService.update_course(
        get_db(),
        current_user_id(),
        course_id,
        name=_sent(form.name),
        description=_sent(form.description),
        start_date=form.startDate.data,
        end_date=form.endDate.data,
        duration_weeks=form.durationWeeks.data,
    )
    return jsonify(result)


@bp.route("/<string:course_id>", methods=["DELETE"])
@login_required
def delete_course(course_id):
    """Delete a course and its enrollments."""
    return jsonify(CourseService.delete_course(get_db(), current_user_id(), course_id))


@bp.route("/enroll", methods=["POST"])
@login_required
def enroll():
    """Enroll the caller in one or more courses."""
    form = validate_form(CourseIdsForm())
    return jsonify(
        CourseService.enroll_in_courses(
            get_db(), current_user_id(), form.courseIds.data
        )
    )


@bp.route("/unenroll", methods=["POST"])
@login_required
def unenroll():
    """Remove the caller from one or more courses."""
    form = validate_form(CourseIdsForm())
    return jsonify(
        CourseService.unenroll_from_courses(
            get_db(), current_user_id(), form.courseIds.data
        )
    )


@bp.route("/school-status", methods=["POST"])
@login_required
def school_status():
    """Switch whether the caller is an active student."""
    form = validate_form(SchoolStatusForm())
    is_active = optional_bool(form.isActiveInSchool)
    return jsonify(
        CourseService.update_school_status(
            get_db(), current_user_id(), bool(is_active)
        )
    )


@bp.route("/<string:course_id>/weeks", methods=["POST"])
@login_required
def toggle_week(course_id):
    """Toggle one week of a course for the caller."""
    form = validate_form(WeekForm())
    completed_weeks = CourseService.toggle_week_completion(
        get_db(), current_user_id(), course_id, form.week.data
    )
    return jsonify({"completedWeeks": completed_weeks})


@bp.route("/<string:course_id>/work-and-exam", methods=["POST"])
@login_required
def toggle_work_and_exam(course_id):
    """Toggle whether the caller handed in the course work and exam."""
    done = CourseService.toggle_work_and_exam(get_db(), current_user_id(), course_id)
    return jsonify({"completedWorkAndExam": done})
