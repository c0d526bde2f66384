"""Forms for the course blueprint."""

from wtforms import (
    BooleanField,
    DateField,
    IntegerField,
    SelectMultipleField,
    StringField,
)
from wtforms.validators import DataRequired, Optional

from conexion.core.forms import JSONForm


class CourseForm(JSONForm):
    """Form for creating or editing a course."""

    name = StringField("Nombre", validators=[Optional()])
    description = StringField("Descripción", validators=[Optional()])
    startDate = DateField("Fecha de inicio", validators=[Optional()])
    endDate = DateField("Fecha de fin", validators=[Optional()])
    durationWeeks = IntegerField("Duración en semanas", validators=[Optional()])


class CourseIdsForm(JSONForm):
    """Form carrying a list of course ids to enroll in or leave."""

    courseIds = SelectMultipleField(
        "Cursos", validators=[DataRequired()], validate_choice=False
    )


class SchoolStatusForm(JSONForm):
    """Form for switching the caller's school status."""

    isActiveInSchool = BooleanField("Activo en la escuela")


class WeekForm(JSONForm):
    """Form naming the course week to toggle."""

    week = IntegerField("Semana")
