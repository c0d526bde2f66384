"""Forms for the attendance blueprint."""

from wtforms import BooleanField, DateField, IntegerField, SelectField, StringField
from wtforms.validators import DataRequired, Optional

from conexion.core.constants import ATTENDANCE_TYPES
from conexion.core.forms import JSONForm


class AttendanceForm(JSONForm):
    """Form for recording attendance."""

    date = DateField("Fecha", validators=[DataRequired()])
    type = SelectField(
        "Tipo", choices=[(t, t) for t in ATTENDANCE_TYPES], validate_choice=False
    )
    count = IntegerField("Cantidad")
    attended = BooleanField("Asistí")
    service = StringField("Servicio", validators=[Optional()])


class UpdateAttendanceForm(JSONForm):
    """Form for editing a record; every field is optional."""

    date = DateField("Fecha", validators=[Optional()])
    type = SelectField(
        "Tipo",
        choices=[(t, t) for t in ATTENDANCE_TYPES],
        validators=[Optional()],
        validate_choice=False,
    )
    count = IntegerField("Cantidad", validators=[Optional()])
    attended = BooleanField("Asistí")
    service = StringField("Servicio", validators=[Optional()])
