"""Forms for the activity blueprint."""

from wtforms import SelectField, StringField
from wtforms.validators import DataRequired, Optional

from conexion.core.constants import RESPONSE_STATUSES
from conexion.core.forms import JSONForm


class ActivityForm(JSONForm):
    """Form for creating an activity in a group."""

    groupId = StringField("Grupo", validators=[DataRequired()])
    name = StringField("Nombre", validators=[DataRequired()])
    address = StringField("Dirección", validators=[DataRequired()])
    dateTime = StringField("Fecha y hora", validators=[DataRequired()])
    description = StringField("Descripción", validators=[DataRequired()])


class UpdateActivityForm(JSONForm):
    """Form for editing an activity; every field is optional."""

    name = StringField("Nombre", validators=[Optional()])
    address = StringField("Dirección", validators=[Optional()])
    dateTime = StringField("Fecha y hora", validators=[Optional()])
    description = StringField("Descripción", validators=[Optional()])


class RespondForm(JSONForm):
    """Form for answering an activity invitation."""

    status = SelectField("Estado", choices=[(s, s) for s in RESPONSE_STATUSES])
