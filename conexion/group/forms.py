"""Forms for the group blueprint."""

from wtforms import IntegerField, StringField
from wtforms.validators import DataRequired, Length, Optional, Regexp

from conexion.core.forms import JSONForm


class GroupForm(JSONForm):
    """Form for creating a new connection group."""

    name = StringField("Nombre", validators=[DataRequired()])
    address = StringField("Dirección", validators=[DataRequired()])
    district = StringField("Distrito", validators=[DataRequired()])
    minAge = IntegerField("Edad mínima", validators=[Optional()])
    maxAge = IntegerField("Edad máxima", validators=[Optional()])
    day = StringField("Día", validators=[DataRequired()])
    time = StringField(
        "Hora",
        validators=[
            DataRequired(),
            Regexp(r"^\d{2}:\d{2}$", message="La hora debe tener formato HH:MM"),
        ],
    )
    coLeaderId = StringField("Co-líder", validators=[Optional()])


class JoinGroupForm(JSONForm):
    """Form for joining a group with an invitation code."""

    invitationCode = StringField(
        "Código de invitación", validators=[DataRequired(), Length(min=6, max=6)]
    )


class UpdateGroupForm(JSONForm):
    """Form for editing a group's name and address."""

    name = StringField("Nombre", validators=[Optional()])
    address = StringField("Dirección", validators=[Optional()])
