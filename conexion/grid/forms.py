"""Forms for the grid blueprint."""

from wtforms import StringField
from wtforms.validators import DataRequired, Email

from conexion.core.forms import JSONForm


class GridForm(JSONForm):
    """Form for naming a grid."""

    name = StringField("Nombre", validators=[DataRequired()])


class GridMemberForm(JSONForm):
    """Form naming the user to add to the caller's grid."""

    userEmail = StringField("Correo", validators=[DataRequired(), Email()])
