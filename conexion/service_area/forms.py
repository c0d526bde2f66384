"""Forms for the service area blueprint."""

from wtforms import StringField
from wtforms.validators import DataRequired, Optional

from conexion.core.forms import JSONForm


class ServiceAreaForm(JSONForm):
    """Form for naming a service area."""

    name = StringField("Nombre", validators=[Optional()])


class AssignServiceForm(JSONForm):
    """Form naming the service area to assign."""

    serviceId = StringField("Servicio", validators=[DataRequired()])
