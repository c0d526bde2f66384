"""Forms for the user blueprint."""

from wtforms import DateField, SelectField, StringField
from wtforms.validators import DataRequired, Email, Length, Optional

from conexion.core.constants import GENDERS, ROLES
from conexion.core.forms import JSONForm


class RegisterForm(JSONForm):
    """Form posted at sign-up together with the Firebase ID token."""

    class Meta:
        csrf = False

    idToken = StringField("Token", validators=[DataRequired()])
    name = StringField("Nombre", validators=[DataRequired(), Length(min=2, max=100)])
    email = StringField("Correo", validators=[DataRequired(), Email()])


class CompleteProfileForm(JSONForm):
    """Form for the first-time profile completion."""

    name = StringField("Nombre", validators=[DataRequired(), Length(min=2, max=100)])
    role = SelectField("Rol", choices=[(r, r) for r in ROLES])
    gender = SelectField("Género", choices=[(g, g) for g in GENDERS])
    phone = StringField("Teléfono", validators=[Optional(), Length(max=30)])
    birthdate = DateField("Fecha de nacimiento", validators=[Optional()])


class UpdateProfileForm(JSONForm):
    """Form for patching the caller's profile."""

    name = StringField("Nombre", validators=[Optional(), Length(min=2, max=100)])
    gender = SelectField(
        "Género",
        choices=[(g, g) for g in GENDERS],
        validators=[Optional()],
        validate_choice=False,
    )
    phone = StringField("Teléfono", validators=[Optional(), Length(max=30)])
    birthdate = DateField("Fecha de nacimiento", validators=[Optional()])
