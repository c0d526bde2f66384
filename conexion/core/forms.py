"""Base form shared by every blueprint of the JSON API."""

from flask_wtf import FlaskForm
from werkzeug.datastructures import ImmutableMultiDict


class JSONForm(FlaskForm):
    """A FlaskForm that treats JSON nulls as absent fields.

    WTForms coerces whatever a request carries, so a ``null`` would reach
    ``int()`` or ``strptime`` and fail outside validation.
    """

    class Meta(FlaskForm.Meta):
        def wrap_formdata(self, form, formdata):
            formdata = super().wrap_formdata(form, formdata)
            if formdata is None:
                return None
            return ImmutableMultiDict(
                [(k, v) for k, v in formdata.items(multi=True) if v is not None]
            )
