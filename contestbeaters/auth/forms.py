"""Forms for the auth blueprint."""

from wtforms import StringField
from wtforms.validators import DataRequired, Email

from contestbeaters.core.forms import JSONForm


class TokenForm(JSONForm):
    """Form for requesting a token."""

    email = StringField("Email", validators=[DataRequired(), Email()])
