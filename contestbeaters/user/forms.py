"""Forms for the user blueprint."""

from wtforms import StringField
from wtforms.validators import AnyOf, DataRequired, Email, Length, Optional

from contestbeaters.core.constants import ROLES
from contestbeaters.core.forms import JSONForm


class UserForm(JSONForm):
    """Form for a first sign-in."""

    email = StringField("Email", validators=[DataRequired(), Email()])
    name = StringField("Name", validators=[Optional(), Length(max=100)])
    image = StringField("Image", validators=[Optional()])


class RoleForm(JSONForm):
    """Form for changing a user's role."""

    role = StringField("Role", validators=[DataRequired(), AnyOf(ROLES)])


class ProfileForm(JSONForm):
    """Form for updating a user's name and picture."""

    name = StringField("Name", validators=[Optional(), Length(min=1, max=100)])
    image = StringField("Image", validators=[Optional()])
