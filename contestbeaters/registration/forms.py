"""Forms for the registration blueprint."""

from wtforms import StringField
from wtforms.validators import DataRequired, Email, Optional

from contestbeaters.core.forms import JSONForm


class RegistrationForm(JSONForm):
    """Body of a contest registration."""

    contest_id = StringField("Contest", validators=[DataRequired()], name="contestId")
    name = StringField("Name", validators=[DataRequired()])
    email = StringField("Email", validators=[DataRequired(), Email()])
    contest = StringField("Contest Title", validators=[Optional()])
    contest_owner = StringField(
        "Contest Owner", validators=[Optional(), Email()], name="contestOwner"
    )
    deadline = StringField("Deadline", validators=[Optional()])


class WinnerForm(JSONForm):
    """Body of a winner declaration. ``userId`` is the winner's email."""

    contest_id = StringField("Contest", validators=[DataRequired()], name="contestId")
    user_id = StringField("Winner", validators=[DataRequired(), Email()], name="userId")
