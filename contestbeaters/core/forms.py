"""Base form for JSON request bodies."""

from __future__ import annotations

from typing import Any, TypeVar

from flask import request
from flask_wtf import FlaskForm
from werkzeug.datastructures import ImmutableMultiDict
from wtforms import StringField

from contestbeaters.errors import ValidationError

F = TypeVar("F", bound="JSONForm")


class JSONForm(FlaskForm):
    """A form bound to the JSON body of the current request.

    CSRF is off because callers authenticate with a token header, not a
    cookie session.
    """

    class Meta:
        csrf = False

    @classmethod
    def from_json(cls: type[F]) -> F:
        """Build the form from the request body and validate it."""
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object.")
        form = cls(formdata=ImmutableMultiDict(data))
        form.reject_non_strings(data)
        form.validate_or_raise()
        return form

    def reject_non_strings(self, data: dict[str, Any]) -> None:
        """Raise ValidationError for a text field sent as anything but a string."""
        for field in self:
            if not isinstance(field, StringField) or field.name not in data:
                continue
            value = data[field.name]
            if value is not None and not isinstance(value, str):
                raise ValidationError(f"{field.name}: must be a string")

    def validate_or_raise(self) -> JSONForm:
        """Validate the submitted body and raise ValidationError on failure."""
        if not self.validate_on_submit():
            raise ValidationError(self.first_error())
        return self

    def first_error(self) -> str:
        """Return the first field error as ``"field: message"``."""
        for field_name, messages in self.errors.items():
            if messages:
                return f"{field_name}: {messages[0]}"
        return "Invalid request body."
