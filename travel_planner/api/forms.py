from __future__ import annotations

from flask_wtf import FlaskForm
from wtforms import PasswordField, StringField
from wtforms.validators import DataRequired, Email, Length, Regexp

USERNAME_MIN = 3
USERNAME_MAX = 64
USERNAME_PATTERN = r"^[A-Za-z0-9_.-]+$"


def strip_filter(value):
    return value.strip() if isinstance(value, str) else value


class JsonForm(FlaskForm):
    """Base for forms fed from JSON request bodies.

    The CSRF token travels in the ``X-CSRFToken`` header checked by
    ``CSRFProtect``, so the per-form token field is switched off.
    """

    class Meta:
        csrf = False

    def first_error(self) -> str:
        for field_errors in self.errors.values():
            if field_errors:
                return field_errors[0]
        return "Invalid request."


class RegistrationForm(JsonForm):
    email = StringField(
        "Email",
        filters=[strip_filter],
        validators=[
            DataRequired("Please provide a valid email address."),
            Email("Please provide a valid email address.", check_deliverability=False),
            Length(max=255),
        ],
    )
    password = PasswordField(
        "Password",
        validators=[
            DataRequired("Password must be at least 6 characters."),
            Length(min=6, message="Password must be at least 6 characters."),
        ],
    )
    username = StringField(
        "Username",
        filters=[strip_filter],
        validators=[
            DataRequired(f"Username must be at least {USERNAME_MIN} characters."),
            Length(min=USERNAME_MIN, message=f"Username must be at least {USERNAME_MIN} characters."),
            Length(max=USERNAME_MAX, message="Username too long."),
            Regexp(USERNAME_PATTERN, message="Username contains invalid characters."),
        ],
    )
    full_name = StringField("Full name", filters=[strip_filter], validators=[Length(max=120)])

    def validate_email(self, field):
        field.data = (field.data or "").strip().lower()


class LoginForm(JsonForm):
    email = StringField(
        "Email",
        filters=[strip_filter],
        validators=[DataRequired("Email and password are required.")],
    )
    password = PasswordField("Password", validators=[DataRequired("Email and password are required.")])
