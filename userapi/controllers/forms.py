"""Forms used to validate request parameters and payloads."""

from typing import Any, Optional

from wtforms import Form, StringField, PasswordField, IntegerField
from wtforms import validators
from wtforms.validators import DataRequired, Email, Length, NumberRange, \
    ValidationError

from userapi.domain import UserRegistration
from userapi.services import users

MAX_LIMIT = 2 ** 31 - 1
"""Largest number of users that may be requested at once."""


class ListUsersForm(Form):
    """Query parameters accepted when listing users."""

    userName = StringField('User name')
    gender = StringField('Gender')
    limit = IntegerField('Limit',
                         validators=[validators.Optional(),
                                     NumberRange(min=0, max=MAX_LIMIT)])
    sortByFirstName = StringField('Sort by first name')


class ProfileForm(Form):
    """User profile fields, shared by registration and update."""

    email = StringField('Email address',
                        validators=[DataRequired(), Email(), Length(max=255)])
    userName = StringField('User name',
                           validators=[DataRequired(), Length(max=50)])
    gender = StringField('Gender',
                         validators=[validators.Optional(), Length(max=20)])
    age = IntegerField('Age', validators=[validators.Optional(),
                                          NumberRange(min=0, max=150)])
    firstName = StringField('First or given name',
                            validators=[validators.Optional(),
                                        Length(max=50)])
    lastName = StringField('Last or family name',
                           validators=[validators.Optional(),
                                       Length(max=50)])

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        """Grab ``user_id`` if the form describes an existing user."""
        self.user_id: Optional[str] = kwargs.pop('user_id', None)
        super(ProfileForm, self).__init__(*args, **kwargs)

    def validate_email(self, field: StringField) -> None:
        """Ensure that the email address is unique."""
        if users.does_email_exist(field.data, exclude_user_id=self.user_id):
            raise ValidationError('An account with that email already exists')


class RegistrationForm(ProfileForm):
    """User registration form."""

    password = PasswordField('Password',
                             validators=[DataRequired(), Length(min=6)])

    def to_domain(self) -> UserRegistration:
        """Generate a :class:`.UserRegistration` from this form's data."""
        return UserRegistration(
            email=self.email.data,
            password=self.password.data,
            user_name=self.userName.data,
            gender=self.gender.data or None,
            age=self.age.data,
            first_name=self.firstName.data or None,
            last_name=self.lastName.data or None
        )


class LoginForm(Form):
    """Log in form."""

    email = StringField('Email address', validators=[DataRequired()])
    password = PasswordField('Password', validators=[DataRequired()])


class ForgotPasswordForm(Form):
    """Request for a password reset token."""

    email = StringField('Email address', validators=[DataRequired(), Email()])


class ResetPasswordForm(Form):
    """New password, set with a reset token."""

    password = PasswordField('Password',
                             validators=[DataRequired(), Length(min=6)])


class UpdatePasswordForm(Form):
    """Password change for an authenticated user."""

    password = PasswordField('Current password', validators=[DataRequired()])
    newPassword = PasswordField('New password',
                                validators=[DataRequired(), Length(min=6)])
