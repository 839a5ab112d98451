"""Exceptions raised by the users datastore."""


class Unavailable(RuntimeError):
    """The database is temporarily unavailable."""


class DatastoreError(RuntimeError):
    """A query or write against the database failed."""


class NoSuchUser(RuntimeError):
    """User does not exist."""


class AuthenticationFailed(RuntimeError):
    """Failed to authenticate user with provided credentials."""


class PasswordAuthenticationFailed(RuntimeError):
    """Password is not correct."""


class InvalidResetToken(RuntimeError):
    """Reset token does not match a user, or has expired."""


class RegistrationFailed(RuntimeError):
    """Could not create a new user."""
