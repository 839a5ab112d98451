"""Flask configuration."""
import secrets
import os

#################### General config for app ####################
ENVIRONMENT = os.environ.get('ENVIRONMENT', 'development')
"""Deployment environment. Only ``production`` enables secure cookies."""

SECRET_KEY = os.environ.get('SECRET_KEY', secrets.token_urlsafe(16))
"""Sets the `Flask` secret key. Not used directly by the API."""

LOGLEVEL = int(os.environ.get('LOGLEVEL', 20))

VERSION = '0.1'
APP_VERSION = '0.1'
"""The application version."""


#################### Database ####################
SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URI', 'sqlite://')
"""SQLAlchemy URI for the users database. Defaults to in-memory SQLite."""

SQLALCHEMY_TRACK_MODIFICATIONS = False

SQLALCHEMY_ENGINE_OPTIONS = {'pool_pre_ping': True}
"""Replace dead pooled connections rather than hanging on them."""

CREATE_DB = bool(int(os.environ.get('CREATE_DB', 0)))


#################### Session tokens ####################
JWT_SECRET = os.environ.get('JWT_SECRET', secrets.token_urlsafe(16))
"""Secret used to sign session tokens."""

JWT_EXPIRE = int(os.environ.get('JWT_EXPIRE', 30 * 24 * 60 * 60))
"""Lifetime of a session token, in seconds."""

JWT_COOKIE_EXPIRE = int(os.environ.get('JWT_COOKIE_EXPIRE', 30))
"""Lifetime of the session cookie, in days."""

AUTH_SESSION_COOKIE_NAME = 'token'
AUTH_SESSION_COOKIE_SECURE = ENVIRONMENT == 'production'

LOGOUT_COOKIE_VALUE = 'none'
LOGOUT_COOKIE_EXPIRE = 10
"""Seconds until the logout sentinel cookie expires."""


#################### Password reset ####################
RESET_PASSWORD_EXPIRE = int(os.environ.get('RESET_PASSWORD_EXPIRE', 600))
"""Lifetime of a password reset token, in seconds."""

RESET_PASSWORD_URL = os.environ.get(
    'RESET_PASSWORD_URL',
    'http://localhost:5000/users/resetpassword?resetToken={token}'
)
"""Link sent to the user; ``{token}`` is replaced with the raw reset token."""


#################### Mail ####################
MAIL_SERVER = os.environ.get('MAIL_SERVER')
"""SMTP host. If not set, reset messages are logged instead of sent."""

MAIL_PORT = int(os.environ.get('MAIL_PORT', 25))
MAIL_FROM = os.environ.get('MAIL_FROM', 'noreply@localhost')
