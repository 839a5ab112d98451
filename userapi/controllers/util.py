"""Helpers for :mod:`userapi.controllers`."""

from typing import Any, Dict, Mapping, Optional, Tuple, Type
from datetime import datetime, timedelta

from flask import current_app
from pytz import UTC
from werkzeug.datastructures import MultiDict
from wtforms import Form

from userapi import status
from userapi.auth import tokens
from userapi.domain import User
from userapi.services import mail
from userapi.services.users import exceptions

ResponseData = Tuple[Any, int, dict]


class InvalidRequest(ValueError):
    """The request payload is missing or has the wrong shape."""


ERROR_STATUS: Dict[Type[Exception], int] = {
    InvalidRequest: status.HTTP_400_BAD_REQUEST,
    exceptions.RegistrationFailed: status.HTTP_400_BAD_REQUEST,
    exceptions.InvalidResetToken: status.HTTP_400_BAD_REQUEST,
    exceptions.AuthenticationFailed: status.HTTP_401_UNAUTHORIZED,
    exceptions.PasswordAuthenticationFailed: status.HTTP_401_UNAUTHORIZED,
    exceptions.NoSuchUser: status.HTTP_404_NOT_FOUND,
    exceptions.DatastoreError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    mail.MailDeliveryFailed: status.HTTP_500_INTERNAL_SERVER_ERROR,
    exceptions.Unavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
}
"""Maps each kind of failure to the status code of its response."""


def error_response(error: Exception,
                   message: Optional[str] = None) -> ResponseData:
    """
    Generate the response for a failed operation.

    Parameters
    ----------
    error : Exception
        Its type determines the status code, via :const:`ERROR_STATUS`.
        Unknown kinds are treated as internal errors.
    message : str
        Defaults to the text of ``error``.

    Returns
    -------
    dict
        Response data.
    int
        Status code.
    dict
        Headers to add to the response.

    """
    code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for kind, kind_code in ERROR_STATUS.items():
        if isinstance(error, kind):
            code = kind_code
            break
    data = {'success': False, 'error': message or str(error)}
    return data, code, {}


def validation_error(form: Form, message: str) -> ResponseData:
    """Generate a 400 response that describes the errors on ``form``."""
    data, code, headers = error_response(InvalidRequest(message))
    data['errors'] = {name: errors for name, errors in form.errors.items()}
    return data, code, headers


def formdata(payload: Optional[Mapping[str, Any]]) -> MultiDict:
    """
    Convert a JSON payload into form data that wtforms can validate.

    Raises
    ------
    :class:`InvalidRequest`
        If the payload is not a JSON object.

    """
    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise InvalidRequest('Request body must be a JSON object')
    return MultiDict({key: value if isinstance(value, str) else str(value)
                      for key, value in payload.items() if value is not None})


def token_response(user: User, status_code: int) -> ResponseData:
    """
    Issue a session for ``user``.

    Signs a session token bound to the user's id, and asks the route to set
    it as the session cookie. This is the only place where session cookies
    are defined.

    Parameters
    ----------
    user : :class:`.User`
    status_code : int
        Status code of the response.

    Returns
    -------
    dict
        ``{'success': True, 'token': ...}``, plus the cookies to set.
    int
        Status code.
    dict
        Headers to add to the response.

    """
    config = current_app.config
    issued_at = datetime.now(tz=UTC)
    token = tokens.encode(user.user_id, config['JWT_SECRET'],
                          int(config['JWT_EXPIRE']), issued_at=issued_at)
    expires = issued_at + timedelta(days=int(config['JWT_COOKIE_EXPIRE']))
    data = {
        'success': True,
        'token': token,
        'cookies': {'auth_session_cookie': (token, expires)}
    }
    return data, status_code, {}


def clear_session_cookie() -> Dict[str, Tuple[str, datetime]]:
    """Cookies that replace the session cookie with the logout sentinel."""
    config = current_app.config
    expires = datetime.now(tz=UTC) \
        + timedelta(seconds=int(config['LOGOUT_COOKIE_EXPIRE']))
    return {
        'auth_session_cookie': (config['LOGOUT_COOKIE_VALUE'], expires)
    }
