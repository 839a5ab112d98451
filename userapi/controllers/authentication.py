"""
Controllers for logging in and out.

When a user logs in they are issued a session token, which is both returned
in the response body and set as the ``token`` cookie. The token is signed and
self-contained: it is not registered anywhere server-side. Logging out
therefore cannot revoke it; it only replaces the cookie with a short-lived
sentinel value.
"""

from typing import Any, Dict, Optional

from retry import retry

from userapi import status, logging
from userapi.domain import User
from userapi.services import users
from userapi.services.users.exceptions import AuthenticationFailed, \
    DatastoreError, Unavailable
from .forms import LoginForm
from .util import ResponseData, InvalidRequest, error_response, formdata, \
    token_response, clear_session_cookie

logger = logging.getLogger(__name__)

MISSING_CREDENTIALS = 'Please provide an email and password'
INVALID_CREDENTIALS = 'Invalid credentials'


def login(payload: Optional[Dict[str, Any]]) -> ResponseData:
    """
    Log a user in with their e-mail address and password.

    Parameters
    ----------
    payload : dict
        Should include ``email`` and ``password``.

    Returns
    -------
    dict
        ``{'success': True, 'token': ...}``, plus the session cookie.
    int
        Status code. This should be 200 if all goes well.
    dict
        Headers to add to the response.

    """
    try:
        form = LoginForm(formdata(payload))
    except InvalidRequest as e:
        return error_response(e)
    if not form.validate():
        logger.debug('Login data not valid')
        return error_response(InvalidRequest(MISSING_CREDENTIALS))

    try:    # Attempt to authenticate the user with the credentials provided.
        user = _do_authn(form.email.data, form.password.data)
    except AuthenticationFailed as e:
        # Unknown e-mail and wrong password look the same from outside.
        logger.debug('Authentication failed: %s', e)
        return error_response(e, INVALID_CREDENTIALS)
    except (DatastoreError, Unavailable) as e:
        logger.error('Error during authentication: %s', e)
        return error_response(e, f'Error logging in: {e}')

    logger.debug('Logged in user %s', user.user_id)
    return token_response(user, status.HTTP_200_OK)


def logout() -> ResponseData:
    """
    Log the user out, by clearing the session cookie.

    This succeeds whether or not the request carried a valid session.
    """
    logger.debug('Request to log out')
    data = {
        'success': True,
        'msg': 'Successfully logged out!',
        'cookies': clear_session_cookie()
    }
    return data, status.HTTP_200_OK, {}


# Broken out to add retry logic.
@retry(Unavailable, tries=3, delay=0.5, backoff=2)
def _do_authn(email: str, password: str) -> User:
    return users.authenticate(email, password)
