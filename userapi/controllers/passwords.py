"""
Controllers for password reset and password change.

A user who has forgotten their password asks for a reset token. The raw token
is e-mailed to them, and only its hash is stored. The response is the same
whether or not the address belongs to an account, so it can't be used to
probe for accounts.
"""

from typing import Any, Dict, Optional

from flask import current_app

from userapi import status, logging
from userapi.domain import Session
from userapi.services import users, mail
from userapi.services.users.exceptions import NoSuchUser, \
    InvalidResetToken, PasswordAuthenticationFailed, DatastoreError, \
    Unavailable
from .forms import ForgotPasswordForm, ResetPasswordForm, UpdatePasswordForm
from .util import ResponseData, InvalidRequest, error_response, \
    validation_error, formdata, token_response

logger = logging.getLogger(__name__)

RESET_TOKEN_SENT = {
    'success': True,
    'msg': 'If that address is registered, a password reset token has been'
           ' sent to it.'
}


def forgot_password(payload: Optional[Dict[str, Any]]) -> ResponseData:
    """
    Issue a password reset token, and send it to the user by e-mail.

    Parameters
    ----------
    payload : dict
        Should include ``email``.

    Returns
    -------
    dict
        The same message whether or not a user was found.
    int
        Status code.
    dict
        Headers to add to the response.

    """
    try:
        form = ForgotPasswordForm(formdata(payload))
    except InvalidRequest as e:
        return error_response(e)
    if not form.validate():
        return validation_error(form, 'Please provide a valid email')

    expires_in = int(current_app.config['RESET_PASSWORD_EXPIRE'])
    try:
        user, token = users.issue_reset_token(form.email.data, expires_in)
    except NoSuchUser:
        logger.debug('Password reset requested for unknown address')
        return dict(RESET_TOKEN_SENT), status.HTTP_200_OK, {}
    except (DatastoreError, Unavailable) as e:
        logger.error('Could not save reset token: %s', e)
        return error_response(e, f'Failed to send password reset token: {e}')

    try:
        mail.send_reset_token(user.email, token)
    except mail.MailDeliveryFailed as e:
        logger.error('Could not send reset token to %s: %s', user.user_id, e)
        # An undeliverable token should not stay usable.
        try:
            users.clear_reset_token(user.user_id)
        except (DatastoreError, Unavailable) as clear_error:
            logger.error('Could not clear reset token for %s: %s',
                         user.user_id, clear_error)
        return error_response(e, f'Failed to send password reset token: {e}')

    logger.debug('Issued reset token for user %s', user.user_id)
    return dict(RESET_TOKEN_SENT), status.HTTP_200_OK, {}


def reset_password(reset_token: Optional[str],
                   payload: Optional[Dict[str, Any]]) -> ResponseData:
    """
    Set a new password with a reset token, and log the user in.

    Parameters
    ----------
    reset_token : str
        The raw token sent to the user.
    payload : dict
        Should include the new ``password``.

    """
    try:
        form = ResetPasswordForm(formdata(payload))
    except InvalidRequest as e:
        return error_response(e)
    if not reset_token:
        return error_response(InvalidResetToken('Invalid token'))
    if not form.validate():
        return validation_error(form, 'Please provide a valid password')

    try:
        user = users.reset_password(reset_token, form.password.data)
    except InvalidResetToken as e:
        logger.debug('Reset token rejected')
        return error_response(e, 'Invalid token')
    except (DatastoreError, Unavailable) as e:
        logger.error('Could not reset password: %s', e)
        return error_response(e, f'Failed to reset password: {e}')

    logger.debug('Reset password for user %s', user.user_id)
    return token_response(user, status.HTTP_200_OK)


def update_password(session: Session,
                    payload: Optional[Dict[str, Any]]) -> ResponseData:
    """
    Change the password of the authenticated user.

    The user must supply their current password, and is issued a new session.

    Parameters
    ----------
    session : :class:`.Session`
        The authenticated session.
    payload : dict
        Should include ``password`` (current) and ``newPassword``.

    """
    try:
        form = UpdatePasswordForm(formdata(payload))
    except InvalidRequest as e:
        return error_response(e)
    if not form.validate():
        return validation_error(form, 'Please provide your current and new'
                                      ' password')

    try:
        users.check_password(session.user_id, form.password.data)
        user = users.set_password(session.user_id, form.newPassword.data)
    except NoSuchUser as e:
        logger.debug('Session user %s no longer exists', session.user_id)
        data, _, headers = error_response(e, 'Not authorized')
        return data, status.HTTP_401_UNAUTHORIZED, headers
    except PasswordAuthenticationFailed as e:
        logger.debug('Wrong current password for %s', session.user_id)
        return error_response(e, 'Password is incorrect')
    except (DatastoreError, Unavailable) as e:
        logger.error('Could not update password: %s', e)
        return error_response(e, f'Failed to update password: {e}')

    return token_response(user, status.HTTP_200_OK)
