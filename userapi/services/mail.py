"""Delivers password reset tokens by e-mail."""

import smtplib
from email.message import EmailMessage

from flask import current_app

from userapi import logging

logger = logging.getLogger(__name__)

RESET_SUBJECT = 'Password reset token'
RESET_BODY = """You are receiving this e-mail because you (or someone else) has
requested the reset of the password for your account.

To choose a new password, make a PUT request with your new password to:

    {url}

This link expires in {minutes} minutes. If you did not request a password
reset, you can ignore this message.
"""


class MailDeliveryFailed(RuntimeError):
    """The SMTP service refused or failed to deliver a message."""


class MailSession(object):
    """An open session with an SMTP service."""

    def __init__(self, host: str = "", port: int = 0) -> None:
        self._host = host
        self._port = port

    def _new_connection(self) -> smtplib.SMTP:
        return smtplib.SMTP(host=self._host, port=self._port, timeout=10)

    def send_message(self, message: EmailMessage) -> None:
        """Send ``message``, opening and closing a connection to do so."""
        try:
            with self._new_connection() as conn:
                conn.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise MailDeliveryFailed(f'Could not send mail: {e}') from e


def get_session() -> MailSession:
    """Create a :class:`.MailSession` from the application config."""
    config = current_app.config
    return MailSession(config['MAIL_SERVER'], int(config['MAIL_PORT']))


def send_reset_token(email: str, token: str) -> None:
    """
    Send a raw password reset token to ``email``.

    If no ``MAIL_SERVER`` is configured, the message is not sent. Outside of
    production its content, including the token, is logged at debug level.

    Raises
    ------
    :class:`MailDeliveryFailed`

    """
    config = current_app.config
    message = EmailMessage()
    message['Subject'] = RESET_SUBJECT
    message['From'] = config['MAIL_FROM']
    message['To'] = email
    message.set_content(RESET_BODY.format(
        url=config['RESET_PASSWORD_URL'].format(token=token),
        minutes=int(config['RESET_PASSWORD_EXPIRE']) // 60
    ))

    if not config.get('MAIL_SERVER'):
        logger.warning('MAIL_SERVER not configured; reset message not sent')
        if config.get('ENVIRONMENT') != 'production':
            logger.debug('Unsent reset message:\n%s', message.get_content())
        return
    get_session().send_message(message)
    logger.debug('Sent password reset token to %s', email)
