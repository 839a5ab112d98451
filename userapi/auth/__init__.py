"""Provides tools for working with authenticated user sessions."""

from typing import Optional

from flask import Flask, request

from userapi import logging
from userapi.domain import Session
from . import decorators, tokens
from .exceptions import InvalidToken, ExpiredToken

logger = logging.getLogger(__name__)


class Auth(object):
    """
    Attaches session information to the request.

    Intended for use in a Flask application factory, for example:

    .. code-block:: python

       from flask import Flask
       from userapi.auth import Auth


       def create_web_app() -> Flask:
           app = Flask('someapp')
           app.config.from_pyfile('config.py')
           Auth(app)
           return app

    The session is available to route functions as ``request.auth``; it is
    ``None`` if the request carries no valid session token.
    """

    def __init__(self, app: Optional[Flask] = None) -> None:
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        """Attach :meth:`.load_session` to the Flask app."""
        self.app = app
        self.app.before_request(self.load_session)

    def load_session(self) -> None:
        """Look for a session token, and attach its session to the request."""
        request.auth = self._get_session()

    def _get_session(self) -> Optional[Session]:
        # A token may reside in either the Authorization header or in the
        # cookie set at login. Try the header first.
        token = None
        auth_header = request.headers.get('Authorization')
        if auth_header and auth_header.startswith('Bearer '):
            token = auth_header.split(' ', 1)[1].strip()
        if not token:
            cookie_name = self.app.config['AUTH_SESSION_COOKIE_NAME']
            token = request.cookies.get(cookie_name)
        if not token:
            return None

        try:
            return tokens.decode(token, self.app.config['JWT_SECRET'])
        except ExpiredToken as e:
            logger.debug('Session token expired: %s', e)
        except InvalidToken as e:
            logger.debug('Session token not valid: %s', e)
        return None
