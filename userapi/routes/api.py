"""Provides routes for the JSON API."""

from typing import Any, Dict, Optional, Tuple
from datetime import datetime

from flask import Blueprint, Response, current_app, jsonify, make_response, \
    request

from userapi import status, logging
from userapi.auth.decorators import scoped
from userapi.controllers import authentication, passwords, users
from userapi.services import users as users_service

logger = logging.getLogger(__name__)
blueprint = Blueprint('api', __name__, url_prefix='')

CookieData = Dict[str, Tuple[str, datetime]]


def set_cookies(response: Response, cookies: CookieData) -> None:
    """
    Update a :class:`.Response` with cookies from controller data.

    Controllers seeking to update cookies include a 'cookies' key in their
    response data, mapping cookie keys to ``(value, expires)``.
    """
    for cookie_key, (cookie_value, expires) in cookies.items():
        cookie_name = current_app.config[f'{cookie_key.upper()}_NAME']
        params = dict(httponly=True)
        if current_app.config['AUTH_SESSION_COOKIE_SECURE']:
            params.update({'secure': True, 'samesite': 'Lax'})
        logger.debug('Set cookie %s, expires %s', cookie_name, expires)
        response.set_cookie(cookie_name, cookie_value, expires=expires,
                            **params)


def _respond(data: Any, code: int, headers: dict) -> Response:
    cookies = None
    if isinstance(data, dict):
        cookies = data.pop('cookies', None)
    response = make_response(jsonify(data), code, headers)
    if cookies:
        set_cookies(response, cookies)
    return response


def _payload() -> Optional[Any]:
    """
    Get the JSON request body, ignoring the Content-Type header.

    An empty body is ``None``. A body that is not valid JSON raises
    :class:`.BadRequest`.
    """
    if not request.get_data():
        return None
    return request.get_json(force=True)


@blueprint.after_request
def apply_response_headers(response: Response) -> Response:
    """Prevent UI redress attacks."""
    response.headers['Content-Security-Policy'] = "frame-ancestors 'none'"
    response.headers['X-Frame-Options'] = 'DENY'
    return response


@blueprint.route('/status', methods=['GET'])
def service_status() -> Response:
    """Health check endpoint."""
    if not users_service.is_available():
        return make_response(jsonify({'status': 'unavailable'}),
                             status.HTTP_503_SERVICE_UNAVAILABLE)
    return make_response(jsonify({'status': 'ok'}), status.HTTP_200_OK)


@blueprint.route('/users', methods=['GET'])
def get_users() -> Response:
    """List users, optionally filtered, sorted and limited."""
    return _respond(*users.get_users(request.args))


@blueprint.route('/users', methods=['DELETE'])
def delete_users() -> Response:
    """Delete every user."""
    return _respond(*users.delete_users())


@blueprint.route('/users', methods=['POST'])
def create_user() -> Response:
    """Register a new user, and log them in."""
    return _respond(*users.create_user(_payload()))


@blueprint.route('/users/login', methods=['POST'])
def login() -> Response:
    """Log in with an e-mail address and password."""
    return _respond(*authentication.login(_payload()))


@blueprint.route('/users/logout', methods=['GET', 'POST'])
def logout() -> Response:
    """Clear the session cookie."""
    return _respond(*authentication.logout())


@blueprint.route('/users/forgotpassword', methods=['POST'])
def forgot_password() -> Response:
    """Request a password reset token by e-mail."""
    return _respond(*passwords.forgot_password(_payload()))


@blueprint.route('/users/resetpassword', methods=['PUT'])
def reset_password() -> Response:
    """Set a new password using a reset token."""
    reset_token = request.args.get('resetToken')
    return _respond(*passwords.reset_password(reset_token, _payload()))


@blueprint.route('/users/updatepassword', methods=['PUT'])
@scoped()
def update_password() -> Response:
    """Change the password of the logged-in user."""
    return _respond(*passwords.update_password(request.auth, _payload()))


@blueprint.route('/users/<string:user_id>', methods=['GET'])
def get_user(user_id: str) -> Response:
    """Retrieve a user."""
    return _respond(*users.get_user(user_id))


@blueprint.route('/users/<string:user_id>', methods=['PUT', 'PATCH'])
def update_user(user_id: str) -> Response:
    """Update some fields of a user."""
    return _respond(*users.update_user(user_id, _payload()))


@blueprint.route('/users/<string:user_id>', methods=['DELETE'])
def delete_user(user_id: str) -> Response:
    """Delete a user."""
    return _respond(*users.delete_user(user_id))
