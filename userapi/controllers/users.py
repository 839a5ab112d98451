"""
Controllers for user records.

These handle listing, retrieving, creating, updating and deleting users. The
absence of a user is not an error here: retrieving or updating an unknown id
yields ``None``, and deleting one reports success.
"""

from typing import Any, Dict, Optional

from werkzeug.datastructures import MultiDict

from userapi import status, logging
from userapi.domain import UPDATABLE_FIELDS
from userapi.services import users
from userapi.services.users.exceptions import DatastoreError, Unavailable, \
    RegistrationFailed
from .forms import ListUsersForm, ProfileForm, RegistrationForm
from .util import ResponseData, InvalidRequest, error_response, \
    validation_error, formdata, token_response

logger = logging.getLogger(__name__)


def get_users(params: MultiDict) -> ResponseData:
    """
    List users.

    Parameters
    ----------
    params : MultiDict
        Query parameters. ``userName`` and ``gender`` select users for whom
        that field is set (the supplied value is not matched). ``limit`` caps
        the number of results, and ``sortByFirstName`` (``asc`` or ``desc``)
        orders them.

    Returns
    -------
    list
        Public representations of the users.
    int
        Status code.
    dict
        Headers to add to the response.

    """
    form = ListUsersForm(params)
    if not form.validate():
        logger.debug('Invalid query parameters: %s', form.errors)
        return validation_error(form, 'Invalid query parameters')

    filter: Dict[str, bool] = {}
    if form.userName.data:
        filter['userName'] = True
    if form.gender.data:
        filter['gender'] = True
    limit = form.limit.data or None
    sort = None
    if form.sortByFirstName.data:
        direction = users.ASCENDING if form.sortByFirstName.data == 'asc' \
            else users.DESCENDING
        sort = {'firstName': direction}

    try:
        found = users.find(filter, limit, sort)
    except (DatastoreError, Unavailable) as e:
        logger.error('Error retrieving users: %s', e)
        return error_response(e, f'Error retrieving users: {e}')
    return [user.to_dict() for user in found], status.HTTP_200_OK, {}


def delete_users() -> ResponseData:
    """Delete every user."""
    try:
        users.delete_all()
    except (DatastoreError, Unavailable) as e:
        logger.error('Error deleting all users: %s', e)
        return error_response(e, f'Error deleting all users: {e}')
    return {'success': True, 'msg': 'Delete all users'}, status.HTTP_200_OK, {}


def get_user(user_id: str) -> ResponseData:
    """Retrieve a user. The response data is ``None`` if there is none."""
    try:
        user = users.get_user_by_id(user_id)
    except (DatastoreError, Unavailable) as e:
        logger.error('Error retrieving user %s: %s', user_id, e)
        return error_response(e, f'Error retrieving user {user_id}: {e}')
    return user.to_dict() if user else None, status.HTTP_200_OK, {}


def update_user(user_id: str,
                payload: Optional[Dict[str, Any]]) -> ResponseData:
    """
    Update some of the profile fields of a user.

    Only fields in :const:`.domain.UPDATABLE_FIELDS` may be changed; a
    request naming any other field is refused outright. Fields absent from
    the payload are left untouched.

    Parameters
    ----------
    user_id : str
    payload : dict
        Public field names and their new values.

    Returns
    -------
    dict or None
        The updated user, or ``None`` if there is no such user.
    int
        Status code.
    dict
        Headers to add to the response.

    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        return error_response(
            InvalidRequest('Request body must be a JSON object')
        )
    rejected = sorted(set(payload) - set(UPDATABLE_FIELDS))
    if rejected:
        logger.debug('Refusing to update %s on %s', rejected, user_id)
        return error_response(InvalidRequest(
            f'Cannot update field(s): {", ".join(rejected)}'
        ))

    try:
        current = users.get_user_by_id(user_id)
        if current is None:
            return None, status.HTTP_200_OK, {}

        # Validate the record as it will be after the update.
        form = ProfileForm(formdata({**current.to_dict(), **payload}),
                           user_id=user_id)
        if not form.validate():
            logger.debug('Update for %s not valid: %s', user_id, form.errors)
            return validation_error(form, 'Invalid user data')

        changes = {}
        for field in payload:
            value = form[field].data
            # Blank values clear a field, as they do at registration.
            changes[field] = None if value == '' else value
        user = users.update(user_id, changes)
    except (DatastoreError, Unavailable) as e:
        logger.error('Error updating user %s: %s', user_id, e)
        return error_response(e, f'Error updating user {user_id}: {e}')
    return user.to_dict() if user else None, status.HTTP_200_OK, {}


def delete_user(user_id: str) -> ResponseData:
    """Delete a user. Succeeds whether or not the user exists."""
    try:
        users.delete(user_id)
    except (DatastoreError, Unavailable) as e:
        logger.error('Error deleting user %s: %s', user_id, e)
        return error_response(e, f'Error deleting user {user_id}: {e}')
    data = {'success': True, 'msg': f'Delete user with id: {user_id}'}
    return data, status.HTTP_200_OK, {}


def create_user(payload: Optional[Dict[str, Any]]) -> ResponseData:
    """
    Register a new user, and log them in.

    Unknown payload fields are ignored.

    Returns
    -------
    dict
        ``{'success': True, 'token': ...}``, plus the session cookie.
    int
        Status code. This should be 201 (Created) if all goes well.
    dict
        Headers to add to the response.

    """
    try:
        form = RegistrationForm(formdata(payload))
        if not form.validate():
            logger.debug('Registration not valid: %s', form.errors)
            return validation_error(form, 'Invalid user data')
        user = users.register(form.to_domain())
    except (InvalidRequest, RegistrationFailed) as e:
        return error_response(e, f'Error creating user: {e}')
    except (DatastoreError, Unavailable) as e:
        logger.error('Error creating user: %s', e)
        return error_response(e, f'Error creating user: {e}')
    logger.debug('Registered user %s', user.user_id)
    return token_response(user, status.HTTP_201_CREATED)
