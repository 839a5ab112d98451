"""
Integration with the users datastore.

This module is the only place that touches the ``users`` table. It exposes a
small set of operations over :class:`.domain.User` objects, so that request
controllers can be tested without a database by mocking this module.

Database errors are raised as :class:`.exceptions.Unavailable` (the database
could not be reached) or :class:`.exceptions.DatastoreError`.
"""

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm.attributes import InstrumentedAttribute

from userapi import logging
from userapi.domain import FIELDS, User, UserRegistration
from . import exceptions, passwords
from .exceptions import NoSuchUser, AuthenticationFailed, \
    PasswordAuthenticationFailed, InvalidResetToken, RegistrationFailed, \
    DatastoreError, Unavailable
from .models import DBUser, db
from .util import transaction, init_app, create_all, drop_all, \
    is_available, now, from_epoch

logger = logging.getLogger(__name__)

ASCENDING = 1
DESCENDING = -1


def find(filter: Dict[str, bool], limit: Optional[int] = None,
         sort: Optional[Dict[str, int]] = None) -> List[User]:
    """
    Retrieve users.

    Parameters
    ----------
    filter : dict
        Maps public field names to a presence flag. ``{'gender': True}``
        selects users whose gender is set; the field's value is not matched.
    limit : int or None
        Maximum number of users to return. ``None`` or ``0`` means no limit.
    sort : dict or None
        Maps public field names to :const:`ASCENDING` or :const:`DESCENDING`.

    Returns
    -------
    list
        Of :class:`.User`.

    """
    with transaction() as session:
        query = session.query(DBUser)
        for field, present in filter.items():
            column = _column(field)
            query = query.filter(column.isnot(None) if present
                                 else column.is_(None))
        for field, direction in (sort or {}).items():
            column = _column(field)
            query = query.order_by(column.asc() if direction == ASCENDING
                                   else column.desc())
        if limit:
            query = query.limit(limit)
        return [_to_domain(db_user) for db_user in query.all()]


def get_user_by_id(user_id: str) -> Optional[User]:
    """Load a user, or ``None`` if there is no such user."""
    with transaction() as session:
        db_user = session.get(DBUser, user_id)
        return _to_domain(db_user) if db_user is not None else None


def does_email_exist(email: str,
                     exclude_user_id: Optional[str] = None) -> bool:
    """
    Determine whether a user with a particular address already exists.

    Parameters
    ----------
    email : str
    exclude_user_id : str or None
        If provided, a match on this user is not counted. Used when a user
        updates their own profile.

    Returns
    -------
    bool

    """
    with transaction() as session:
        query = session.query(DBUser).filter(DBUser.email == email)
        if exclude_user_id is not None:
            query = query.filter(DBUser.user_id != exclude_user_id)
        data = query.first()
    return data is not None


def register(registration: UserRegistration) -> User:
    """
    Create a new user.

    Parameters
    ----------
    registration : :class:`.UserRegistration`

    Returns
    -------
    :class:`.User`
        Data about the created user.

    Raises
    ------
    :class:`RegistrationFailed`
        If the record could not be written, e.g. the e-mail is taken.

    """
    db_user = DBUser(
        email=registration.email,
        password=passwords.hash_password(registration.password),
        user_name=registration.user_name,
        gender=registration.gender,
        age=registration.age,
        first_name=registration.first_name,
        last_name=registration.last_name,
        admin=False,
        created_at=now()
    )
    try:
        with transaction() as session:
            session.add(db_user)
    except DatastoreError as e:
        logger.debug('Could not create user: %s', e)
        raise RegistrationFailed(f'Could not create user: {e}') from e
    logger.debug('Created user %s', db_user.user_id)
    return _to_domain(db_user)


def update(user_id: str, changes: Dict[str, Any]) -> Optional[User]:
    """
    Apply ``changes`` (keyed by public field name) to a user.

    Fields not present in ``changes`` are left untouched. Returns the updated
    user, or ``None`` if there is no such user.
    """
    with transaction() as session:
        db_user = session.get(DBUser, user_id)
        if db_user is None:
            return None
        for field, value in changes.items():
            attr = FIELDS[field]
            if getattr(db_user, attr) != value:
                setattr(db_user, attr, value)
    return _to_domain(db_user)


def delete(user_id: str) -> None:
    """Delete a user, if it exists."""
    with transaction() as session:
        session.query(DBUser).filter(DBUser.user_id == user_id).delete()


def delete_all() -> int:
    """Delete every user. Returns the number of users deleted."""
    with transaction() as session:
        count: int = session.query(DBUser).delete()
    logger.debug('Deleted %i users', count)
    return count


def authenticate(email: str, password: str) -> User:
    """
    Validate an e-mail address and password.

    Raises
    ------
    :class:`AuthenticationFailed`
        Whether the user does not exist or the password is wrong.

    """
    with transaction() as session:
        db_user = session.query(DBUser) \
            .filter(DBUser.email == email) \
            .first()
    if db_user is None:
        logger.debug('No user with that email')
        raise AuthenticationFailed('Invalid credentials')
    try:
        passwords.check_password(password, db_user.password)
    except PasswordAuthenticationFailed as e:
        logger.debug('Wrong password for user %s', db_user.user_id)
        raise AuthenticationFailed('Invalid credentials') from e
    return _to_domain(db_user)


def check_password(user_id: str, password: str) -> User:
    """
    Verify the current password of a user.

    Raises
    ------
    :class:`NoSuchUser`
    :class:`PasswordAuthenticationFailed`

    """
    db_user = _get_db_user(user_id)
    passwords.check_password(password, db_user.password)
    return _to_domain(db_user)


def set_password(user_id: str, password: str) -> User:
    """Replace the password of a user."""
    with transaction() as session:
        db_user = session.get(DBUser, user_id)
        if db_user is None:
            raise NoSuchUser('User does not exist')
        db_user.password = passwords.hash_password(password)
    return _to_domain(db_user)


def issue_reset_token(email: str, expires_in: int) -> Tuple[User, str]:
    """
    Generate a password reset token for the user with ``email``.

    Only the hash of the token and its expiry are stored.

    Returns
    -------
    :class:`.User`
    str
        The raw reset token. This is the only place it is available.

    Raises
    ------
    :class:`NoSuchUser`

    """
    token = passwords.new_reset_token()
    with transaction() as session:
        db_user = session.query(DBUser) \
            .filter(DBUser.email == email) \
            .first()
        if db_user is None:
            raise NoSuchUser('User does not exist')
        db_user.reset_password_token = passwords.hash_reset_token(token)
        db_user.reset_password_expire = now() + expires_in
    return _to_domain(db_user), token


def clear_reset_token(user_id: str) -> None:
    """Remove any outstanding reset token for a user."""
    with transaction() as session:
        db_user = session.get(DBUser, user_id)
        if db_user is not None:
            db_user.reset_password_token = None
            db_user.reset_password_expire = None


def reset_password(token: str, password: str) -> User:
    """
    Set a new password using a reset token, and consume the token.

    Raises
    ------
    :class:`InvalidResetToken`
        If no user has this token, or it has expired.

    """
    with transaction() as session:
        db_user = session.query(DBUser) \
            .filter(DBUser.reset_password_token
                    == passwords.hash_reset_token(token)) \
            .filter(DBUser.reset_password_expire > now()) \
            .first()
        if db_user is None:
            raise InvalidResetToken('Invalid token')
        db_user.password = passwords.hash_password(password)
        db_user.reset_password_token = None
        db_user.reset_password_expire = None
    return _to_domain(db_user)


def _column(field: str) -> InstrumentedAttribute:
    try:
        return getattr(DBUser, FIELDS[field])
    except KeyError as e:
        raise ValueError(f'Unknown field: {field}') from e


def _get_db_user(user_id: str) -> DBUser:
    with transaction() as session:
        db_user = session.get(DBUser, user_id)
    if db_user is None:
        raise NoSuchUser('User does not exist')
    return db_user


def _to_domain(db_user: DBUser) -> User:
    return User(
        user_id=db_user.user_id,
        email=db_user.email,
        user_name=db_user.user_name,
        gender=db_user.gender,
        age=db_user.age,
        first_name=db_user.first_name,
        last_name=db_user.last_name,
        admin=bool(db_user.admin),
        created_at=from_epoch(db_user.created_at)
        if db_user.created_at is not None else None
    )
