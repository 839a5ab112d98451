"""Functions for working with session tokens on user requests."""

from typing import Optional
from datetime import datetime, timedelta

import jwt
from pytz import UTC

from . import exceptions
from .. import domain

ALGORITHM = 'HS256'


def encode(user_id: str, secret: str, expires_in: int,
           issued_at: Optional[datetime] = None) -> str:
    """
    Sign a session token for ``user_id``.

    Parameters
    ----------
    user_id : str
        Becomes the ``sub`` claim.
    secret : str
    expires_in : int
        Lifetime of the token, in seconds.
    issued_at : datetime
        Defaults to now.

    Returns
    -------
    str

    """
    if issued_at is None:
        issued_at = datetime.now(tz=UTC)
    claims = {
        'sub': str(user_id),
        'iat': issued_at,
        'exp': issued_at + timedelta(seconds=expires_in)
    }
    return jwt.encode(claims, secret, algorithm=ALGORITHM)


def decode(token: str, secret: str) -> domain.Session:
    """Decode a session token to access session information."""
    try:
        data: dict = jwt.decode(token, secret, algorithms=[ALGORITHM],
                                options={'require': ['sub', 'iat', 'exp']})
    except jwt.exceptions.ExpiredSignatureError as e:
        raise exceptions.ExpiredToken('Token has expired') from e
    except jwt.exceptions.InvalidTokenError as e:
        raise exceptions.InvalidToken('Not a valid token') from e

    return domain.Session(
        user_id=data['sub'],
        start_time=datetime.fromtimestamp(data['iat'], tz=UTC),
        end_time=datetime.fromtimestamp(data['exp'], tz=UTC)
    )
