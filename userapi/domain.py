"""Defines the core data structures for the user accounts API."""

from typing import Any, Dict, NamedTuple, Optional
from datetime import datetime

from pytz import UTC


FIELDS = {
    'id': 'user_id',
    'email': 'email',
    'userName': 'user_name',
    'gender': 'gender',
    'age': 'age',
    'firstName': 'first_name',
    'lastName': 'last_name',
    'admin': 'admin',
    'createdAt': 'created_at',
}
"""Maps public (JSON) field names to attribute names."""

UPDATABLE_FIELDS = ('userName', 'gender', 'age', 'firstName', 'lastName',
                    'email')
"""Public fields that may be changed through an update request."""


class User(NamedTuple):
    """Represents a user account. Never carries password material."""

    user_id: str
    email: str
    user_name: str
    gender: Optional[str] = None
    age: Optional[int] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    admin: bool = False
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Generate the public representation of this user."""
        data = {key: getattr(self, attr) for key, attr in FIELDS.items()}
        if self.created_at is not None:
            data['createdAt'] = self.created_at.isoformat()
        return data


class UserRegistration(NamedTuple):
    """Represents a request to register a new user."""

    email: str
    password: str
    user_name: str
    gender: Optional[str] = None
    age: Optional[int] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class Session(NamedTuple):
    """Claims carried by a decoded session token."""

    user_id: str
    start_time: datetime
    end_time: datetime

    @property
    def expired(self) -> bool:
        """Whether the session has passed its end time."""
        return datetime.now(tz=UTC) >= self.end_time
