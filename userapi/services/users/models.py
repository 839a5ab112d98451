"""Users database models."""

import uuid

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import Boolean, Column, Integer, String, text

db: SQLAlchemy = SQLAlchemy()


def _new_user_id() -> str:
    return uuid.uuid4().hex


class DBUser(db.Model):  # type: ignore
    """
    User accounts table.

    +-----------------------+--------------+------+-----+---------+
    | Field                 | Type         | Null | Key | Default |
    +-----------------------+--------------+------+-----+---------+
    | id                    | varchar(32)  | NO   | PRI | uuid4   |
    | email                 | varchar(255) | NO   | UNI |         |
    | password              | varchar(255) | NO   |     |         |
    | user_name             | varchar(50)  | NO   | MUL |         |
    | gender                | varchar(20)  | YES  |     | NULL    |
    | age                   | int(11)      | YES  |     | NULL    |
    | first_name            | varchar(50)  | YES  | MUL | NULL    |
    | last_name             | varchar(50)  | YES  |     | NULL    |
    | admin                 | tinyint(1)   | NO   |     | 0       |
    | created_at            | int(11)      | NO   |     | 0       |
    | reset_password_token  | varchar(64)  | YES  | MUL | NULL    |
    | reset_password_expire | int(11)      | YES  |     | NULL    |
    +-----------------------+--------------+------+-----+---------+

    ``password`` holds a Werkzeug password hash, and ``reset_password_token``
    the sha256 hex digest of a reset token. Times are UNIX epoch seconds.
    """

    __tablename__ = 'users'

    user_id = Column('id', String(32), primary_key=True,
                     default=_new_user_id)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password = Column(String(255), nullable=False)
    user_name = Column(String(50), nullable=False, index=True)
    gender = Column(String(20))
    age = Column(Integer)
    first_name = Column(String(50), index=True)
    last_name = Column(String(50))
    admin = Column(Boolean, nullable=False, default=False,
                   server_default=text("'0'"))
    created_at = Column(Integer, nullable=False, server_default=text("'0'"))
    reset_password_token = Column(String(64), index=True)
    reset_password_expire = Column(Integer)
