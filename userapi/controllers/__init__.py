"""Request controllers for the user accounts API."""

from . import authentication, passwords, users
