"""
User accounts API.

The user accounts API is a Flask application that provides JSON endpoints for
managing user records and the authentication sessions attached to them. It is
the primary repository for user data.

Context
-------
Clients create accounts by posting user details, and are issued a session
token in response. The same token is issued on login, on password reset, and
on password change. It is a signed JWT carried in the ``token`` cookie (or as a
bearer token); nothing about it is stored server-side, so logging out only
clears the cookie.

Users who forget their password request a reset token. Only a hash of that
token is stored, and the token itself is sent to the user by e-mail. Possession
of the token before it expires authorizes exactly one password reset.

Administrative endpoints allow listing, updating and deleting user records.
Updates are restricted to an allow-list of profile fields.
"""
