"""Exceptions for session token handling."""


class InvalidToken(ValueError):
    """Token is malformed, or its signature does not check out."""


class ExpiredToken(ValueError):
    """Token has expired."""
