"""Web Server Gateway Interface entry-point."""

import os

from userapi.factory import create_web_app

__flask_app__ = None


def application(environ, start_response):
    """WSGI application factory."""
    for key, value in environ.items():
        # Copy string WSGI environ to os.environ, for config.py.
        if type(value) is str:
            os.environ[key] = value
    global __flask_app__
    if __flask_app__ is None:
        __flask_app__ = create_web_app()
    return __flask_app__(environ, start_response)
