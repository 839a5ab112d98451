"""
Authorization of user requests.

This module provides :func:`scoped`, a decorator factory used to protect Flask
routes for which an authenticated session is required. An authorizer function
may be provided for application-specific checks on a per-request basis. Its
call signature should be ``(session: domain.Session, *args, **kwargs) ->
bool``, where ``*args`` and ``**kwargs`` are the arguments passed by Flask to
the decorated route function (e.g. the URL parameters).

.. code-block:: python

   def is_owner(session: domain.Session, user_id: str, **kwargs) -> bool:
       return session.user_id == user_id


   @blueprint.route('/users/<string:user_id>/avatar', methods=['PUT'])
   @scoped(authorizer=is_owner)
   def set_avatar(user_id: str):
       ...

"""

from typing import Optional, Callable, Any
from functools import wraps

from flask import request
from werkzeug.exceptions import Unauthorized, Forbidden

from userapi import logging

logger = logging.getLogger(__name__)


def scoped(authorizer: Optional[Callable] = None) -> Callable:
    """
    Generate a decorator to enforce authorization requirements.

    Parameters
    ----------
    authorizer : function
        Called with the session and the route arguments. If it returns
        ``False``, a :class:`.Forbidden` exception is raised.

    Returns
    -------
    function

    """
    def protector(func: Callable) -> Callable:
        """Decorator that provides session enforcement."""
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            session = getattr(request, 'auth', None)
            if session is None:
                logger.debug('No valid session; aborting')
                raise Unauthorized('Not authorized to access this route')

            if authorizer and not authorizer(session, *args, **kwargs):
                logger.debug('Authorizer returned negative result')
                raise Forbidden('Access denied')

            logger.debug('Request is authorized, proceeding')
            return func(*args, **kwargs)
        return wrapper
    return protector
