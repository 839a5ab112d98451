"""
Provides a consistent logging setup for the user accounts API.

Use this in place of :func:`logging.getLogger`, e.g.

.. code-block:: python

   from userapi import logging
   logger = logging.getLogger(__name__)

"""
import logging
import os
import sys
from typing import IO

FORMAT = '%(asctime)s - %(name)s - %(levelname)s: "%(message)s"'
DATEFMT = '%d/%b/%Y:%H:%M:%S %z'


def getLogger(name: str, stream: IO = sys.stderr) -> logging.Logger:
    """
    Wrapper for :func:`logging.getLogger` that applies configuration.

    Parameters
    ----------
    name : str
    stream : IO
        Defaults to stderr.

    Returns
    -------
    :class:`logging.Logger`

    """
    logger = logging.getLogger(name)
    level = int(os.environ.get('LOGLEVEL', logging.INFO))
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(fmt=FORMAT, datefmt=DATEFMT))
        logger.addHandler(handler)
    logger.propagate = False
    return logger


def set_level(level: int) -> None:
    """Apply ``level`` to every logger created for this package."""
    for name, logger in logging.root.manager.loggerDict.items():
        if name.startswith('userapi') and isinstance(logger, logging.Logger):
            logger.setLevel(level)
