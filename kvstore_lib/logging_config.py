from __future__ import annotations
import logging
from typing import Union


def configure_logging(level: Union[str, int] = 'INFO') -> logging.Logger:
    """Configure root logging for the application.

    Removes any handlers installed earlier (e.g. by imported libraries) and
    installs a single stream handler at `level`. Unknown level names fall
    back to INFO. Returns a module logger for the caller.
    """
    if isinstance(level, str):
        numeric = getattr(logging, level.upper(), None)
        if not isinstance(numeric, int):
            numeric = logging.INFO
    else:
        numeric = level

    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    logging.basicConfig(level=numeric, format='%(asctime)s %(levelname)s [%(name)s]: %(message)s')
    logging.log(100, f'[kvstore]: Log level set to: {logging.getLevelName(numeric)}')

    # Keep known noisy libraries quiet by default
    logging.getLogger('tarantool').setLevel(logging.WARNING)
    logging.getLogger('uvicorn.access').setLevel(logging.WARNING)

    return logging.getLogger(__name__)
