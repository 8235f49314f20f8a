"""Logging setup for the ecofinds application.

Every module logs through ``logging.getLogger(__name__)``; those loggers and
Flask's ``app.logger`` share one console handler attached here.
"""
import logging
import sys

_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s'
_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Module loggers configured alongside the app logger
LOGGER_NAMES = ('accounts', 'catalog', 'media', 'identity', 'cart', 'purchases',
                'app')


def setup_logging(app):
    level = logging.getLevelName(str(app.config.get('LOG_LEVEL', 'INFO')).upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))

    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        # Repeated create_app calls (tests) must not stack handlers
        if not logger.handlers:
            logger.addHandler(handler)

    app.logger.setLevel(level)
    return handler
