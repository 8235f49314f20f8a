"""Request-scoped identity.

The authenticated user is kept in the session as a minimal ``Identity`` and
handed to views explicitly; components never read the session themselves.
"""
import logging
from dataclasses import dataclass, asdict
from functools import wraps

from flask import session, flash, redirect, url_for

from errors import Unauthorized

logger = logging.getLogger(__name__)

SESSION_KEY = 'user'


@dataclass(frozen=True)
class Identity:
    id: int
    username: str
    email: str

    @classmethod
    def from_user(cls, user):
        return cls(id=user.id, username=user.username, email=user.email)


def authenticate(identity):
    session.clear()
    session[SESSION_KEY] = asdict(identity)
    session.permanent = True
    logger.info('User %s signed in', identity.id)


def current_identity():
    data = session.get(SESSION_KEY)
    if not data:
        return None
    try:
        return Identity(**data)
    except TypeError:
        logger.warning('Dropping malformed session identity')
        session.pop(SESSION_KEY, None)
        return None


def require_identity():
    identity = current_identity()
    if identity is None:
        raise Unauthorized()
    return identity


def login_required(f):
    """Reject anonymous requests; the view receives ``identity=...``."""
    @wraps(f)
    def wrapped(*args, **kwargs):
        try:
            identity = require_identity()
        except Unauthorized as e:
            flash(e.message, e.category)
            return redirect(url_for('auth.login'))
        return f(*args, identity=identity, **kwargs)
    return wrapped


def guest_only(f):
    @wraps(f)
    def wrapped(*args, **kwargs):
        if current_identity() is not None:
            return redirect(url_for('products.index'))
        return f(*args, **kwargs)
    return wrapped


def end():
    identity = current_identity()
    try:
        session.clear()
    except Exception:
        logger.exception('Failed to clear session on logout')
    if identity is not None:
        logger.info('User %s signed out', identity.id)


def inject_identity():
    return {'current_user': current_identity()}
