import logging
import re

from sqlalchemy import or_
from werkzeug.security import generate_password_hash, check_password_hash

from errors import Conflict, InvalidCredential, NotFound, ValidationError
from identity import Identity
from models import db, User

logger = logging.getLogger(__name__)

EMAIL_REGEX = re.compile(r"[^@]+@[^@]+\.[^@]+")
MIN_PASSWORD_LENGTH = 6
PROFILE_FIELDS = ('first_name', 'last_name', 'phone', 'street', 'city', 'state', 'zip_code', 'country')


def register(username, email, raw_password, confirm_password=None):
    username = (username or '').strip()
    email = (email or '').strip().lower()
    raw_password = raw_password or ''

    errors = []
    if not username or not email or not raw_password:
        errors.append('All fields are required.')
    elif '@' in username:
        errors.append('Username cannot contain "@".')
    elif not EMAIL_REGEX.match(email):
        errors.append('Invalid email format.')
    elif len(raw_password) < MIN_PASSWORD_LENGTH:
        errors.append(f'Password must be at least {MIN_PASSWORD_LENGTH} characters long.')
    elif confirm_password is not None and confirm_password != raw_password:
        errors.append('Passwords do not match.')
    if errors:
        raise ValidationError(errors)

    existing = User.query.filter(or_(User.username == username, User.email == email)).first()
    if existing:
        raise Conflict('User with this email or username already exists.')

    user = User(username=username, email=email, password_hash=generate_password_hash(raw_password))
    db.session.add(user)
    db.session.commit()
    logger.info('Registered user %s', user.id)
    return Identity.from_user(user)


def verify(identifier, raw_password):
    identifier = (identifier or '').strip()
    # Usernames never contain "@", so the identifier picks exactly one column
    if '@' in identifier:
        user = User.query.filter_by(email=identifier.lower()).first()
    else:
        user = User.query.filter_by(username=identifier).first()
    if user is None:
        raise NotFound('Invalid credentials.')
    if not check_password_hash(user.password_hash, raw_password or ''):
        raise InvalidCredential()
    return Identity.from_user(user)


def get_user(user_id):
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFound('User not found.')
    return user


def update_profile(user_id, fields):
    user = get_user(user_id)
    for name in PROFILE_FIELDS:
        if name in fields:
            value = (fields.get(name) or '').strip()
            setattr(user, name, value or None)
    db.session.commit()
    return user
