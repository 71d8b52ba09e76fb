"""User accounts: registration, login and the editable public profile."""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import or_, update
from sqlalchemy.exc import IntegrityError

from skillswap.errors import (
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from skillswap.models import User

logger = logging.getLogger(__name__)


def _require(value, field):
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f'{field} is required')
    if not isinstance(value, str):
        raise ValidationError(f'{field} must be a string')
    return value


class CredentialStore:
    def __init__(self, db, bcrypt):
        self.db = db
        self.bcrypt = bcrypt

    def register(self, username, email, password, full_name, bio=None, location=None):
        username = _require(username, 'username').strip()
        email = _require(email, 'email').strip()
        password = _require(password, 'password')
        full_name = _require(full_name, 'full_name').strip()
        for field, value in (('bio', bio), ('location', location)):
            if value is not None and not isinstance(value, str):
                raise ValidationError(f'{field} must be a string')

        # Check if the user already exists
        existing = User.query.filter(or_(User.username == username, User.email == email)).first()
        if existing:
            raise ConflictError()

        # Hash the password and insert the new user
        user = User(
            username=username,
            email=email,
            password_hash=self.bcrypt.generate_password_hash(password).decode('utf-8'),
            full_name=full_name,
            bio=bio,
            location=location,
        )
        self.db.session.add(user)
        try:
            self.db.session.commit()
        except IntegrityError:
            # Lost a race against a concurrent registration
            self.db.session.rollback()
            raise ConflictError()

        logger.info("Registered user %s (id=%s)", user.username, user.id)
        return user

    def authenticate(self, username_or_email, password):
        if not isinstance(username_or_email, str) or not isinstance(password, str) \
                or not username_or_email or not password:
            raise InvalidCredentialsError()

        user = User.query.filter(
            or_(User.username == username_or_email, User.email == username_or_email)
        ).first()

        if user and self.bcrypt.check_password_hash(user.password_hash, password):
            logger.debug("User %s authenticated", user.id)
            return user

        logger.warning("Failed login attempt")
        raise InvalidCredentialsError()


@dataclass
class ProfileUpdate:
    """Editable profile fields; ``None`` leaves the stored value unchanged."""

    full_name: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None

    @classmethod
    def from_json(cls, data):
        changes = cls(
            full_name=data.get('full_name'),
            bio=data.get('bio'),
            location=data.get('location'),
        )
        for field in ('full_name', 'bio', 'location'):
            value = getattr(changes, field)
            if value is not None and not isinstance(value, str):
                raise ValidationError(f'{field} must be a string')
        if changes.full_name is not None and not changes.full_name.strip():
            raise ValidationError('full_name cannot be empty')
        return changes


class ProfileStore:
    def __init__(self, db):
        self.db = db

    def get(self, user_id):
        user = self.db.session.get(User, user_id)
        if not user:
            raise NotFoundError('User not found')
        return user

    def update(self, user_id, changes):
        values = {
            field: getattr(changes, field)
            for field in ('full_name', 'bio', 'location')
            if getattr(changes, field) is not None
        }
        if not values:
            # Nothing to change, but the user must still exist
            self.get(user_id)
            return

        result = self.db.session.execute(
            update(User).where(User.id == user_id).values(**values)
        )
        if result.rowcount == 0:
            self.db.session.rollback()
            raise NotFoundError('User not found')
        self.db.session.commit()
        logger.debug("Updated profile of user %s: %s", user_id, sorted(values))
