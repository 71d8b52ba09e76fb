from datetime import datetime, timezone

from sqlalchemy import event
from sqlalchemy.engine import Engine

from skillswap import db

PROFICIENCY_LEVELS = ('Beginner', 'Intermediate', 'Advanced', 'Expert')
REQUEST_STATUSES = ('pending', 'accepted', 'rejected', 'completed')


def utcnow():
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _isoformat(value):
    return value.isoformat() if value else None


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless this is set per connection
    if type(dbapi_connection).__module__.startswith('sqlite3'):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(50), nullable=False, unique=True)
    email = db.Column(db.String(255), nullable=False, unique=True)
    password_hash = db.Column(db.Text, nullable=False)
    full_name = db.Column(db.String(255), nullable=False)
    bio = db.Column(db.Text, nullable=True)
    location = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self):
        """Public fields only; the password hash is never serialized."""
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'full_name': self.full_name,
            'bio': self.bio,
            'location': self.location,
            'created_at': _isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<User {self.id}: {self.username}>'


class Skill(db.Model):
    __tablename__ = 'skills'
    __table_args__ = (
        db.CheckConstraint(
            "proficiency_level IN ('Beginner', 'Intermediate', 'Advanced', 'Expert')",
            name='ck_skills_proficiency_level',
        ),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    skill_name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    proficiency_level = db.Column(db.String(20), nullable=False, default='Intermediate')
    category = db.Column(db.String(100), nullable=True, index=True)
    available = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'skill_name': self.skill_name,
            'description': self.description,
            'proficiency_level': self.proficiency_level,
            'category': self.category,
            'available': bool(self.available),
            'created_at': _isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<Skill {self.id}: {self.skill_name}>'


class SkillRequest(db.Model):
    __tablename__ = 'skill_requests'
    __table_args__ = (
        db.CheckConstraint(
            "status IN ('pending', 'accepted', 'rejected', 'completed')",
            name='ck_skill_requests_status',
        ),
    )

    id = db.Column(db.Integer, primary_key=True)
    requester_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    skill_owner_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    # Cleared when the skill is deleted; the request itself is kept
    skill_id = db.Column(db.Integer, db.ForeignKey('skills.id', ondelete='SET NULL'), nullable=True)
    # Name of the skill when the request was made; never follows renames
    requested_skill = db.Column(db.String(255), nullable=False)
    offered_skill = db.Column(db.Text, nullable=True)
    message = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(20), nullable=False, default='pending')
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'requester_id': self.requester_id,
            'skill_owner_id': self.skill_owner_id,
            'skill_id': self.skill_id,
            'requested_skill': self.requested_skill,
            'offered_skill': self.offered_skill,
            'message': self.message,
            'status': self.status,
            'created_at': _isoformat(self.created_at),
            'updated_at': _isoformat(self.updated_at),
        }

    def __repr__(self):
        return f'<SkillRequest {self.id}: {self.status}>'


class Exchange(db.Model):
    """Completed trade with mutual ratings. Schema only; no operation reads or writes it."""

    __tablename__ = 'exchanges'
    __table_args__ = (
        db.CheckConstraint('rating_user1 >= 1 AND rating_user1 <= 5', name='ck_exchanges_rating_user1'),
        db.CheckConstraint('rating_user2 >= 1 AND rating_user2 <= 5', name='ck_exchanges_rating_user2'),
    )

    id = db.Column(db.Integer, primary_key=True)
    request_id = db.Column(db.Integer, db.ForeignKey('skill_requests.id', ondelete='CASCADE'), nullable=False)
    user1_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    user2_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    user1_skill = db.Column(db.String(255), nullable=False)
    user2_skill = db.Column(db.String(255), nullable=False)
    rating_user1 = db.Column(db.Integer, nullable=True)
    rating_user2 = db.Column(db.Integer, nullable=True)
    completed_at = db.Column(db.DateTime, nullable=False, default=utcnow)
