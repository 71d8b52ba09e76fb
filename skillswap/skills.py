"""Skill listings owned by users, and the categories they are filed under."""
import logging
from dataclasses import dataclass, fields
from typing import Optional

from sqlalchemy import delete, func, or_, select, update

from skillswap.errors import NotFoundError, NotFoundOrForbiddenError, ValidationError
from skillswap.models import PROFICIENCY_LEVELS, Skill, User

logger = logging.getLogger(__name__)


def validate_proficiency_level(level):
    if level not in PROFICIENCY_LEVELS:
        raise ValidationError(
            f"proficiency_level must be one of: {', '.join(PROFICIENCY_LEVELS)}"
        )
    return level


def _optional_text(value, field):
    if value is not None and not isinstance(value, str):
        raise ValidationError(f'{field} must be a string')
    return value


def _escape_like(text):
    return text.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


@dataclass
class SkillUpdate:
    """Fields an owner may change on a listing; ``None`` means leave as is."""

    skill_name: Optional[str] = None
    description: Optional[str] = None
    proficiency_level: Optional[str] = None
    category: Optional[str] = None
    available: Optional[bool] = None

    @classmethod
    def from_json(cls, data):
        changes = cls(
            skill_name=_optional_text(data.get('skill_name'), 'skill_name'),
            description=_optional_text(data.get('description'), 'description'),
            proficiency_level=data.get('proficiency_level'),
            category=_optional_text(data.get('category'), 'category'),
        )
        if changes.skill_name is not None and not changes.skill_name.strip():
            raise ValidationError('skill_name cannot be empty')
        if changes.proficiency_level is not None:
            validate_proficiency_level(changes.proficiency_level)

        available = data.get('available')
        if available is not None:
            # The web client sends booleans, older clients send 0/1
            if isinstance(available, bool):
                changes.available = available
            elif isinstance(available, int) and available in (0, 1):
                changes.available = bool(available)
            else:
                raise ValidationError('available must be a boolean')
        return changes

    def values(self):
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


class SkillCatalog:
    def __init__(self, db):
        self.db = db

    def list_available(self, category=None, search=None):
        """
        Public catalog: available skills joined with their owner's public
        name and location, newest first.

        Search is case-insensitive through LOWER(); SQLite folds ASCII only.
        """
        query = (
            select(Skill, User.username, User.full_name, User.location)
            .join(User, Skill.user_id == User.id)
            .where(Skill.available.is_(True))
        )
        if category:
            query = query.where(Skill.category == category)
        if search:
            pattern = f'%{_escape_like(search.lower())}%'
            query = query.where(or_(
                func.lower(Skill.skill_name).like(pattern, escape='\\'),
                func.lower(Skill.description).like(pattern, escape='\\'),
            ))
        query = query.order_by(Skill.created_at.desc(), Skill.id.desc())

        rows = self.db.session.execute(query).all()
        skills = []
        for skill, username, full_name, location in rows:
            skill_data = skill.to_dict()
            skill_data.update({'username': username, 'full_name': full_name, 'location': location})
            skills.append(skill_data)

        logger.debug("Listed %d available skills (category=%r, search=%r)", len(skills), category, search)
        return skills

    def list_owned_by(self, user_id):
        return self.db.session.execute(
            select(Skill)
            .where(Skill.user_id == user_id)
            .order_by(Skill.created_at.desc(), Skill.id.desc())
        ).scalars().all()

    def create(self, user_id, skill_name, proficiency_level, description=None, category=None):
        if not isinstance(skill_name, str) or not skill_name.strip():
            raise ValidationError('skill_name is required')
        validate_proficiency_level(proficiency_level)
        _optional_text(description, 'description')
        _optional_text(category, 'category')

        skill = Skill(
            user_id=user_id,
            skill_name=skill_name.strip(),
            description=description,
            proficiency_level=proficiency_level,
            category=category,
            available=True,
        )
        self.db.session.add(skill)
        self.db.session.commit()
        logger.info("User %s added skill %s (%s)", user_id, skill.id, skill.skill_name)
        return skill

    def update(self, skill_id, user_id, changes):
        values = changes.values()
        if 'skill_name' in values:
            values['skill_name'] = values['skill_name'].strip()

        # Ownership lives in the WHERE clause: a stranger's id looks missing
        if values:
            result = self.db.session.execute(
                update(Skill)
                .where(Skill.id == skill_id, Skill.user_id == user_id)
                .values(**values)
            )
            matched = result.rowcount
        else:
            matched = self.db.session.execute(
                select(func.count()).select_from(Skill)
                .where(Skill.id == skill_id, Skill.user_id == user_id)
            ).scalar()

        if not matched:
            self.db.session.rollback()
            raise NotFoundOrForbiddenError('Skill not found or not authorized')
        self.db.session.commit()
        logger.debug("User %s updated skill %s: %s", user_id, skill_id, sorted(values))

    def remove(self, skill_id, user_id):
        result = self.db.session.execute(
            delete(Skill).where(Skill.id == skill_id, Skill.user_id == user_id)
        )
        if result.rowcount == 0:
            self.db.session.rollback()
            raise NotFoundOrForbiddenError('Skill not found or not authorized')
        self.db.session.commit()
        logger.info("User %s deleted skill %s", user_id, skill_id)

    def resolve(self, skill_id):
        """Look a skill up by id regardless of availability."""
        skill = self.db.session.get(Skill, skill_id)
        if not skill:
            raise NotFoundError('Skill not found')
        return skill

    def count_owned_by(self, user_id):
        return self.db.session.execute(
            select(func.count()).select_from(Skill).where(Skill.user_id == user_id)
        ).scalar()


class CategoryIndex:
    def __init__(self, db):
        self.db = db

    def list_distinct(self):
        rows = self.db.session.execute(
            select(Skill.category)
            .where(Skill.category.is_not(None), Skill.category != '')
            .distinct()
        ).scalars().all()
        return list(rows)
