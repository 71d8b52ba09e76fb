"""
Skill requests and the negotiation lifecycle between requester and owner.

A request starts ``pending``. Only the owner of the requested skill may move
it, and only along these edges::

    pending  -> accepted -> completed
    pending  -> rejected

``rejected`` and ``completed`` are terminal. Sibling requests against the
same skill are independent; accepting one leaves the others as they are.
"""
import logging

from sqlalchemy import select, update
from sqlalchemy.orm import aliased

from skillswap.errors import (
    InvalidTransitionError,
    NotFoundOrForbiddenError,
    SelfRequestError,
    ValidationError,
)
from skillswap.models import REQUEST_STATUSES, SkillRequest, User, utcnow

logger = logging.getLogger(__name__)

TRANSITIONS = {
    'pending': frozenset({'accepted', 'rejected'}),
    'accepted': frozenset({'completed'}),
    'rejected': frozenset(),
    'completed': frozenset(),
}


def can_transition(current, new):
    return new in TRANSITIONS.get(current, ())


class RequestEngine:
    def __init__(self, db, catalog):
        self.db = db
        self.catalog = catalog

    def create(self, requester_id, skill_id, offered_skill, message=None):
        if isinstance(skill_id, bool) or not isinstance(skill_id, int):
            raise ValidationError('skill_id must be an integer')
        if not isinstance(offered_skill, str) or not offered_skill.strip():
            raise ValidationError('offered_skill is required')
        if message is not None and not isinstance(message, str):
            raise ValidationError('message must be a string')

        # Availability is deliberately not rechecked here
        skill = self.catalog.resolve(skill_id)
        if skill.user_id == requester_id:
            raise SelfRequestError()

        now = utcnow()
        skill_request = SkillRequest(
            requester_id=requester_id,
            skill_owner_id=skill.user_id,
            skill_id=skill.id,
            requested_skill=skill.skill_name,
            offered_skill=offered_skill.strip(),
            message=message,
            status='pending',
            created_at=now,
            updated_at=now,
        )
        self.db.session.add(skill_request)
        self.db.session.commit()

        logger.info(
            "User %s requested skill %s from user %s (request %s)",
            requester_id, skill.id, skill.user_id, skill_request.id,
        )
        return skill_request

    def _list(self, where, counterpart_id, prefix):
        counterpart = aliased(User)
        rows = self.db.session.execute(
            select(SkillRequest, counterpart.username, counterpart.full_name)
            .join(counterpart, counterpart.id == counterpart_id)
            .where(where)
            .order_by(SkillRequest.created_at.desc(), SkillRequest.id.desc())
        ).all()

        requests_data = []
        for skill_request, username, full_name in rows:
            data = skill_request.to_dict()
            data[f'{prefix}_username'] = username
            data[f'{prefix}_name'] = full_name
            requests_data.append(data)
        return requests_data

    def list_received_by(self, owner_id):
        return self._list(
            SkillRequest.skill_owner_id == owner_id, SkillRequest.requester_id, 'requester'
        )

    def list_sent_by(self, requester_id):
        return self._list(
            SkillRequest.requester_id == requester_id, SkillRequest.skill_owner_id, 'owner'
        )

    def update_status(self, request_id, owner_id, new_status):
        if new_status not in REQUEST_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(REQUEST_STATUSES)}")

        current = self.db.session.execute(
            select(SkillRequest.status)
            .where(SkillRequest.id == request_id, SkillRequest.skill_owner_id == owner_id)
        ).scalar()
        if current is None:
            raise NotFoundOrForbiddenError('Request not found or not authorized')

        if not can_transition(current, new_status):
            raise InvalidTransitionError(f'Cannot change request status from {current} to {new_status}')

        # Only applies if nobody moved the request since it was read
        result = self.db.session.execute(
            update(SkillRequest)
            .where(
                SkillRequest.id == request_id,
                SkillRequest.skill_owner_id == owner_id,
                SkillRequest.status == current,
            )
            .values(status=new_status, updated_at=utcnow())
        )
        if result.rowcount == 0:
            self.db.session.rollback()
            raise InvalidTransitionError('Request status changed concurrently, reload and retry')
        self.db.session.commit()

        logger.info("Request %s moved %s -> %s by user %s", request_id, current, new_status, owner_id)

    def count_by_status(self, user_id):
        """Status counters for one user's received and sent requests."""
        received = self.list_received_by(user_id)
        sent = self.list_sent_by(user_id)
        return {
            'pending_received': sum(1 for r in received if r['status'] == 'pending'),
            'pending_sent': sum(1 for r in sent if r['status'] == 'pending'),
            'completed_exchanges': sum(1 for r in received if r['status'] == 'completed'),
        }
