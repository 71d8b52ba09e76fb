from datetime import datetime

import pytest

from skillswap import db
from skillswap.errors import (
    InvalidTransitionError,
    NotFoundError,
    NotFoundOrForbiddenError,
    SelfRequestError,
    ValidationError,
)
from skillswap.exchange_requests import can_transition
from skillswap.models import Skill, SkillRequest, User
from skillswap.skills import SkillUpdate


@pytest.fixture
def alice(services):
    return services.credentials.register('alice', 'alice@example.com', 'pw', 'Alice Tran')


@pytest.fixture
def bob(services):
    return services.credentials.register('bob', 'bob@example.com', 'pw', 'Bob Le')


@pytest.fixture
def guitar(services, alice):
    return services.catalog.create(alice.id, 'Guitar Lessons', 'Advanced', category='Music')


def test_create_snapshots_skill_and_owner(services, alice, bob, guitar):
    request = services.requests.create(bob.id, guitar.id, 'Spanish Lessons', message='Weekends?')

    assert request.id
    assert request.status == 'pending'
    assert request.requester_id == bob.id
    assert request.skill_owner_id == alice.id
    assert request.requested_skill == 'Guitar Lessons'
    assert request.created_at == request.updated_at


def test_rename_does_not_change_requested_skill(services, alice, bob, guitar):
    request = services.requests.create(bob.id, guitar.id, 'Spanish Lessons')
    services.catalog.update(guitar.id, alice.id, SkillUpdate(skill_name='Jazz Guitar'))

    received = services.requests.list_received_by(alice.id)
    assert received[0]['id'] == request.id
    assert received[0]['requested_skill'] == 'Guitar Lessons'


def test_self_request_is_rejected(services, alice, guitar):
    with pytest.raises(SelfRequestError):
        services.requests.create(alice.id, guitar.id, 'Anything')
    assert services.requests.list_received_by(alice.id) == []


def test_unknown_skill(services, bob):
    with pytest.raises(NotFoundError):
        services.requests.create(bob.id, 12345, 'Spanish Lessons')


def test_unavailable_skill_can_still_be_requested(services, alice, bob, guitar):
    services.catalog.update(guitar.id, alice.id, SkillUpdate(available=False))
    request = services.requests.create(bob.id, guitar.id, 'Spanish Lessons')
    assert request.status == 'pending'


@pytest.mark.parametrize('skill_id, offered', [('1', 'Spanish'), (None, 'Spanish'), (1, ''), (1, None)])
def test_create_validates_input(services, bob, skill_id, offered):
    with pytest.raises(ValidationError):
        services.requests.create(bob.id, skill_id, offered)


def test_sibling_requests_are_independent(services, alice, bob, guitar):
    carol = services.credentials.register('carol', 'carol@example.com', 'pw', 'Carol')
    from_bob = services.requests.create(bob.id, guitar.id, 'Spanish Lessons')
    from_carol = services.requests.create(carol.id, guitar.id, 'Cooking')

    services.requests.update_status(from_bob.id, alice.id, 'accepted')

    statuses = {r['id']: r['status'] for r in services.requests.list_received_by(alice.id)}
    assert statuses == {from_bob.id: 'accepted', from_carol.id: 'pending'}


def test_lists_are_enriched_and_newest_first(services, alice, bob, guitar):
    chess = services.catalog.create(alice.id, 'Chess', 'Expert')
    first = services.requests.create(bob.id, guitar.id, 'Spanish Lessons')
    second = services.requests.create(bob.id, chess.id, 'Cooking')

    received = services.requests.list_received_by(alice.id)
    assert [r['id'] for r in received] == [second.id, first.id]
    assert received[0]['requester_username'] == 'bob'
    assert received[0]['requester_name'] == 'Bob Le'

    sent = services.requests.list_sent_by(bob.id)
    assert [r['id'] for r in sent] == [second.id, first.id]
    assert sent[0]['owner_username'] == 'alice'
    assert sent[0]['owner_name'] == 'Alice Tran'

    assert services.requests.list_sent_by(alice.id) == []
    assert services.requests.list_received_by(bob.id) == []


def test_only_the_owner_may_change_status(services, alice, bob, guitar):
    request = services.requests.create(bob.id, guitar.id, 'Spanish Lessons')

    with pytest.raises(NotFoundOrForbiddenError):
        services.requests.update_status(request.id, bob.id, 'accepted')
    with pytest.raises(NotFoundOrForbiddenError):
        services.requests.update_status(9999, alice.id, 'accepted')

    assert services.requests.list_sent_by(bob.id)[0]['status'] == 'pending'


@pytest.mark.parametrize('current, new, allowed', [
    ('pending', 'accepted', True),
    ('pending', 'rejected', True),
    ('accepted', 'completed', True),
    ('pending', 'completed', False),
    ('pending', 'pending', False),
    ('accepted', 'rejected', False),
    ('rejected', 'accepted', False),
    ('completed', 'pending', False),
])
def test_transition_table(current, new, allowed):
    assert can_transition(current, new) is allowed


def test_full_lifecycle(services, alice, bob, guitar):
    request = services.requests.create(bob.id, guitar.id, 'Spanish Lessons')

    with pytest.raises(InvalidTransitionError):
        services.requests.update_status(request.id, alice.id, 'completed')

    services.requests.update_status(request.id, alice.id, 'accepted')
    services.requests.update_status(request.id, alice.id, 'completed')

    with pytest.raises(InvalidTransitionError):
        services.requests.update_status(request.id, alice.id, 'accepted')
    assert services.requests.list_sent_by(bob.id)[0]['status'] == 'completed'


def test_rejected_is_terminal(services, alice, bob, guitar):
    request = services.requests.create(bob.id, guitar.id, 'Spanish Lessons')
    services.requests.update_status(request.id, alice.id, 'rejected')

    for status in ('pending', 'accepted', 'completed', 'rejected'):
        with pytest.raises(InvalidTransitionError):
            services.requests.update_status(request.id, alice.id, status)


def test_unknown_status_value(services, alice, bob, guitar):
    request = services.requests.create(bob.id, guitar.id, 'Spanish Lessons')
    with pytest.raises(ValidationError):
        services.requests.update_status(request.id, alice.id, 'approved')


def test_deleting_a_user_cascades(services, alice, bob, guitar):
    services.requests.create(bob.id, guitar.id, 'Spanish Lessons')

    db.session.delete(db.session.get(User, alice.id))
    db.session.commit()

    assert db.session.query(Skill).count() == 0
    assert db.session.query(SkillRequest).count() == 0
    assert services.requests.list_sent_by(bob.id) == []


def test_request_endpoints(client, register, add_skill):
    alice, alice_headers = register('alice')
    _, bob_headers = register('bob')
    skill = add_skill(alice_headers)

    response = client.post('/api/requests', json={'skill_id': skill['id'], 'offered_skill': 'Spanish Lessons'},
                           headers=alice_headers)
    assert response.status_code == 400
    assert response.get_json()['message'] == 'Cannot request your own skill'

    response = client.post('/api/requests', json={'skill_id': 999, 'offered_skill': 'Spanish'}, headers=bob_headers)
    assert response.status_code == 404

    response = client.post('/api/requests', json={'skill_id': skill['id'], 'offered_skill': 'Spanish Lessons'},
                           headers=bob_headers)
    assert response.status_code == 201
    request_id = response.get_json()['request']['id']

    # the requester cannot move their own request
    response = client.put(f'/api/requests/{request_id}/status', json={'status': 'accepted'}, headers=bob_headers)
    assert response.status_code == 404

    response = client.put(f'/api/requests/{request_id}/status', json={'status': 'completed'}, headers=alice_headers)
    assert response.status_code == 400

    assert client.get('/api/requests/received').status_code == 401


def _parse(timestamp):
    return datetime.fromisoformat(timestamp)


def test_end_to_end_exchange(client, register):
    alice, alice_headers = register('alice', full_name='Alice Tran')
    response = client.post('/api/skills', json={
        'skill_name': 'Guitar Lessons', 'proficiency_level': 'Intermediate', 'category': 'Music',
    }, headers=alice_headers)
    assert response.status_code == 201
    assert response.get_json()['skill']['available'] is True

    bob, bob_headers = register('bob', full_name='Bob Le')
    listing = client.get('/api/skills').get_json()
    guitar = next(s for s in listing if s['skill_name'] == 'Guitar Lessons')
    assert guitar['username'] == 'alice'

    response = client.post('/api/requests', json={
        'skill_id': guitar['id'], 'offered_skill': 'Spanish Lessons', 'message': 'Trade?',
    }, headers=bob_headers)
    assert response.status_code == 201
    created = response.get_json()['request']
    assert created['requested_skill'] == 'Guitar Lessons'

    received = client.get('/api/requests/received', headers=alice_headers).get_json()
    assert len(received) == 1
    assert received[0]['id'] == created['id']
    assert received[0]['status'] == 'pending'
    assert received[0]['requester_username'] == 'bob'
    assert received[0]['offered_skill'] == 'Spanish Lessons'

    response = client.put(f"/api/requests/{created['id']}/status", json={'status': 'accepted'},
                          headers=alice_headers)
    assert response.status_code == 200

    sent = client.get('/api/requests/sent', headers=bob_headers).get_json()
    assert sent[0]['status'] == 'accepted'
    assert sent[0]['owner_name'] == 'Alice Tran'
    assert _parse(sent[0]['updated_at']) > _parse(created['updated_at'])
    assert sent[0]['created_at'] == created['created_at']


def test_deleting_a_skill_keeps_its_requests(services, alice, bob, guitar):
    request = services.requests.create(bob.id, guitar.id, 'Spanish Lessons')

    services.catalog.remove(guitar.id, alice.id)

    sent = services.requests.list_sent_by(bob.id)
    assert [r['id'] for r in sent] == [request.id]
    assert sent[0]['requested_skill'] == 'Guitar Lessons'
    assert sent[0]['skill_id'] is None

    received = services.requests.list_received_by(alice.id)
    assert [r['id'] for r in received] == [request.id]
    assert received[0]['requested_skill'] == 'Guitar Lessons'

    # the owner still decides on it
    services.requests.update_status(request.id, alice.id, 'rejected')
    assert services.requests.list_sent_by(bob.id)[0]['status'] == 'rejected'


def test_deleted_skill_request_over_http(client, register, add_skill):
    _, alice_headers = register('alice')
    _, bob_headers = register('bob')
    skill = add_skill(alice_headers)
    client.post('/api/requests', json={'skill_id': skill['id'], 'offered_skill': 'Spanish Lessons'},
                headers=bob_headers)

    assert client.delete(f"/api/skills/{skill['id']}", headers=alice_headers).status_code == 200

    sent = client.get('/api/requests/sent', headers=bob_headers).get_json()
    assert len(sent) == 1
    assert sent[0]['requested_skill'] == 'Guitar Lessons'


@pytest.mark.parametrize('method, path', [
    ('post', '/api/requests'),
    ('put', '/api/requests/1/status'),
    ('post', '/api/skills'),
    ('put', '/api/skills/1'),
    ('put', '/api/profile'),
])
def test_non_object_json_body_is_rejected(client, register, method, path):
    _, headers = register('alice')
    response = getattr(client, method)(path, json=[1], headers=headers)
    assert response.status_code == 400
    assert response.get_json()['message'] == 'Request body must be a JSON object'
