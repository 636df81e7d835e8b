import sys
import os
import json

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
import rankvote.election
import rankvote.persist
import rankvote.signature
import rankvote.store
from rankvote.election import Election


def addr(i):
    return '0x%040x' % i


def roundtrip(obj):
    return rankvote.persist.from_dict(json.loads(json.dumps(
        rankvote.persist.to_dict(obj)
    )))


def sample_election():
    election = Election.deploy(
        [addr(i) for i in range(1, 6)],
        admin=addr(0xAD),
        now=1000,
        cooldown=50,
        max_candidates=4,
        domain=rankvote.signature.BallotDomain(chain_id=5),
    )
    election.record_ballot(addr(1), [addr(10), addr(11)])
    election.record_ballot(addr(2), [addr(11)])
    election.record_ballot(addr(3), [addr(12), addr(10), addr(11)])
    return election


def test_election_roundtrip():
    election = sample_election()
    restored = roundtrip(election)
    assert isinstance(restored, Election)
    assert rankvote.persist.to_dict(restored) == (
        rankvote.persist.to_dict(election)
    )
    assert restored.get_ballot(addr(3)) == (addr(12), addr(10), addr(11))
    assert restored.registry.voters == election.registry.voters
    assert restored.store.validator.max_candidates == 4
    assert restored.authorizer.domain.chain_id == 5
    assert restored.get_cooldown_duration() == 50


def test_restored_election_continues():
    election = sample_election()
    restored = roundtrip(election)
    assert restored.trigger_election(1051) == election.trigger_election(1051)
    assert restored.state == election.state
    restored = roundtrip(restored)
    assert restored.epoch == 1
    assert restored.get_ballot(addr(1)) == ()
    assert restored.store.get(addr(1), 0) == (addr(10), addr(11))


def test_restored_signature_verification():
    election = sample_election()
    restored = roundtrip(election)
    signature = election.authorizer.sign([addr(10)], 4)
    assert restored.authorizer.recover([addr(10)], signature) == (
        election.authorizer.recover([addr(10)], signature)
    )


def test_empty_store():
    store = roundtrip(rankvote.store.BallotStore())
    assert len(store) == 0
    assert store.get(addr(1), 0) == ()


def test_state_roundtrip():
    state = rankvote.election.ElectionState(addr(1), 123, epoch=4, cooldown=7)
    assert roundtrip(state) == state


def test_state_dict():
    state = rankvote.election.ElectionState(addr(1), 123)
    assert rankvote.persist.to_dict(state) == {
        'class': 'rankvote.election.ElectionState',
        'winner': addr(1),
        'last_election': 123,
        'epoch': 0,
        'cooldown': rankvote.election.DEFAULT_COOLDOWN,
    }


@pytest.mark.parametrize('value', [
    [1, 2],
    {'winner': addr(1)},
    {'class': '.hidden'},
    {'class': 'no such class'},
])
def test_from_dict_invalid(value):
    with pytest.raises(ValueError):
        rankvote.persist.from_dict(value)


def test_serialize_unknown():
    with pytest.raises(ValueError):
        rankvote.persist.to_dict(object())


@pytest.mark.parametrize('class_name', [
    'json.JSONDecoder',
    'os.system',
    'rankvote',
    'rankvote.election',
    'rankvote.nonexistent.Election',
    'rankvote.election.ElectionNotYetDue',
])
def test_from_dict_foreign_class(class_name):
    with pytest.raises(rankvote.persist.SnapshotError):
        rankvote.persist.from_dict({'class': class_name})


def test_from_dict_bad_arguments():
    with pytest.raises(rankvote.persist.SnapshotError):
        rankvote.persist.from_dict({
            'class': 'rankvote.election.ElectionState',
            'champion': addr(1),
        })


@pytest.mark.parametrize('typedef', [
    {'type': 'frozenset', 'value': []},
    {'type': ['tuple'], 'value': []},
    {'type': 'tuple'},
    {'type': 'dict', 'keys': []},
])
def test_invalid_typed_value(typedef):
    with pytest.raises(rankvote.persist.SnapshotError):
        rankvote.persist.deserialize_value(typedef)


def test_store_keys_wrapped():
    store = rankvote.store.BallotStore()
    store.record(addr(1), 3, [addr(10)])
    snapshot = rankvote.persist.to_dict(store)
    assert snapshot['ballots'] == {
        'type': 'dict',
        'items': [[
            {'type': 'tuple', 'value': [addr(1), 3]},
            {'type': 'tuple', 'value': [addr(10)]},
        ]],
    }


def test_reserved_keys_wrapped():
    value = {'class': 'x', 'other': (1, 2)}
    wrapped = rankvote.persist.serialize_value(value)
    assert wrapped['type'] == 'dict'
    assert rankvote.persist.deserialize_value(
        json.loads(json.dumps(wrapped))
    ) == value
