from datetime import datetime
import pytest
from models import db, User, MonthlySnapshot
from services.bootstrap import (DEFAULT_HABITS, default_payload, ensure_snapshot,
                                ensure_current_snapshot, needs_default)
from services.snapshot_store import upsert_snapshot

def make_user():
    user = User(email='boot@example.com')
    db.session.add(user)
    db.session.commit()
    return user

def store_raw(user_id, year, month, payload):
    # Bypasses the store's object check to simulate legacy/malformed rows
    snapshot = MonthlySnapshot(user_id=user_id, year=year, month=month, payload=payload)
    db.session.add(snapshot)
    db.session.commit()
    return snapshot

def test_default_payload_shape():
    payload = default_payload()
    assert [h['id'] for h in payload['habits']] == [1, 2, 3, 4]
    assert [h['name'] for h in payload['habits']] == ['Meditation', 'Workout', 'Read 30 min', 'No sugar']
    assert payload['data'] == {'1': {}, '2': {}, '3': {}, '4': {}}
    assert payload['chartType'] == 'line'

def test_default_payload_is_a_fresh_copy():
    payload = default_payload()
    payload['habits'][0]['name'] = 'Changed'
    assert DEFAULT_HABITS[0]['name'] == 'Meditation'
    assert default_payload()['habits'][0]['name'] == 'Meditation'

def test_absent_snapshot_gets_default(app):
    user = make_user()
    snapshot = ensure_snapshot(user.id, 2024, 3)
    assert snapshot.payload == default_payload()

def test_bootstrap_is_idempotent(app):
    user = make_user()
    first = ensure_snapshot(user.id, 2024, 3)
    second = ensure_snapshot(user.id, 2024, 3)
    assert first.id == second.id
    assert second.payload == first.payload
    assert MonthlySnapshot.query.filter_by(user_id=user.id).count() == 1

def test_empty_state_is_preserved(app):
    user = make_user()
    saved = upsert_snapshot(user.id, 2024, 3, {'habits': [], 'data': {}})
    snapshot = ensure_snapshot(user.id, 2024, 3)
    assert snapshot.id == saved.id
    assert snapshot.payload == {'habits': [], 'data': {}}

def test_null_core_fields_count_as_present(app):
    user = make_user()
    upsert_snapshot(user.id, 2024, 3, {'habits': None, 'data': None})
    assert ensure_snapshot(user.id, 2024, 3).payload == {'habits': None, 'data': None}

def test_user_data_is_returned_unchanged(app):
    user = make_user()
    payload = {'habits': [{'id': 9, 'name': 'Swim', 'color': '#123456'}], 'data': {'9': {'2': True}}, 'chartType': 'radar'}
    upsert_snapshot(user.id, 2024, 3, payload)
    assert ensure_snapshot(user.id, 2024, 3).payload == payload

@pytest.mark.parametrize('payload', [{}, {'habits': []}, {'data': {}}, {'chartType': 'bar'}])
def test_missing_core_field_reinitialises(app, payload):
    user = make_user()
    saved = upsert_snapshot(user.id, 2024, 3, payload)
    snapshot = ensure_snapshot(user.id, 2024, 3)
    assert snapshot.id == saved.id
    assert snapshot.payload == default_payload()

@pytest.mark.parametrize('payload', [[1, 2], 'text', 42])
def test_non_object_payload_reinitialises(app, payload):
    user = make_user()
    store_raw(user.id, 2024, 3, payload)
    assert ensure_snapshot(user.id, 2024, 3).payload == default_payload()

def test_needs_default():
    class Row:
        def __init__(self, payload):
            self.payload = payload
    assert needs_default(None)
    assert needs_default(Row(None))
    assert needs_default(Row({'habits': []}))
    assert not needs_default(Row({'habits': [], 'data': {}}))

def test_current_snapshot_uses_zero_based_month(app):
    user = make_user()
    snapshot = ensure_current_snapshot(user.id, now=datetime(2024, 4, 15, 9, 30))
    assert (snapshot.year, snapshot.month) == (2024, 3)

def test_current_snapshot_january_is_month_zero(app):
    user = make_user()
    snapshot = ensure_current_snapshot(user.id, now=datetime(2025, 1, 1))
    assert (snapshot.year, snapshot.month) == (2025, 0)
