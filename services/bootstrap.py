from datetime import datetime
from flask import current_app
from services.snapshot_store import get_snapshot, upsert_snapshot, create_snapshot_if_absent

DEFAULT_HABITS = (
    {'id': 1, 'name': 'Meditation', 'color': '#8ecae6'},
    {'id': 2, 'name': 'Workout', 'color': '#219ebc'},
    {'id': 3, 'name': 'Read 30 min', 'color': '#ffd166'},
    {'id': 4, 'name': 'No sugar', 'color': '#06d6a0'},
)
DEFAULT_CHART_TYPE = 'line'

def default_payload():
    habits = [dict(h) for h in DEFAULT_HABITS]
    return {
        'habits': habits,
        'data': {str(h['id']): {} for h in habits},
        'chartType': DEFAULT_CHART_TYPE,
    }

def needs_default(snapshot):
    # Only a missing key counts as missing. habits=[] / data={} is what a
    # user who deleted every habit has saved and must survive.
    if snapshot is None or not isinstance(snapshot.payload, dict):
        return True
    return 'habits' not in snapshot.payload or 'data' not in snapshot.payload

def ensure_snapshot(user_id, year, month):
    snapshot = get_snapshot(user_id, year, month)
    if not needs_default(snapshot):
        return snapshot

    if snapshot is None:
        current_app.logger.info('Creating default snapshot for user %s (%s-%s)', user_id, year, month)
        snapshot = create_snapshot_if_absent(user_id, year, month, default_payload())
        # A concurrent save may have won the insert; judge what is stored now
        if not needs_default(snapshot):
            return snapshot

    current_app.logger.info('Reinitialising malformed snapshot for user %s (%s-%s)', user_id, year, month)
    return upsert_snapshot(user_id, year, month, default_payload())

def ensure_current_snapshot(user_id, now=None):
    now = now or datetime.now()
    # Months are stored zero-based
    return ensure_snapshot(user_id, now.year, now.month - 1)
