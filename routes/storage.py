from flask import request, jsonify
from flask_login import login_required, current_user
from . import storage_bp
from services.bootstrap import ensure_snapshot
from services.snapshot_store import get_snapshot, upsert_snapshot
from utils import serialize_snapshot, parse_int, check_month_key, json_object

def _path_key(year, month):
    year = parse_int(year, 'year')
    month = parse_int(month, 'month')
    check_month_key(year, month)
    return year, month

@storage_bp.route('/<year>/<month>', methods=['GET'])
@login_required
def get_month(year, month):
    year, month = _path_key(year, month)
    # Plain reads never create a snapshot
    snapshot = get_snapshot(current_user.id, year, month)
    if snapshot is None:
        return jsonify({'year': year, 'month': month, 'payload': None})
    return jsonify(serialize_snapshot(snapshot))

@storage_bp.route('', methods=['PUT'])
@login_required
def save_month():
    data = json_object(request)
    # Any userId in the body is ignored; the token decides whose data this is
    snapshot = upsert_snapshot(current_user.id, data.get('year'), data.get('month'), data.get('payload'))
    return jsonify(serialize_snapshot(snapshot))

@storage_bp.route('/<year>/<month>/ensure', methods=['POST'])
@login_required
def ensure_month(year, month):
    year, month = _path_key(year, month)
    return jsonify(serialize_snapshot(ensure_snapshot(current_user.id, year, month)))
