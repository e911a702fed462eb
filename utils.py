from errors import ValidationError

def _isoformat(value):
    return value.isoformat() if value else None

def serialize_user(user):
    # password_hash never leaves the server
    return {
        'id': user.id,
        'email': user.email,
        'name': user.name,
        'createdAt': _isoformat(user.created_at),
        'updatedAt': _isoformat(user.updated_at),
    }

def serialize_snapshot(snapshot):
    return {
        'id': snapshot.id,
        'year': snapshot.year,
        'month': snapshot.month,
        'payload': snapshot.payload,
    }

def parse_int(value, field):
    """Accept ints and integer strings (path segments); reject bools and floats."""
    if isinstance(value, bool):
        raise ValidationError(f'{field} must be an integer')
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ValidationError(f'{field} must be an integer')

def check_month_key(year, month):
    if isinstance(year, bool) or not isinstance(year, int):
        raise ValidationError('year must be an integer')
    if isinstance(month, bool) or not isinstance(month, int):
        raise ValidationError('month must be an integer')
    if not 0 <= month <= 11:
        raise ValidationError('month must be between 0 and 11')

def require_string(data, field, required=True):
    value = data.get(field)
    if value is None and not required:
        return None
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f'{field} is required')
    return value

def json_object(request):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data
