from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.attributes import flag_modified
from models import db, MonthlySnapshot
from errors import ValidationError, InfrastructureError
from utils import check_month_key

# Dialects with a single-statement INSERT ... ON CONFLICT
NATIVE_UPSERT = {
    'postgresql': postgresql.insert,
    'sqlite': sqlite.insert,
}

KEY_COLUMNS = ['user_id', 'year', 'month']


def _check_args(year, month, payload):
    check_month_key(year, month)
    if not isinstance(payload, dict):
        raise ValidationError('payload must be an object')


def _native_insert():
    dialect = db.session.get_bind().dialect.name
    return NATIVE_UPSERT.get(dialect)


def get_snapshot(user_id, year, month):
    stmt = (select(MonthlySnapshot)
            .filter_by(user_id=user_id, year=year, month=month)
            .execution_options(populate_existing=True))
    return db.session.scalars(stmt).first()


def upsert_snapshot(user_id, year, month, payload):
    """Replace the payload stored for (user, year, month), creating the row if needed.

    The whole payload is replaced, never merged. Concurrent writers to the
    same key end with one row holding whichever payload committed last.
    """
    _check_args(year, month, payload)
    insert = _native_insert()
    if insert is None:
        return _upsert_with_retry(user_id, year, month, payload)

    stmt = insert(MonthlySnapshot).values(user_id=user_id, year=year, month=month, payload=payload)
    stmt = stmt.on_conflict_do_update(index_elements=KEY_COLUMNS, set_={'payload': stmt.excluded.payload})
    try:
        db.session.execute(stmt)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return get_snapshot(user_id, year, month)


def create_snapshot_if_absent(user_id, year, month, payload):
    """Insert a snapshot only if none exists; returns the row that ends up stored."""
    _check_args(year, month, payload)
    insert = _native_insert()
    try:
        if insert is not None:
            stmt = insert(MonthlySnapshot).values(user_id=user_id, year=year, month=month, payload=payload)
            db.session.execute(stmt.on_conflict_do_nothing(index_elements=KEY_COLUMNS))
            db.session.commit()
        else:
            db.session.add(MonthlySnapshot(user_id=user_id, year=year, month=month, payload=payload))
            db.session.commit()
    except IntegrityError:
        # Another request created it first; keep theirs
        db.session.rollback()
    except Exception:
        db.session.rollback()
        raise
    return get_snapshot(user_id, year, month)


def _upsert_with_retry(user_id, year, month, payload, attempts=3):
    for _ in range(attempts):
        existing = get_snapshot(user_id, year, month)
        try:
            if existing:
                existing.payload = payload
                flag_modified(existing, 'payload')
            else:
                db.session.add(MonthlySnapshot(user_id=user_id, year=year, month=month, payload=payload))
            db.session.commit()
            return get_snapshot(user_id, year, month)
        except IntegrityError:
            # Lost the insert race; the row exists now, go round again as an update
            db.session.rollback()
        except Exception:
            db.session.rollback()
            raise
    raise InfrastructureError('Could not save snapshot')
