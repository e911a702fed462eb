import sys
from app import create_app
from models import db, User
from errors import DuplicateIdentity
from services import auth_service
from services.bootstrap import ensure_current_snapshot

def create_test_account(email='john@example.com', password='password123'):
    app = create_app()
    with app.app_context():
        db.create_all()
        try:
            auth_service.register(email, password, name='John')
            print(f"User '{email}' created.")
        except DuplicateIdentity:
            print(f"User '{email}' already exists.")

        # Registration already bootstraps; this covers accounts from an earlier month
        user = User.query.filter_by(email=email).first()
        snapshot = ensure_current_snapshot(user.id)
        print(f"Snapshot {snapshot.year}-{snapshot.month} has {len(snapshot.payload.get('habits') or [])} habits.")

if __name__ == "__main__":
    create_test_account(*sys.argv[1:3])
