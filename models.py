from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin
from sqlalchemy.dialects.postgresql import JSONB
from datetime import datetime

db = SQLAlchemy()

class User(UserMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    # Null for accounts that only ever signed in with Google
    password_hash = db.Column(db.String(255), nullable=True)
    name = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    snapshots = db.relationship('MonthlySnapshot', backref='user', lazy=True, cascade="all, delete-orphan", passive_deletes=True)

class MonthlySnapshot(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False)
    year = db.Column(db.Integer, nullable=False)
    month = db.Column(db.Integer, nullable=False) # 0-11
    # { habits: [{id, name, color}], data: {habitId: {day: bool}}, chartType }
    payload = db.Column(db.JSON().with_variant(JSONB(), 'postgresql'), nullable=False)

    __table_args__ = (db.UniqueConstraint('user_id', 'year', 'month', name='uq_monthly_snapshot_user_year_month'),)
