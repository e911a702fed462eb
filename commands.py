import click
from flask_migrate import stamp
from sqlalchemy import inspect
from models import db, User
from services.bootstrap import ensure_snapshot

def register_commands(app):
    @app.cli.command('init-db')
    @click.option('--drop', is_flag=True, help='Drop existing tables first.')
    @click.option('--no-stamp', is_flag=True, help='Do not stamp the Alembic head.')
    def init_db(drop, no_stamp):
        """Create the user and monthly_snapshot tables."""
        if drop:
            click.echo('Dropping all tables...')
            db.drop_all()
        db.create_all()
        tables = sorted(inspect(db.engine).get_table_names())
        click.echo(f"Tables: {', '.join(tables)}")
        if not no_stamp:
            # create_all already built the head schema
            stamp()
            click.echo('Stamped at migration head.')

    @app.cli.command('ensure-month')
    @click.argument('email')
    @click.argument('year', type=int)
    @click.argument('month', type=click.IntRange(0, 11))
    def ensure_month(email, year, month):
        """Give EMAIL a usable snapshot for YEAR/MONTH (month 0-11)."""
        user = User.query.filter_by(email=email).first()
        if user is None:
            raise click.ClickException(f'No user with email {email}')
        snapshot = ensure_snapshot(user.id, year, month)
        habits = snapshot.payload.get('habits') or []
        click.echo(f'{email} {year}-{month}: {len(habits)} habits')
