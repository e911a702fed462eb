from sqlalchemy import inspect
from models import db, User, MonthlySnapshot

def test_init_db_creates_tables(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=['init-db', '--drop', '--no-stamp'])
    assert result.exit_code == 0, result.output
    assert 'Dropping all tables' in result.output
    assert 'monthly_snapshot' in result.output
    assert {'user', 'monthly_snapshot'} <= set(inspect(db.engine).get_table_names())

def test_ensure_month_command_bootstraps_user(app):
    user = User(email='cli@x.com')
    db.session.add(user)
    db.session.commit()

    result = app.test_cli_runner().invoke(args=['ensure-month', 'cli@x.com', '2024', '3'])
    assert result.exit_code == 0, result.output
    assert 'cli@x.com 2024-3: 4 habits' in result.output
    assert MonthlySnapshot.query.filter_by(user_id=user.id, year=2024, month=3).count() == 1

def test_ensure_month_command_unknown_user(app):
    result = app.test_cli_runner().invoke(args=['ensure-month', 'ghost@x.com', '2024', '3'])
    assert result.exit_code != 0
    assert 'No user with email ghost@x.com' in result.output

def test_ensure_month_command_rejects_month_12(app):
    result = app.test_cli_runner().invoke(args=['ensure-month', 'cli@x.com', '2024', '12'])
    assert result.exit_code != 0
