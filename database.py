"""
Database setup and initialization for the OpenCX back office.
"""
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event as sa_event

db = SQLAlchemy()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA foreign_keys=ON')
    cursor.close()


def init_db(app):
    """Initialize the database with the Flask app."""
    db.init_app(app)
    with app.app_context():
        # SQLite only enforces foreign keys when asked to, per connection
        if db.engine.dialect.name == 'sqlite':
            sa_event.listen(db.engine, 'connect', _enable_sqlite_foreign_keys)

        # Import all models to register them with SQLAlchemy
        from models import (User, UserProfile, Branch, Customer, Transaction,
                            ComplianceAlert, AuditLog)
        db.create_all()
