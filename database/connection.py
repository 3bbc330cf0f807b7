"""
Database connection management.
Handles per-request connections, initialization, and teardown.
"""

import logging
import os
import sqlite3

from flask import g, current_app

logger = logging.getLogger(__name__)


def get_db():
    """
    Get the request-scoped database connection with row factory.

    Returns:
        sqlite3.Connection: Database connection object
    """
    if 'db' not in g:
        db_path = current_app.config.get('DATABASE_PATH', 'instance/grand_hotel.db')
        directory = os.path.dirname(db_path)
        if db_path != ':memory:' and directory and not os.path.exists(directory):
            os.makedirs(directory, exist_ok=True)

        g.db = sqlite3.connect(db_path)
        g.db.row_factory = sqlite3.Row
        # Enable foreign key constraints (junction rows cascade on delete)
        g.db.execute('PRAGMA foreign_keys = ON')
        if db_path != ':memory:':
            g.db.execute('PRAGMA journal_mode = WAL')
    return g.db


def get_store():
    """
    Get the request-scoped Store wrapping the current connection.

    Returns:
        Store: Store bound to get_db()
    """
    from database.store import Store

    if 'store' not in g:
        g.store = Store(get_db())
    return g.store


def close_db(e=None):
    """
    Close database connection.

    Args:
        e: Exception if any (from Flask teardown context)
    """
    g.pop('store', None)
    db = g.pop('db', None)
    if db is not None:
        db.close()


def init_db():
    """
    Initialize database: drop existing tables, create new schema, insert seed data.
    WARNING: This will delete all existing data!
    """
    from database.schema import drop_tables, create_tables, create_indexes
    from database.seed import seed_database

    db = get_db()

    drop_tables(db)
    create_tables(db)
    create_indexes(db)
    seed_database(db)

    db.commit()
    logger.info("Database initialized at %s", current_app.config.get('DATABASE_PATH'))
