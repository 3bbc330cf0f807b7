"""
Database package for the Grand Hotel backend.

This package provides modular database operations:
- connection: Connection management (get_db, get_store, close_db, init_db)
- schema: Table creation, indexes and the relation map
- seed: Initial seed data
- store: Table-level find/insert/update/delete interface
"""

from database.connection import get_db, get_store, close_db, init_db
from database.schema import drop_tables, create_tables, create_indexes, RELATIONS, TABLES
from database.seed import seed_database
from database.store import Store, StoreError, NotFoundError, ConstraintError

__all__ = [
    # Connection
    'get_db',
    'get_store',
    'close_db',
    'init_db',
    # Schema
    'drop_tables',
    'create_tables',
    'create_indexes',
    'RELATIONS',
    'TABLES',
    # Seed
    'seed_database',
    # Store
    'Store',
    'StoreError',
    'NotFoundError',
    'ConstraintError',
]
