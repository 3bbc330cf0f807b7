"""
Table-level store over the SQLite connection.

Every model goes through this interface instead of hand-writing SQL for
plain CRUD:

    store.find('rooms', {'status': 'Available'}, order_by='room_number')
    store.find_one('reservations', {'reservation_id': 3}, joins=['guest', 'rooms'])
    store.insert('reservation_room', [{'reservation_id': 3, 'room_number': '101'}])
    store.update('rooms', {'room_number': '101'}, {'status': 'Reserved'})
    store.delete('reservation_staff', {'reservation_id': 3})

Filters are column -> value maps. A list value means IN; a column may carry
one of the suffixes __ne, __gt, __gte, __lt, __lte, __in, __like.

Writes commit immediately unless they run inside store.transaction().
"""

import logging
import re
import sqlite3
from collections import defaultdict
from contextlib import contextmanager

from database.schema import RELATIONS, TABLES

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r'^[a-z_][a-z0-9_]*$')

_OPERATORS = {
    'eq': '=',
    'ne': '!=',
    'gt': '>',
    'gte': '>=',
    'lt': '<',
    'lte': '<=',
    'like': 'LIKE',
    'in': 'IN',
}


class StoreError(Exception):
    """Base error for store failures (connectivity, SQL, constraints)."""


class NotFoundError(StoreError):
    """Raised when a single-row lookup or update matches nothing."""


class ConstraintError(StoreError):
    """Raised when the database rejects a write (unique, foreign key, check)."""


def _check_identifier(name: str) -> str:
    if not _IDENTIFIER.match(name or ''):
        raise ValueError(f"Invalid identifier: {name!r}")
    return name


def _check_table(table: str) -> str:
    if table not in TABLES:
        raise ValueError(f"Unknown table: {table!r}")
    return table


def _build_where(filters: dict = None, search: dict = None) -> tuple:
    """Build a WHERE clause and its parameters from filters and an OR search."""
    clauses = []
    params = []

    for key, value in (filters or {}).items():
        column, _, op = key.partition('__')
        _check_identifier(column)
        if not op:
            op = 'in' if isinstance(value, (list, tuple, set, frozenset)) else 'eq'
        if op not in _OPERATORS:
            raise ValueError(f"Unknown filter operator: {op!r}")

        if op == 'in':
            values = list(value)
            if not values:
                clauses.append('0')
                continue
            clauses.append(f"{column} IN ({','.join('?' * len(values))})")
            params.extend(values)
        elif value is None and op in ('eq', 'ne'):
            clauses.append(f"{column} IS {'NOT ' if op == 'ne' else ''}NULL")
        else:
            clauses.append(f'{column} {_OPERATORS[op]} ?')
            params.append(value)

    if search:
        parts = []
        for column, term in search.items():
            _check_identifier(column)
            parts.append(f'{column} LIKE ?')
            params.append(f'%{term}%')
        clauses.append('(' + ' OR '.join(parts) + ')')

    where = ' WHERE ' + ' AND '.join(clauses) if clauses else ''
    return where, params


def _build_order(order_by) -> str:
    """Build ORDER BY from 'col', '-col' or a list of those."""
    if not order_by:
        return ''
    if isinstance(order_by, str):
        order_by = [order_by]

    terms = []
    for item in order_by:
        descending = item.startswith('-')
        column = _check_identifier(item.lstrip('-'))
        terms.append(f"{column} {'DESC' if descending else 'ASC'}")
    return ' ORDER BY ' + ', '.join(terms)


class Store:
    """
    Generic select/insert/update/delete over the known tables.

    Rows are returned as plain dicts. Joins listed in database.schema.RELATIONS
    are resolved as nested keys: a many-to-one join yields a dict (or None),
    a many-to-many join yields a list of target rows.
    """

    def __init__(self, db: sqlite3.Connection):
        self.db = db
        self._tx_depth = 0

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    @property
    def in_transaction(self) -> bool:
        return self._tx_depth > 0

    @contextmanager
    def transaction(self):
        """Group writes into one commit; roll everything back on error."""
        self._tx_depth += 1
        try:
            yield self
        except Exception:
            self._tx_depth -= 1
            if self._tx_depth == 0:
                self.db.rollback()
                logger.warning("Transaction rolled back")
            raise
        else:
            self._tx_depth -= 1
            if self._tx_depth == 0:
                self.db.commit()

    def _commit(self):
        if not self.in_transaction:
            self.db.commit()

    def _execute(self, sql: str, params=()):
        try:
            return self.db.execute(sql, params)
        except sqlite3.IntegrityError as e:
            if not self.in_transaction:
                self.db.rollback()
            raise ConstraintError(str(e)) from e
        except sqlite3.Error as e:
            if not self.in_transaction:
                self.db.rollback()
            logger.error("Store error on %r: %s", sql.split()[0], e)
            raise StoreError(str(e)) from e

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def find(self, table: str, filters: dict = None, order_by=None, joins: list = None,
             search: dict = None, limit: int = None) -> list:
        """
        Select rows from a table.

        Args:
            table: Table name
            filters: Column filters (AND-ed)
            order_by: 'column', '-column' or a list of those
            joins: Relation names from RELATIONS, dotted for nesting
            search: Column -> term map, OR-ed LIKE '%term%'
            limit: Optional row limit

        Returns:
            list: Row dicts
        """
        _check_table(table)
        where, params = _build_where(filters, search)
        sql = f'SELECT * FROM {table}{where}{_build_order(order_by)}'
        if limit is not None:
            sql += ' LIMIT ?'
            params.append(int(limit))

        rows = [dict(row) for row in self._execute(sql, params).fetchall()]
        if joins:
            self._attach(table, rows, joins)
        return rows

    def first(self, table: str, filters: dict, joins: list = None, order_by=None):
        """Return the first matching row or None."""
        rows = self.find(table, filters, order_by=order_by, joins=joins, limit=1)
        return rows[0] if rows else None

    def find_one(self, table: str, filters: dict, joins: list = None) -> dict:
        """Return the single matching row; raise NotFoundError when absent."""
        row = self.first(table, filters, joins=joins)
        if row is None:
            raise NotFoundError(f"{table} not found: {filters}")
        return row

    def count(self, table: str, filters: dict = None) -> int:
        _check_table(table)
        where, params = _build_where(filters)
        return self._execute(f'SELECT COUNT(*) FROM {table}{where}', params).fetchone()[0]

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def insert(self, table: str, rows):
        """
        Insert one row (dict) or many (list of dicts).

        Returns:
            dict or list: The stored row(s) as read back from the table
        """
        _check_table(table)
        single = isinstance(rows, dict)
        batch = [rows] if single else list(rows)

        inserted = []
        for row in batch:
            columns = [_check_identifier(c) for c in row]
            sql = (
                f"INSERT INTO {table} ({', '.join(columns)}) "
                f"VALUES ({', '.join('?' * len(columns))})"
            )
            cursor = self._execute(sql, [row[c] for c in columns])
            stored = self._execute(
                f'SELECT * FROM {table} WHERE rowid = ?', (cursor.lastrowid,)
            ).fetchone()
            inserted.append(dict(stored))
        self._commit()

        return inserted[0] if single else inserted

    def update_many(self, table: str, filters: dict, patch: dict) -> list:
        """Apply a patch to every matching row and return the updated rows."""
        _check_table(table)
        if not filters:
            raise ValueError("Refusing to update without filters")
        if not patch:
            return self.find(table, filters)

        where, params = _build_where(filters)
        rowids = [r[0] for r in self._execute(f'SELECT rowid FROM {table}{where}', params).fetchall()]
        if not rowids:
            return []

        columns = [_check_identifier(c) for c in patch]
        assignments = ', '.join(f'{c} = ?' for c in columns)
        placeholders = ','.join('?' * len(rowids))
        self._execute(
            f'UPDATE {table} SET {assignments} WHERE rowid IN ({placeholders})',
            [patch[c] for c in columns] + rowids
        )
        self._commit()

        updated = self._execute(
            f'SELECT * FROM {table} WHERE rowid IN ({placeholders})', rowids
        ).fetchall()
        return [dict(row) for row in updated]

    def update(self, table: str, filters: dict, patch: dict) -> dict:
        """Update matching rows and return the first; raise NotFoundError if none matched."""
        updated = self.update_many(table, filters, patch)
        if not updated:
            raise NotFoundError(f"{table} not found: {filters}")
        return updated[0]

    def delete(self, table: str, filters: dict) -> None:
        _check_table(table)
        if not filters:
            raise ValueError("Refusing to delete without filters")
        where, params = _build_where(filters)
        self._execute(f'DELETE FROM {table}{where}', params)
        self._commit()

    # -------------------------------------------------------------------------
    # Joins
    # -------------------------------------------------------------------------

    def _attach(self, table: str, rows: list, joins: list) -> None:
        """Resolve joins in place on already-fetched rows."""
        if not rows:
            return

        nested = {}
        for join in joins:
            head, _, rest = join.partition('.')
            nested.setdefault(head, [])
            if rest:
                nested[head].append(rest)

        relations = RELATIONS.get(table, {})
        for name, sub_joins in nested.items():
            relation = relations.get(name)
            if relation is None:
                raise ValueError(f"Unknown relation {table}.{name}")

            keys = list({row[relation.local_key] for row in rows if row.get(relation.local_key) is not None})

            if relation.kind == 'many_to_one':
                targets = self.find(relation.target, {f'{relation.target_key}__in': keys}, joins=sub_joins)
                by_key = {t[relation.target_key]: t for t in targets}
                for row in rows:
                    target = by_key.get(row.get(relation.local_key))
                    row[name] = dict(target) if target is not None else None
                continue

            links = self.find(
                relation.through,
                {f'{relation.through_local}__in': keys},
                order_by=relation.through_target
            )
            target_keys = list({link[relation.through_target] for link in links})
            targets = self.find(relation.target, {f'{relation.target_key}__in': target_keys}, joins=sub_joins)
            by_key = {t[relation.target_key]: t for t in targets}

            grouped = defaultdict(list)
            for link in links:
                target = by_key.get(link[relation.through_target])
                if target is not None:
                    grouped[link[relation.through_local]].append(dict(target))
            for row in rows:
                row[name] = grouped.get(row.get(relation.local_key), [])
