"""
Per-employee serialization of read-check-write cycles.

Two concurrent bookings for the same employee must not both pass the
overlap check and both commit. Every create/update runs inside
``employee_interval_lock``:

1. A process-local lock per employee id serializes workers in this process.
2. ``SELECT ... FOR UPDATE`` on the employee row serializes across
   processes on databases that support row locks (PostgreSQL). SQLite
   ignores the clause, so file-backed SQLite engines open every
   transaction with ``BEGIN IMMEDIATE`` (``configure_sqlite_locking``)
   and a second writer waits for the first commit before it reads.
3. The block commits on success and rolls back on any exception, so a
   rejected operation leaves nothing behind.
"""

import logging
import threading
from collections import defaultdict
from contextlib import contextmanager
from typing import Callable, TypeVar

from sqlalchemy import event

from models import db, Employee

logger = logging.getLogger(__name__)

T = TypeVar('T')

_registry_lock = threading.Lock()
_employee_locks = defaultdict(threading.RLock)


def configure_sqlite_locking(engine) -> bool:
    """
    Take SQLite's write lock at the start of every transaction.

    pysqlite defers BEGIN until the first write, so two processes can both
    run the overlap SELECT before either INSERTs. Letting SQLAlchemy emit
    ``BEGIN IMMEDIATE`` makes the second transaction wait (up to the
    driver's busy timeout) until the first one commits. In-memory databases
    live in a single process and are left alone.

    Returns True when the listeners were installed.
    """
    if engine.dialect.name != 'sqlite' or engine.url.database in (None, '', ':memory:'):
        return False

    @event.listens_for(engine, 'connect')
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, 'begin')
    def _begin_immediate(conn):
        conn.exec_driver_sql('BEGIN IMMEDIATE')

    logger.debug('SQLite transactions use BEGIN IMMEDIATE (%s)', engine.url.database)
    return True


def _lock_for(employee_id: int) -> threading.RLock:
    with _registry_lock:
        return _employee_locks[employee_id]


@contextmanager
def employee_interval_lock(*employee_ids: int):
    """Hold the interval lock of one or more employees for a transaction."""
    ids = sorted({eid for eid in employee_ids if eid is not None})
    locks = [_lock_for(eid) for eid in ids]

    for lock in locks:
        lock.acquire()
    try:
        try:
            if ids:
                # Row locks, in id order like the process locks
                (db.session.query(Employee.id)
                    .filter(Employee.id.in_(ids))
                    .order_by(Employee.id)
                    .with_for_update()
                    .all())
            yield
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
    finally:
        for lock in reversed(locks):
            lock.release()


def with_employee_interval_lock(employee_id: int, fn: Callable[[], T]) -> T:
    """Run ``fn`` (check + write) as one atomic unit for ``employee_id``."""
    with employee_interval_lock(employee_id):
        return fn()
