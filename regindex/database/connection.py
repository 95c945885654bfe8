"""
Database connection management for regindex.

A catalog is a single SQLite file under the configured storage root.
One connection is opened per store and shared by the event sink and the
HTTP handlers, so statement execution is serialized with a lock.
"""

import logging
import os
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator, List, Optional, Union

from ..errors import QueryFailure, StorageUnavailable
from .schema import ensure_schema

logger = logging.getLogger(__name__)

DB_FILENAME = 'registry.sqlite3'
MEMORY = ':memory:'


def get_db_path(config: Optional[dict] = None) -> Path:
    """
    Get the catalog database file path.

    Checks in order:
    1. REGINDEX_DB environment variable
    2. config['storage']['rootdirectory'] joined with registry.sqlite3
    3. Default: ~/.regindex/registry.sqlite3

    Args:
        config: Optional configuration dictionary

    Returns:
        Path to database file
    """
    if 'REGINDEX_DB' in os.environ:
        return Path(os.environ['REGINDEX_DB'])

    root = '~/.regindex'
    if config and config.get('storage', {}).get('rootdirectory'):
        root = str(config['storage']['rootdirectory'])

    return Path(root).expanduser() / DB_FILENAME


def get_connection(db_path: Union[Path, str]) -> sqlite3.Connection:
    """
    Open a catalog connection, creating the file and schema if needed.

    The connection runs in autocommit mode so each statement is atomic
    on its own; multi-statement units go through Database.transaction().

    Raises:
        StorageUnavailable: if the directory or database cannot be opened
    """
    in_memory = str(db_path) == MEMORY

    try:
        if not in_memory:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(
            str(db_path),
            check_same_thread=False,
            isolation_level=None,
        )
        conn.row_factory = sqlite3.Row

        if not in_memory:
            conn.execute("PRAGMA journal_mode = WAL")
            conn.execute("PRAGMA synchronous = NORMAL")

        ensure_schema(conn)
    except (OSError, sqlite3.Error) as e:
        logger.error(f"Failed to open database {db_path}: {e}")
        raise StorageUnavailable(f"cannot open catalog at {db_path}: {e}") from e

    return conn


class Database:
    """
    Shared handle to the catalog database.

    Usage:
        db = Database(db_path=Path('/var/lib/registry/registry.sqlite3')).open()
        db.execute("DELETE FROM tags WHERE repository = ?", ('library/nginx',))
        rows = db.query("SELECT repository FROM repositories")
        db.close()

        # Or as a context manager
        with Database(config=my_config) as db:
            ...

    Statement failures are logged and re-raised as QueryFailure.
    """

    def __init__(
        self,
        db_path: Optional[Union[Path, str]] = None,
        config: Optional[dict] = None,
    ):
        self.db_path = db_path if db_path is not None else get_db_path(config)
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()

    def open(self) -> 'Database':
        """Open the connection if it is not open yet."""
        with self._lock:
            if self._conn is None:
                self._conn = get_connection(self.db_path)
        return self

    def close(self) -> None:
        """Close the connection. Safe to call twice."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __enter__(self) -> 'Database':
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def conn(self) -> sqlite3.Connection:
        """Get the underlying connection."""
        if self._conn is None:
            raise StorageUnavailable("Database not connected. Call open() first")
        return self._conn

    @property
    def in_memory(self) -> bool:
        return str(self.db_path) == MEMORY

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        """Execute one SQL statement."""
        with self._lock:
            try:
                return self.conn.execute(sql, params)
            except sqlite3.Error as e:
                logger.error(f"sqlite: {e}")
                raise QueryFailure(str(e)) from e

    def query(self, sql: str, params: tuple = ()) -> List[sqlite3.Row]:
        """Execute a SELECT and fetch all rows."""
        with self._lock:
            try:
                return self.conn.execute(sql, params).fetchall()
            except sqlite3.Error as e:
                logger.error(f"sqlite query: {e}")
                raise QueryFailure(str(e)) from e

    def query_one(self, sql: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        """Execute a SELECT and fetch the first row, if any."""
        rows = self.query(sql, params)
        return rows[0] if rows else None

    def scalar(self, sql: str, params: tuple = ()) -> Any:
        """Execute a SELECT and return the first column of the first row."""
        row = self.query_one(sql, params)
        return row[0] if row else None

    @contextmanager
    def transaction(self) -> Generator[None, None, None]:
        """
        Run several statements as one unit.

        Usage:
            with db.transaction():
                db.execute("DELETE ...")
                db.execute("DELETE ...")
                # Commits on success, rolls back on exception

        Nested calls join the outer transaction.
        """
        with self._lock:
            if self.conn.in_transaction:
                yield
                return

            self.execute("BEGIN")
            try:
                yield
            except Exception:
                self.conn.rollback()
                raise
            try:
                self.execute("COMMIT")
            except QueryFailure:
                self.conn.rollback()
                raise
