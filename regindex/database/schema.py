"""
Database schema for regindex.

Two tables make up the catalog:
- repositories: one row per repository that has at least one tag
- tags: one row per (repository, tag), replaced on every push

Schema creation is idempotent and runs every time a store is opened.
"""

import logging
import sqlite3

logger = logging.getLogger(__name__)

# Current schema version - increment when schema changes
# v1: Initial schema (repositories, tags)
CURRENT_VERSION = 1

SCHEMA_V1 = """
-- Schema version tracking
CREATE TABLE IF NOT EXISTS _schema_info (
    version INTEGER PRIMARY KEY,
    applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    description TEXT
);

CREATE TABLE IF NOT EXISTS tags (
    id INTEGER PRIMARY KEY,
    repository VARCHAR(256),
    digest VARCHAR(80),
    url VARCHAR(256),
    tag VARCHAR(256),
    status VARCHAR(32),
    description VARCHAR(256),
    target_url VARCHAR(256),
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_name_tag ON tags(repository, tag);

CREATE TABLE IF NOT EXISTS repositories (
    id INTEGER PRIMARY KEY,
    repository VARCHAR(256)
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_name ON repositories(repository);
"""


def get_schema_version(conn: sqlite3.Connection) -> int:
    """Get current schema version from database."""
    try:
        cursor = conn.execute("SELECT MAX(version) FROM _schema_info")
        result = cursor.fetchone()
        return result[0] if result[0] is not None else 0
    except sqlite3.OperationalError:
        # Table doesn't exist yet
        return 0


def ensure_schema(conn: sqlite3.Connection) -> None:
    """
    Create the catalog tables and indexes if they are missing.

    The statements only use IF NOT EXISTS, so running this against an
    existing catalog leaves its rows untouched.
    """
    current = get_schema_version(conn)
    conn.executescript(SCHEMA_V1)

    if current < CURRENT_VERSION:
        logger.info(f"Catalog schema version {current} -> {CURRENT_VERSION}")
        conn.execute(
            "INSERT OR REPLACE INTO _schema_info (version, description) VALUES (?, ?)",
            (CURRENT_VERSION, "Initial schema: repositories and tags")
        )
