"""
Catalog database operations for regindex.

Provides the mutations the event sink applies and the paginated reads
the HTTP handlers serve, mapping between rows and domain objects.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..domain.repository import Repository
from ..domain.tag import DEFAULT_STATUS, Tag
from ..errors import NotFound, QueryFailure
from .connection import Database

logger = logging.getLogger(__name__)

TAG_COLUMNS = "repository, tag, digest, url, status, description, target_url, updated_at"


def upsert_repository(db: Database, name: str) -> None:
    """Insert a repository row unless it already exists."""
    db.execute(
        "INSERT OR IGNORE INTO repositories (repository) VALUES (?)",
        (name,)
    )


def upsert_tag(
    db: Database,
    repository: str,
    tag: str,
    digest: str,
    url: str,
    timestamp: datetime,
) -> None:
    """
    Insert or fully replace the (repository, tag) row.

    Review fields go back to their defaults: status "unset",
    empty description and target_url.
    """
    db.execute(
        """INSERT OR REPLACE INTO tags
            (repository, tag, digest, url, updated_at, status, description, target_url)
            VALUES (?, ?, ?, ?, ?, ?, '', '')""",
        (repository, tag, digest, url, timestamp.isoformat(), DEFAULT_STATUS)
    )


def delete_tag(db: Database, repository: str, tag: str) -> bool:
    """Delete a tag row. Returns False if there was nothing to delete."""
    cursor = db.execute(
        "DELETE FROM tags WHERE repository = ? AND tag = ?",
        (repository, tag)
    )
    return cursor.rowcount > 0


def prune_orphan_repositories(db: Database) -> int:
    """
    Remove repositories that no tag references any more.

    Returns:
        Number of repositories removed
    """
    cursor = db.execute(
        "DELETE FROM repositories WHERE repository NOT IN (SELECT DISTINCT repository FROM tags)"
    )
    return cursor.rowcount


def patch_tag_status(
    db: Database,
    repository: str,
    tag: str,
    status: str,
    description: str,
    target_url: str,
) -> None:
    """
    Set the review fields of an existing tag.

    Digest, url and updated_at are left as the last push wrote them.

    Raises:
        NotFound: if no (repository, tag) row exists
    """
    cursor = db.execute(
        """UPDATE tags SET status = ?, description = ?, target_url = ?
           WHERE repository = ? AND tag = ?""",
        (status, description, target_url, repository, tag)
    )
    if cursor.rowcount == 0:
        raise NotFound(repository, tag)


def get_tag(db: Database, repository: str, tag: str) -> Optional[Tag]:
    """Get a single tag, or None if it is not indexed."""
    row = db.query_one(
        f"SELECT {TAG_COLUMNS} FROM tags WHERE repository = ? AND tag = ?",
        (repository, tag)
    )
    return record_to_tag(dict(row)) if row else None


def list_repositories(
    db: Database,
    keyword: Optional[str] = None,
    limit: int = 20,
    offset: int = 0,
) -> List[Repository]:
    """
    Get one page of repositories, each with its full tag list.

    Args:
        db: Database connection
        keyword: Case-sensitive substring the repository name must contain
        limit: Page size
        offset: Number of repositories to skip

    Returns:
        Repositories ordered by name

    A failure reading one repository's tags is logged; that repository
    keeps the tags read so far and the page continues with the next one.
    """
    if keyword:
        rows = db.query(
            """SELECT repository FROM repositories
               WHERE instr(repository, ?) > 0
               ORDER BY repository LIMIT ? OFFSET ?""",
            (keyword, limit, offset)
        )
    else:
        rows = db.query(
            "SELECT repository FROM repositories ORDER BY repository LIMIT ? OFFSET ?",
            (limit, offset)
        )

    records = []
    for row in rows:
        record = Repository(repository=row['repository'])
        _load_tags(db, record)
        records.append(record)
    return records


def _load_tags(db: Database, record: Repository) -> None:
    """Fill record.tags, stopping at the first row that fails to read."""
    try:
        rows = db.query(
            f"SELECT {TAG_COLUMNS} FROM tags WHERE repository = ? ORDER BY tag",
            (record.repository,)
        )
    except QueryFailure as e:
        logger.error(f"failed to scan tags of {record.repository}: {e}")
        return

    for row in rows:
        try:
            record.tags.append(record_to_tag(dict(row)))
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"failed to scan tag row of {record.repository}: {e}")
            return


def get_repository_count(db: Database) -> int:
    """Get total number of repositories."""
    return db.scalar("SELECT COUNT(*) FROM repositories") or 0


def get_tag_count(db: Database) -> int:
    """Get total number of tags."""
    return db.scalar("SELECT COUNT(*) FROM tags") or 0


def get_catalog_info(db: Database) -> Dict[str, Any]:
    """
    Get information about the catalog.

    Returns:
        Dictionary with catalog stats
    """
    info: Dict[str, Any] = {
        'path': str(db.db_path),
        'repositories': get_repository_count(db),
        'tags': get_tag_count(db),
    }

    info['schema_version'] = db.scalar("SELECT MAX(version) FROM _schema_info") or 0

    if not db.in_memory:
        path = Path(db.db_path)
        size = path.stat().st_size if path.exists() else 0
        info['size_bytes'] = size
        info['size_human'] = _human_size(size)

    return info


def record_to_tag(record: Dict[str, Any]) -> Tag:
    """
    Convert a database record to a Tag domain object.

    Args:
        record: Database row as dictionary

    Returns:
        Tag domain object
    """
    updated_at = record.get('updated_at')
    if isinstance(updated_at, str):
        updated_at = datetime.fromisoformat(updated_at)

    return Tag(
        repository=record['repository'],
        tag=record['tag'],
        digest=record.get('digest') or '',
        url=record.get('url') or '',
        status=record.get('status', DEFAULT_STATUS),
        description=record.get('description') or '',
        target_url=record.get('target_url') or '',
        updated_at=updated_at,
    )


def _human_size(size_bytes: int) -> str:
    """Convert bytes to human-readable size."""
    size: float = float(size_bytes)
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"
