"""
Error types for the regindex catalog.

Every failure the catalog surfaces to its callers derives from
CatalogError, so HTTP handlers and the CLI can map them in one place.
"""


class CatalogError(Exception):
    """Base class for catalog errors."""
    pass


class StorageUnavailable(CatalogError):
    """The catalog database could not be opened."""
    pass


class QueryFailure(CatalogError):
    """A statement failed while reading or writing the catalog."""
    pass


class NotFound(CatalogError):
    """The (repository, tag) pair does not exist."""

    def __init__(self, repository: str, tag: str):
        self.repository = repository
        self.tag = tag
        super().__init__(f"tag not found: {repository}:{tag}")


class MalformedRequest(CatalogError):
    """A request or notification body could not be decoded."""
    pass
