"""
Common CLI utilities and decorators for consistent command behavior.
"""

import logging
from functools import wraps

from .config import ConfigError
from .database.store import CatalogStore
from .errors import CatalogError
from .exit_codes import INTERRUPTED, exit_with_code, get_exit_code_for_exception

logger = logging.getLogger(__name__)


def catalog_command(func):
    """
    Decorator for commands that work on the catalog.

    Maps catalog and config errors to an exit code and a one-line
    message on stderr instead of a traceback.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (CatalogError, ConfigError, ValueError) as e:
            logger.debug("command failed", exc_info=True)
            exit_with_code(get_exit_code_for_exception(e), f"Error: {e}")
        except KeyboardInterrupt:
            exit_with_code(INTERRUPTED)

    return wrapper


def open_store(config: dict) -> CatalogStore:
    """Open the catalog configured under [storage]."""
    store = CatalogStore.from_config(config)
    logger.debug(f"catalog at {store.path}")
    return store
