"""HTTP surface for regindex."""

from .server import create_app

__all__ = ['create_app']
