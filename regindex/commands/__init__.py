"""CLI commands for regindex."""
