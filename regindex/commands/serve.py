"""
Serve command for regindex.

Runs the catalog HTTP API (index queries, tag status patches and the
registry notification endpoint) under uvicorn.
"""

from typing import Optional

import click
import uvicorn

from ..api import create_app
from ..cli_utils import catalog_command, open_store


@click.command('serve')
@click.option('--host', default=None, help='Host to bind to (default: [server] host)')
@click.option('--port', type=int, default=None, help='Port to bind to (default: [server] port)')
@click.pass_obj
@catalog_command
def serve_handler(config: dict, host: Optional[str], port: Optional[int]):
    """
    Start the regindex HTTP server.

    \b
    Endpoints:
        GET     /index          page of repositories with their tags
        OPTIONS /index          cross-origin marker
        PATCH   /tag-status     set review status of a tag
        POST    /events         registry notification endpoint
    """
    server = config.get('server', {})
    store = open_store(config)
    app = create_app(store, cors_origins=server.get('cors_origins'))

    uvicorn.run(
        app,
        host=host or server.get('host', '127.0.0.1'),
        port=port or server.get('port', 5001),
        log_level=str(config.get('logging', {}).get('level', 'info')).lower(),
    )
