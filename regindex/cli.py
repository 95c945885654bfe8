#!/usr/bin/env python3

from typing import Optional

import click

from regindex.config import ConfigError, configure_logging, load_config
from regindex.exit_codes import CONFIG_ERROR
from regindex.commands.serve import serve_handler
from regindex.commands.ingest import ingest_handler
from regindex.commands.catalog import list_handler, info_handler, patch_handler


@click.group()
@click.version_option(package_name='regindex')
@click.option('--config', 'config_path', type=click.Path(dir_okay=False),
              help='Config file (default: $REGINDEX_CONFIG or ~/.regindex/config.json)')
@click.pass_context
def cli(ctx, config_path: Optional[str]):
    """regindex - Repository and tag catalog for a container registry.

    Maintains an index of repositories and tags from the registry's push
    and delete notifications, and serves it over HTTP.
    """
    try:
        config = load_config(config_path)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(CONFIG_ERROR)
    configure_logging(config)
    ctx.obj = config


cli.add_command(serve_handler)
cli.add_command(ingest_handler)
cli.add_command(list_handler)
cli.add_command(info_handler)
cli.add_command(patch_handler)


def main():
    cli()

if __name__ == "__main__":
    main()
