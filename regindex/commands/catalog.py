"""
Catalog commands for regindex: list, info and patch.

These work directly on the catalog database, without a running server.
"""

import json

import click
from rich import box
from rich.console import Console
from rich.table import Table

from ..cli_utils import catalog_command, open_store
from ..domain.repository import Repository
from ..services import QueryArgs, QueryService, StatusPatchService, TagStatusPatch


@click.command('list')
@click.option('--keyword', '-k', default='', help='Only repositories whose name contains this')
@click.option('--skip', type=int, default=0, help='Repositories to skip')
@click.option('--limit', '-n', type=int, default=20, help='Page size (default: 20)')
@click.option('--json', 'output_json', is_flag=True, help='Output as JSON array')
@click.pass_obj
@catalog_command
def list_handler(config: dict, keyword: str, skip: int, limit: int, output_json: bool):
    """
    List repositories and their tags.

    \b
    Examples:
        regindex list
        regindex list --keyword library/ --limit 50
        regindex list --json | jq '.[].repository'
    """
    with open_store(config) as store:
        page = QueryService(store).get_page(QueryArgs(keyword=keyword, skip=skip, limit=limit))

    if output_json:
        print(json.dumps([repo.to_dict() for repo in page], indent=2))
    else:
        _show_pretty(page)


def _show_pretty(page: list[Repository]):
    """Display a page of repositories as a formatted table."""
    console = Console()

    if not page:
        console.print("[yellow]No repositories found.[/yellow]")
        return

    table = Table(
        title=f"Catalog ({len(page)} repositories)",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )

    table.add_column("Repository", style="cyan")
    table.add_column("Tag")
    table.add_column("Digest", style="dim")
    table.add_column("Status")
    table.add_column("Updated", style="dim")

    for repo in page:
        if not repo.tags:
            table.add_row(repo.repository, "", "", "", "")
        for tag in repo.tags:
            updated = tag.updated_at.strftime('%Y-%m-%d %H:%M') if tag.updated_at else ""
            table.add_row(repo.repository, tag.tag, tag.digest[:19], tag.status, updated)

    console.print(table)


@click.command('info')
@click.option('--json', 'output_json', is_flag=True, help='Output as JSON')
@click.pass_obj
@catalog_command
def info_handler(config: dict, output_json: bool):
    """Show catalog location and row counts."""
    with open_store(config) as store:
        info = store.get_catalog_info()

    if output_json:
        print(json.dumps(info, indent=2))
        return

    console = Console()
    console.print(f"[bold]Catalog:[/bold] {info['path']}")
    if 'size_human' in info:
        console.print(f"  Size: {info['size_human']}")
    console.print(f"  Schema version: {info['schema_version']}")
    console.print(f"  Repositories: {info['repositories']}")
    console.print(f"  Tags: {info['tags']}")


@click.command('patch')
@click.argument('repository')
@click.argument('tag')
@click.option('--status', '-s', required=True, help='Review status (free text, e.g. passed)')
@click.option('--description', '-d', default='', help='Review description')
@click.option('--target-url', default='', help='Link to the review report')
@click.pass_obj
@catalog_command
def patch_handler(
    config: dict,
    repository: str,
    tag: str,
    status: str,
    description: str,
    target_url: str,
):
    """
    Set the review status of REPOSITORY:TAG.

    \b
    Example:
        regindex patch library/nginx 1.25 --status passed --target-url https://ci/report/42
    """
    patch = TagStatusPatch(
        repository=repository,
        tag=tag,
        status=status,
        description=description,
        target_url=target_url,
    )
    with open_store(config) as store:
        StatusPatchService(store).set_tag_status(patch)

    click.echo(f"{repository}:{tag} -> {status}", err=True)
