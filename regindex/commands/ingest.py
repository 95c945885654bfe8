"""
Ingest command for regindex.

Replays registry notifications from a file through the event sink.
Useful for seeding a catalog from captured webhook payloads.
"""

import json

import click

from ..cli_utils import catalog_command, open_store
from ..domain.event import parse_envelope
from ..services import EventSink


@click.command('ingest')
@click.argument('source', type=click.File('r'))
@click.pass_obj
@catalog_command
def ingest_handler(config: dict, source):
    """
    Apply a notification envelope ({"events": [...]}) to the catalog.

    SOURCE is a JSON file, or - for stdin. A bare JSON list of events
    is accepted too.

    \b
    Examples:
        regindex ingest notifications.json
        curl -s http://capture/last | regindex ingest -
    """
    data = json.load(source)
    if isinstance(data, list):
        data = {'events': data}
    events = parse_envelope(data)

    sink = EventSink(open_store(config))
    try:
        applied = sink.write(events)
    finally:
        sink.close()

    click.echo(f"Applied {applied} of {len(events)} events", err=True)
