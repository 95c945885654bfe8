"""
Tests for the regindex command line.
"""

import json
import logging

import pytest
from click.testing import CliRunner

from regindex.cli import cli
from regindex.database.store import CatalogStore

MANIFEST_V2 = 'application/vnd.docker.distribution.manifest.v2+json'


def _event(action, repository, tag, media_type=MANIFEST_V2):
    return {
        'action': action,
        'target': {
            'mediaType': media_type,
            'digest': f'sha256:{repository}-{tag}',
            'repository': repository,
            'url': f'https://registry.example.com/v2/{repository}/manifests/{tag}',
        },
    }


@pytest.fixture
def env(tmp_path, monkeypatch):
    """A config file whose storage root is tmp_path."""
    monkeypatch.delenv('REGINDEX_DB', raising=False)
    monkeypatch.delenv('REGINDEX_CONFIG', raising=False)
    config_path = tmp_path / 'config.json'
    config_path.write_text(json.dumps({
        'storage': {'rootdirectory': str(tmp_path / 'root')},
        'logging': {'level': 'WARNING'},
    }))
    return tmp_path, str(config_path)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    """The group callback reconfigures root logging onto CliRunner's stderr."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _ingest(runner, config_path, tmp_path, events, name='events.json'):
    source = tmp_path / name
    source.write_text(json.dumps({'events': events}))
    return runner.invoke(cli, ['--config', config_path, 'ingest', str(source)])


class TestIngest:

    def test_ingest_then_list(self, runner, env):
        tmp_path, config_path = env
        result = _ingest(runner, config_path, tmp_path, [
            _event('push', 'library/nginx', '1.25'),
            _event('push', 'library/redis', '7'),
            _event('pull', 'library/redis', '7'),
            _event('push', 'library/redis', 'sha256:abc',
                   media_type='application/octet-stream'),
        ])
        assert result.exit_code == 0, result.output
        assert "Applied 2 of 4 events" in result.output

        result = runner.invoke(cli, ['--config', config_path, 'list', '--json'])
        assert result.exit_code == 0, result.output
        page = json.loads(result.stdout)
        assert [r['repository'] for r in page] == ['library/nginx', 'library/redis']
        assert page[1]['tags'][0]['tag'] == '7'

        assert (tmp_path / 'root' / 'registry.sqlite3').exists()

    def test_ingest_bare_list(self, runner, env):
        tmp_path, config_path = env
        source = tmp_path / 'events.json'
        source.write_text(json.dumps([_event('push', 'library/nginx', '1.25')]))

        result = runner.invoke(cli, ['--config', config_path, 'ingest', str(source)])

        assert result.exit_code == 0, result.output
        assert "Applied 1 of 1 events" in result.output

    def test_ingest_delete_prunes(self, runner, env):
        tmp_path, config_path = env
        _ingest(runner, config_path, tmp_path, [_event('push', 'library/nginx', '1.25')])
        _ingest(runner, config_path, tmp_path, [_event('delete', 'library/nginx', '1.25')],
                name='delete.json')

        result = runner.invoke(cli, ['--config', config_path, 'list', '--json'])
        assert json.loads(result.stdout) == []

    def test_ingest_from_stdin(self, runner, env):
        _, config_path = env
        payload = json.dumps({'events': [_event('push', 'library/nginx', '1.25')]})

        result = runner.invoke(cli, ['--config', config_path, 'ingest', '-'], input=payload)

        assert result.exit_code == 0, result.output

    def test_malformed_envelope_exits_with_data_error(self, runner, env):
        tmp_path, config_path = env
        source = tmp_path / 'events.json'
        source.write_text(json.dumps({'events': 'nope'}))

        result = runner.invoke(cli, ['--config', config_path, 'ingest', str(source)])

        assert result.exit_code == 70

    def test_invalid_json_exits_with_data_error(self, runner, env):
        tmp_path, config_path = env
        source = tmp_path / 'events.json'
        source.write_text("{not json")

        result = runner.invoke(cli, ['--config', config_path, 'ingest', str(source)])

        assert result.exit_code == 70


class TestList:

    def test_pagination_and_keyword(self, runner, env):
        tmp_path, config_path = env
        events = [_event('push', f'team/app-{i:02d}', 'latest') for i in range(25)]
        events.append(_event('push', 'other/tool', 'latest'))
        _ingest(runner, config_path, tmp_path, events)

        first = runner.invoke(cli, ['--config', config_path, 'list', '--json'])
        rest = runner.invoke(cli, ['--config', config_path, 'list', '--json', '--skip', '20'])
        tools = runner.invoke(cli, ['--config', config_path, 'list', '--json', '-k', 'tool'])

        assert len(json.loads(first.stdout)) == 20
        assert len(json.loads(rest.stdout)) == 6
        assert [r['repository'] for r in json.loads(tools.stdout)] == ['other/tool']

    def test_table_output(self, runner, env):
        tmp_path, config_path = env
        _ingest(runner, config_path, tmp_path, [_event('push', 'library/nginx', '1.25')])

        result = runner.invoke(cli, ['--config', config_path, 'list'])

        assert result.exit_code == 0, result.output
        assert 'library/nginx' in result.output
        assert '1.25' in result.output

    def test_empty_table(self, runner, env):
        _, config_path = env
        result = runner.invoke(cli, ['--config', config_path, 'list'])
        assert result.exit_code == 0
        assert 'No repositories found' in result.output


class TestInfo:

    def test_info_json(self, runner, env):
        tmp_path, config_path = env
        _ingest(runner, config_path, tmp_path, [
            _event('push', 'library/nginx', '1.25'),
            _event('push', 'library/nginx', '1.26'),
        ])

        result = runner.invoke(cli, ['--config', config_path, 'info', '--json'])

        assert result.exit_code == 0, result.output
        info = json.loads(result.stdout)
        assert info['repositories'] == 1
        assert info['tags'] == 2
        assert info['schema_version'] == 1
        assert info['path'].endswith('registry.sqlite3')


class TestPatch:

    def test_patch_existing_tag(self, runner, env):
        tmp_path, config_path = env
        _ingest(runner, config_path, tmp_path, [_event('push', 'library/nginx', '1.25')])

        result = runner.invoke(cli, [
            '--config', config_path, 'patch', 'library/nginx', '1.25',
            '--status', 'passed', '-d', 'clean', '--target-url', 'https://ci/42',
        ])

        assert result.exit_code == 0, result.output
        assert 'library/nginx:1.25 -> passed' in result.output

        with CatalogStore.open(tmp_path / 'root' / 'registry.sqlite3') as store:
            tag = store.get_tag('library/nginx', '1.25')
        assert (tag.status, tag.description, tag.target_url) == ('passed', 'clean', 'https://ci/42')

    def test_patch_missing_tag_exits_not_found(self, runner, env):
        _, config_path = env

        result = runner.invoke(cli, [
            '--config', config_path, 'patch', 'library/nginx', '1.25', '--status', 'passed',
        ])

        assert result.exit_code == 64
        assert 'tag not found' in result.output

    def test_status_is_required(self, runner, env):
        _, config_path = env
        result = runner.invoke(cli, ['--config', config_path, 'patch', 'library/nginx', '1.25'])
        assert result.exit_code == 2


class TestConfigErrors:

    def test_missing_config_file(self, runner, tmp_path):
        result = runner.invoke(cli, ['--config', str(tmp_path / 'absent.json'), 'info'])
        assert result.exit_code == 66

    def test_broken_config_file(self, runner, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text("storage: [unclosed\n")
        result = runner.invoke(cli, ['--config', str(path), 'info'])
        assert result.exit_code == 66
        assert 'Error' in result.output


def test_version(runner):
    result = runner.invoke(cli, ['--version'])
    assert result.exit_code == 0
    assert 'version' in result.output
