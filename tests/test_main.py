import asyncio
import json

import pytest

from coverlookup import main as cli
from coverlookup.models.cover import CoverResult
from coverlookup.shared.config import ConfigManager


class FakeService:
    """Stands in for CoverLookupService so the CLI never touches the network."""

    instances = []

    def __init__(self, settings=None):
        self.settings = settings
        self.calls = []
        FakeService.instances.append(self)

    async def search_cover(self, title, authors):
        self.calls.append(('search', title, list(authors)))
        return CoverResult(title=title, authors=tuple(authors), cover_url='https://example.com/c.jpg')

    async def resolve_and_store(self, title, authors):
        self.calls.append(('store', title, list(authors)))
        return CoverResult(title=title, authors=tuple(authors), cover_url='https://example.com/c.jpg',
                           local_path='/covers/c.jpg')

    async def process_all(self, requests):
        self.calls.append(('batch', [r.title for r in requests]))
        return [CoverResult(title=r.title, authors=r.authors,
                            local_path='/covers/x.jpg' if r.authors else None) for r in requests]


@pytest.fixture(autouse=True)
def fake_service(monkeypatch, tmp_path):
    FakeService.instances = []
    monkeypatch.setattr(cli, 'CoverLookupService', FakeService)
    monkeypatch.setattr(cli, 'config_manager', ConfigManager(tmp_path / 'config.json'))
    return FakeService


def run_cli(*argv):
    return asyncio.run(cli.main(list(argv)))


def test_resolve_and_store(capsys):
    assert run_cli('1984', '-a', 'George Orwell') == 0

    output = json.loads(capsys.readouterr().out)
    assert output == {
        'title': '1984',
        'authors': ['George Orwell'],
        'coverUrl': 'https://example.com/c.jpg',
        'localPath': '/covers/c.jpg',
    }
    assert FakeService.instances[0].calls == [('store', '1984', ['George Orwell'])]


def test_search_only(capsys):
    assert run_cli('Dune', '--search-only') == 0

    output = json.loads(capsys.readouterr().out)
    assert 'localPath' not in output
    assert FakeService.instances[0].calls == [('search', 'Dune', [])]


def test_options_reach_settings(tmp_path):
    run_cli('Dune', '--covers-dir', str(tmp_path / 'elsewhere'), '--no-scrape')

    settings = FakeService.instances[0].settings
    assert settings.covers_dir == tmp_path / 'elsewhere'
    assert settings.scrape_enabled is False


def test_batch(tmp_path, capsys):
    batch_file = tmp_path / 'books.json'
    batch_file.write_text(json.dumps([
        {'title': '1984', 'authors': ['George Orwell']},
        {'title': 'Beowulf'},
        {'title': 'Dune', 'authors': 'Frank Herbert'},
    ]))

    assert run_cli('--batch', str(batch_file)) == 0

    output = json.loads(capsys.readouterr().out)
    assert [r['title'] for r in output['results']] == ['1984', 'Beowulf', 'Dune']
    assert output['results'][2]['authors'] == ['Frank Herbert']
    assert output['stored'] == 2
    assert output['total'] == 3


@pytest.mark.parametrize('content', ['{"title": "not a list"}', '[{"authors": ["x"]}]', 'nope'])
def test_bad_batch_file(tmp_path, capsys, content):
    batch_file = tmp_path / 'books.json'
    batch_file.write_text(content)

    assert run_cli('--batch', str(batch_file)) == 1
    assert 'Could not read batch file' in capsys.readouterr().out


def test_requires_title_or_batch(capsys):
    assert run_cli() == 1
    assert run_cli('Dune', '--batch', 'books.json') == 1
    assert FakeService.instances == []


def test_init_config(tmp_path, capsys):
    assert run_cli('--init-config') == 0
    assert (tmp_path / 'config.json').exists()
    assert 'Created example config' in capsys.readouterr().out
