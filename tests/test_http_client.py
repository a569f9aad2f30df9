import asyncio
from dataclasses import replace

import pytest
from aiohttp import test_utils, web

from coverlookup.errors import (
    FetchTimeoutError,
    HttpStatusError,
    NetworkError,
    ParseError,
    ValidationError,
)
from coverlookup.services.http_client import AiohttpClient
from coverlookup.shared.config import CoverSettings

IMAGE_BYTES = b'\xff\xd8\xff\xe0' + b'\x00' * 2048


async def _ok(request):
    return web.Response(text='hello')


async def _json(request):
    return web.json_response({'docs': [{'cover_i': 1}]})


async def _error(request):
    return web.Response(status=500, text='boom')


async def _slow(request):
    await asyncio.sleep(1)
    return web.Response(text='late')


async def _image(request):
    return web.Response(body=IMAGE_BYTES, content_type='image/jpeg')


async def _page(request):
    return web.Response(text='<html></html>', content_type='text/html')


async def _redirect(request):
    return web.Response(status=302, headers={'Location': '/image'})


async def _redirect_page(request):
    return web.Response(status=301, headers={'Location': '/page'})


async def _loop(request):
    return web.Response(status=302, headers={'Location': '/loop'})


def make_app():
    app = web.Application()
    app.router.add_get('/ok', _ok)
    app.router.add_get('/json', _json)
    app.router.add_get('/error', _error)
    app.router.add_get('/slow', _slow)
    app.router.add_get('/image', _image)
    app.router.add_get('/page', _page)
    app.router.add_get('/redirect', _redirect)
    app.router.add_get('/redirect-page', _redirect_page)
    app.router.add_get('/loop', _loop)
    return app


def run_with_server(test):
    """Run test(server) against a local aiohttp server."""
    async def runner():
        server = test_utils.TestServer(make_app())
        await server.start_server()
        try:
            return await test(server)
        finally:
            await server.close()
    return asyncio.run(runner())


def url(server, path):
    return str(server.make_url(path))


@pytest.fixture
def client(tmp_path):
    settings = CoverSettings(covers_dir=tmp_path, search_timeout=2, scrape_timeout=2,
                             download_timeout=2, validate_timeout=2)
    return AiohttpClient(settings)


def test_fetch_returns_body(client):
    body = run_with_server(lambda server: client.fetch(url(server, '/ok')))
    assert body == 'hello'


def test_fetch_json(client):
    data = run_with_server(lambda server: client.fetch_json(url(server, '/json')))
    assert data == {'docs': [{'cover_i': 1}]}


def test_fetch_json_rejects_malformed_body(client):
    with pytest.raises(ParseError):
        run_with_server(lambda server: client.fetch_json(url(server, '/ok')))


def test_fetch_non_200_raises_status_error(client):
    with pytest.raises(HttpStatusError) as exc_info:
        run_with_server(lambda server: client.fetch(url(server, '/error')))
    assert exc_info.value.status == 500


def test_fetch_times_out(client):
    with pytest.raises(FetchTimeoutError):
        run_with_server(lambda server: client.fetch(url(server, '/slow'), timeout=0.2))


def test_fetch_timeout_is_a_builtin_timeout(client):
    with pytest.raises(TimeoutError):
        run_with_server(lambda server: client.fetch(url(server, '/slow'), timeout=0.2))


def test_fetch_connection_failure_raises_network_error(client):
    with pytest.raises(NetworkError):
        asyncio.run(client.fetch('http://127.0.0.1:1/unreachable'))


def test_download_follows_redirect(client, tmp_path):
    dest = tmp_path / 'cover.jpg'

    run_with_server(lambda server: client.download(url(server, '/redirect'), dest))

    assert dest.read_bytes() == IMAGE_BYTES
    assert not (tmp_path / 'cover.jpg.part').exists()


def test_download_error_leaves_no_file(client, tmp_path):
    dest = tmp_path / 'cover.jpg'

    with pytest.raises(HttpStatusError):
        run_with_server(lambda server: client.download(url(server, '/error'), dest))

    assert list(tmp_path.iterdir()) == []


def test_download_gives_up_on_redirect_loop(client, tmp_path):
    client.settings = replace(client.settings, max_redirects=2)
    dest = tmp_path / 'cover.jpg'

    with pytest.raises(HttpStatusError):
        run_with_server(lambda server: client.download(url(server, '/loop'), dest))

    assert not dest.exists()


def test_validate_accepts_image(client):
    assert run_with_server(lambda server: client.validate(url(server, '/image'))) is True


def test_validate_accepts_redirect_to_image(client):
    assert run_with_server(lambda server: client.validate(url(server, '/redirect'))) is True


def test_validate_rejects_html(client):
    with pytest.raises(ValidationError):
        run_with_server(lambda server: client.validate(url(server, '/redirect-page')))


def test_is_image_maps_failures_to_false(client):
    async def probe(server):
        return [
            await client.is_image(url(server, '/image')),
            await client.is_image(url(server, '/page')),
            await client.is_image(url(server, '/error')),
        ]

    assert run_with_server(probe) == [True, False, False]
