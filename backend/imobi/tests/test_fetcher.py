from pathlib import Path
from typing import List

import httpx
import pytest

from imobi.core.config import Settings
from imobi.core.errors import FetchError, FetchTimeout
from imobi.schemas.search import RequestDescriptor
from imobi.services.fetcher import PageFetcher

FIXTURES = Path(__file__).parent / "fixtures"


def _read_fixture(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


def _fetcher(handler, respect_robots: bool = True) -> PageFetcher:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return PageFetcher(client=client, settings=Settings(), respect_robots=respect_robots)


def test_fetch_parses_html_and_sends_query_params():
    seen: List[httpx.Request] = []
    search_page = _read_fixture("vivareal_search.html")

    def transport(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path.endswith("robots.txt"):
            return httpx.Response(200, text="User-agent: *\nAllow: /")
        return httpx.Response(200, text=search_page)

    fetcher = _fetcher(transport)
    document = fetcher.fetch(
        RequestDescriptor(url="https://www.vivareal.com.br/venda/", params=(("q", "Curitiba"), ("pagina", "2")))
    )

    assert len(document.select('[data-type="property"]')) == 4
    assert seen[-1].url.params["q"] == "Curitiba"
    assert seen[-1].url.params["pagina"] == "2"


def test_robots_file_is_loaded_once_per_origin():
    robots_requests = []

    def transport(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/robots.txt":
            robots_requests.append(request)
            return httpx.Response(200, text="User-agent: *\nAllow: /")
        return httpx.Response(200, text="<html></html>")

    fetcher = _fetcher(transport)
    fetcher.fetch(RequestDescriptor(url="https://imoveis.example.com/busca/"))
    fetcher.fetch(RequestDescriptor(url="https://imoveis.example.com/busca/", params=(("pagina", "2"),)))

    assert len(robots_requests) == 1


def test_http_errors_become_fetch_errors():
    def transport(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("robots.txt"):
            return httpx.Response(404)
        return httpx.Response(503, text="unavailable")

    with pytest.raises(FetchError) as excinfo:
        _fetcher(transport).fetch(RequestDescriptor(url="https://imoveis.example.com/busca/"))

    assert excinfo.value.status_code == 503
    assert str(excinfo.value) == "HTTP 503"
    assert not isinstance(excinfo.value, FetchTimeout)


def test_timeouts_become_fetch_timeouts():
    def transport(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("read timed out", request=request)

    with pytest.raises(FetchTimeout) as excinfo:
        _fetcher(transport, respect_robots=False).fetch(RequestDescriptor(url="https://imoveis.example.com/busca/"))

    assert str(excinfo.value) == "timeout"


def test_connection_errors_become_fetch_errors():
    def transport(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(FetchError, match="connection refused"):
        _fetcher(transport, respect_robots=False).fetch(RequestDescriptor(url="https://imoveis.example.com/busca/"))


def test_robots_disallow_blocks_the_fetch():
    fetched = []

    def transport(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/robots.txt":
            return httpx.Response(200, text="User-agent: *\nDisallow: /busca/")
        fetched.append(request)
        return httpx.Response(200, text="<html></html>")

    with pytest.raises(FetchError, match="Robots disallow"):
        _fetcher(transport).fetch(RequestDescriptor(url="https://imoveis.example.com/busca/", params=(("q", "casa"),)))

    assert fetched == []


def test_robots_can_be_ignored():
    def transport(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/robots.txt":
            return httpx.Response(200, text="User-agent: *\nDisallow: /")
        return httpx.Response(200, text="<p class='ok'>ok</p>")

    document = _fetcher(transport, respect_robots=False).fetch(RequestDescriptor(url="https://imoveis.example.com/"))
    assert document.select_one(".ok").get_text() == "ok"


def test_close_releases_the_http_client():
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<p>ok</p>")))
    fetcher = PageFetcher(client=client, settings=Settings(), respect_robots=False)

    fetcher.close()
    fetcher.close()

    assert client.is_closed
