import logging
import threading
from typing import Dict, Optional, Protocol
from urllib.parse import urljoin, urlparse
from urllib.robotparser import RobotFileParser

import httpx
from bs4 import BeautifulSoup
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from imobi.core.config import Settings, get_settings
from imobi.core.errors import FetchError, FetchTimeout
from imobi.schemas.search import RequestDescriptor

logger = logging.getLogger(__name__)

BROWSER_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
    "Accept-Language": "pt-BR,pt;q=0.9,en;q=0.8",
    "DNT": "1",
    "Upgrade-Insecure-Requests": "1",
    "Cache-Control": "max-age=0",
}
BLOCKED_RESOURCE_TYPES = {"image", "media", "font"}


class Fetcher(Protocol):
    def fetch(self, request: RequestDescriptor) -> BeautifulSoup:  # pragma: no cover - interface
        """Turn a request descriptor into a parsed page or raise FetchError."""


class PageFetcher:
    """Fetches pages over HTTP, or through headless Chromium when a request asks for rendering."""

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        settings: Optional[Settings] = None,
        respect_robots: Optional[bool] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.respect_robots = self.settings.respect_robots if respect_robots is None else respect_robots
        self._client = client
        self._robot_parsers: Dict[str, RobotFileParser] = {}
        self._lock = threading.Lock()

    def _client_or_default(self) -> httpx.Client:
        with self._lock:
            if self._client is None:
                headers = {"User-Agent": self.settings.user_agent, **BROWSER_HEADERS}
                self._client = httpx.Client(
                    headers=headers,
                    timeout=self.settings.request_timeout_seconds,
                    follow_redirects=True,
                    max_redirects=3,
                )
            return self._client

    def close(self) -> None:
        with self._lock:
            if self._client is not None:
                self._client.close()
                self._client = None

    def _load_robots(self, url: str) -> RobotFileParser:
        parsed = urlparse(url)
        origin = f"{parsed.scheme}://{parsed.netloc}"
        with self._lock:
            cached = self._robot_parsers.get(origin)
        if cached is not None:
            return cached

        parser = RobotFileParser()
        try:
            response = self._client_or_default().get(urljoin(origin, "/robots.txt"))
            response.raise_for_status()
            parser.parse(response.text.splitlines())
        except httpx.HTTPError as exc:
            logger.warning("Unable to load robots.txt for %s: %s", origin, exc)
            parser.parse(["User-agent: *", "Allow: /"])
        with self._lock:
            self._robot_parsers[origin] = parser
        return parser

    def _is_allowed(self, url: str) -> bool:
        return self._load_robots(url).can_fetch(self.settings.user_agent, url)

    def fetch(self, request: RequestDescriptor) -> BeautifulSoup:
        url = request.full_url
        if self.respect_robots and not self._is_allowed(url):
            raise FetchError(url, f"Robots disallow fetching {url}")
        html = self._render(request) if request.render else self._get(request)
        return BeautifulSoup(html, "html.parser")

    def _get(self, request: RequestDescriptor) -> str:
        url = request.full_url
        try:
            response = self._client_or_default().get(url, timeout=request.timeout_seconds)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise FetchTimeout(url) from exc
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            raise FetchError(url, f"HTTP {status_code}", status_code=status_code) from exc
        except httpx.HTTPError as exc:
            raise FetchError(url, str(exc) or exc.__class__.__name__) from exc
        return response.text

    def _render(self, request: RequestDescriptor) -> str:
        url = request.full_url
        timeout_ms = int(request.timeout_seconds * 1000)
        try:
            with sync_playwright() as p:
                browser = p.chromium.launch(headless=self.settings.headless)
                try:
                    context = browser.new_context(
                        user_agent=self.settings.user_agent,
                        locale="pt-BR",
                        viewport={"width": 1920, "height": 1080},
                        extra_http_headers={"Accept-Language": BROWSER_HEADERS["Accept-Language"]},
                    )
                    context.route("**/*", self._block_resources)
                    page = context.new_page()
                    logger.info("Rendering %s", url)
                    page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
                    if request.wait_for_selector:
                        try:
                            page.wait_for_selector(request.wait_for_selector, timeout=timeout_ms)
                        except PlaywrightTimeoutError:
                            logger.warning("Selector %s never appeared on %s", request.wait_for_selector, url)
                    if request.settle_ms:
                        page.wait_for_timeout(request.settle_ms)
                    return page.content()
                finally:
                    browser.close()
        except PlaywrightTimeoutError as exc:
            raise FetchTimeout(url) from exc
        except PlaywrightError as exc:
            raise FetchError(url, str(exc)) from exc

    def _block_resources(self, route) -> None:
        if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
            return route.abort()
        return route.continue_()
