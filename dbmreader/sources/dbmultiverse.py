import asyncio
from typing import Optional
from urllib.parse import urljoin

import aiohttp
from bs4 import BeautifulSoup

from dbmreader.core.config import COMIC_BASE_URL, COMIC_LANGUAGE
from .base import PageFetcher, PageFetchError, PageImage

PAGE_IMAGE_SELECTOR = "#balloonsimg img"


def page_url(page_number: int, language: str = COMIC_LANGUAGE, base_url: str = COMIC_BASE_URL) -> str:
    return f"{base_url}/{language}/page-{page_number}.html"


def parse_page_image_url(html: str, base_url: str) -> Optional[str]:
    """Absolute URL of the comic image on a page, or None if absent."""
    soup = BeautifulSoup(html, "html.parser")
    img = soup.select_one(PAGE_IMAGE_SELECTOR)
    if img is None:
        return None
    src = (img.get("src") or "").strip()
    if not src:
        return None
    return urljoin(base_url, src)


class DBMultiverseSource(PageFetcher):
    REQUEST_DELAY = 0.2
    TIMEOUT_SECONDS = 30

    def __init__(self, language: str = COMIC_LANGUAGE, base_url: str = COMIC_BASE_URL):
        self.language = language
        self.base_url = base_url
        self._session: Optional[aiohttp.ClientSession] = None
        self._last_request_time = 0
        self._lock = asyncio.Lock()

    @property
    def source_name(self) -> str:
        return "dbmultiverse"

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.TIMEOUT_SECONDS)
            )
        return self._session

    async def _rate_limit(self):
        async with self._lock:
            now = asyncio.get_running_loop().time()
            elapsed = now - self._last_request_time
            if elapsed < self.REQUEST_DELAY:
                await asyncio.sleep(self.REQUEST_DELAY - elapsed)
            self._last_request_time = asyncio.get_running_loop().time()

    async def _get(self, url: str) -> bytes:
        await self._rate_limit()
        session = await self._get_session()
        async with session.get(url) as response:
            response.raise_for_status()
            return await response.read()

    async def fetch(self, page_number: int) -> PageImage:
        url = page_url(page_number, self.language, self.base_url)
        try:
            html = await self._get(url)
            image_url = parse_page_image_url(html.decode("utf-8", errors="replace"), url)
            if image_url is None:
                raise PageFetchError(page_number, f"no comic image found on {url}")
            data = await self._get(image_url)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise PageFetchError(page_number, str(e) or type(e).__name__) from e

        if not data:
            raise PageFetchError(page_number, f"empty image at {image_url}")
        return PageImage(page_number=page_number, url=image_url, data=data)

    async def close(self):
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None
