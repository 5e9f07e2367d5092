from __future__ import annotations

from io import BytesIO

import pytest
from PIL import Image

from dbmreader.models import Chapter
from dbmreader.sources.base import PageFetcher, PageFetchError, PageImage


class FakeFetcher(PageFetcher):
    def __init__(self, failing: set[int] | None = None):
        self.calls: list[int] = []
        self.failing = failing or set()

    @property
    def source_name(self) -> str:
        return "fake"

    async def fetch(self, page_number: int) -> PageImage:
        self.calls.append(page_number)
        if page_number in self.failing:
            raise PageFetchError(page_number, "offline")
        return PageImage(page_number=page_number, url=f"https://example.test/{page_number}.jpg", data=image_bytes_for(page_number))


class FakeProgressHandler:
    def __init__(self):
        self.last_read: list[tuple[int, int]] = []
        self.read_chapters: list[int] = []

    def update_last_read_page(self, page: int, chapter: Chapter):
        self.last_read.append((page, chapter.number))

    def mark_chapter_as_read(self, chapter: Chapter):
        self.read_chapters.append(chapter.number)


def image_bytes_for(page_number: int) -> bytes:
    return f"page-{page_number}".encode()


def make_jpeg(size=(40, 60), color=(200, 30, 30)) -> bytes:
    out = BytesIO()
    Image.new("RGB", size, color).save(out, "JPEG")
    return out.getvalue()


@pytest.fixture
def chapter() -> Chapter:
    return Chapter(number=3, name="The Tournament", start_page=0, end_page=23)
