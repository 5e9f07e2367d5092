import logging
from typing import Optional, Protocol

from dbmreader.cache import PageStore
from dbmreader.core.pagination import DEFAULT_RULE, DoublePageRule
from dbmreader.models import Chapter, ChapterCoverMetadata, Page
from dbmreader.sources.base import PageFetcher, PageFetchError
from .cover_service import CoverImageManager
from .widget_notifier import WidgetTimelineNotifier

logger = logging.getLogger(__name__)


class ChapterProgressHandler(Protocol):
    def update_last_read_page(self, page: int, chapter: Chapter): ...

    def mark_chapter_as_read(self, chapter: Chapter): ...


def calculate_progress(chapter: Chapter, page: int) -> int:
    """Percentage of ``chapter`` read when ``page`` is on screen, clamped to 0-100."""
    total_pages = chapter.page_count
    if total_pages <= 0:
        return 0
    pages_read = page - chapter.start_page + 1
    return max(0, min(pages_read * 100 // total_pages, 100))


class ComicPageLoader:
    """Serves a chapter's pages from the cache, falling back to the fetcher.

    Pages are fetched one at a time in the requested order. A page that fails
    to fetch is left out of the result; callers ask again later.
    """

    def __init__(self,
                 chapter: Chapter,
                 page_store: PageStore,
                 fetcher: PageFetcher,
                 progress_handler: ChapterProgressHandler,
                 cover_manager: CoverImageManager,
                 notifier: WidgetTimelineNotifier,
                 double_pages: DoublePageRule = DEFAULT_RULE):
        self.chapter = chapter
        self.page_store = page_store
        self.fetcher = fetcher
        self.progress_handler = progress_handler
        self.cover_manager = cover_manager
        self.notifier = notifier
        self.double_pages = double_pages

    async def load_pages(self, pages: list[int]) -> list[Page]:
        loaded = []

        for page_number in pages:
            if self.double_pages.is_second_page(page_number):
                continue

            cached = self._load_cached(page_number)
            if cached is not None:
                loaded.append(cached)
                continue

            fetched = await self._fetch_page(page_number)
            if fetched is None:
                continue

            loaded.append(fetched)
            try:
                self.page_store.save(fetched)
            except OSError as e:
                logger.warning("Could not cache page %s of chapter %s: %s", page_number, self.chapter.number, e)

        return loaded

    def _load_cached(self, page_number: int) -> Optional[Page]:
        try:
            return self.page_store.load(self.chapter.number, page_number)
        except OSError as e:
            logger.warning("Unreadable cache entry for page %s of chapter %s: %s", page_number, self.chapter.number, e)
            return None

    async def _fetch_page(self, page_number: int) -> Optional[Page]:
        try:
            image = await self.fetcher.fetch(page_number)
        except PageFetchError as e:
            logger.warning("Fetch failed for chapter %s: %s", self.chapter.number, e)
            return None

        return Page(
            chapter=self.chapter.number,
            page_number=page_number,
            second_page_number=self.double_pages.second_page_for(page_number),
            image_data=image.data,
        )

    def calculate_progress(self, page: int) -> int:
        return calculate_progress(self.chapter, page)

    def update_current_page_number(self, page_number: int):
        progress = self.calculate_progress(page_number)

        self.progress_handler.update_last_read_page(page_number, self.chapter)
        if page_number == self.chapter.end_page:
            self.progress_handler.mark_chapter_as_read(self.chapter)

        self.cover_manager.update_progress(progress)
        self.notifier.notify_progress_change(progress)

    def save_chapter_cover_page(self, page: Page):
        progress = self.calculate_progress(page.page_number)
        metadata = ChapterCoverMetadata(
            chapter_name=self.chapter.name,
            chapter_number=self.chapter.number,
            read_progress=progress,
        )

        self.cover_manager.save_current_chapter_data(page.image_data, metadata)
        self.notifier.notify_chapter_change(self.chapter.number, progress)
