from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from sqlalchemy.engine import Engine

from dbmreader.cache import PageStore
from dbmreader.core import config
from dbmreader.core.pagination import DoublePageRule
from dbmreader.db.init_db import init_db
from dbmreader.db.session import make_engine
from dbmreader.models import Chapter
from dbmreader.services.cover_service import CoverImageManager
from dbmreader.services.page_loader import ComicPageLoader
from dbmreader.services.progress_services import SQLChapterProgressHandler
from dbmreader.services.widget_notifier import RecordingReloadSignal, WidgetReloadSignal, WidgetTimelineNotifier
from dbmreader.sources.base import PageFetcher
from dbmreader.sources.dbmultiverse import DBMultiverseSource


@dataclass
class ReaderServices:
    engine: Engine
    page_store: PageStore
    cover_manager: CoverImageManager
    progress_handler: SQLChapterProgressHandler
    reload_signal: WidgetReloadSignal
    notifier: WidgetTimelineNotifier
    double_pages: DoublePageRule
    fetcher: PageFetcher

    def open_chapter(self, chapter: Chapter) -> ComicPageLoader:
        return ComicPageLoader(
            chapter=chapter,
            page_store=self.page_store,
            fetcher=self.fetcher,
            progress_handler=self.progress_handler,
            cover_manager=self.cover_manager,
            notifier=self.notifier,
            double_pages=self.double_pages,
        )

    async def close(self):
        self.notifier.cancel_pending()
        await self.fetcher.close()
        self.engine.dispose()


def build_services(data_dir: Optional[Path] = None,
                   reload_signal: Optional[WidgetReloadSignal] = None,
                   fetcher: Optional[PageFetcher] = None,
                   debounce_delay: float = config.WIDGET_DEBOUNCE_SECONDS) -> ReaderServices:
    """Construct one of each service; the caller owns their lifetime."""
    if data_dir is not None:
        data_dir = Path(data_dir)
        cache_root = data_dir / "cache"
        shared_dir = data_dir / "shared"
        db_path = data_dir / "dbmreader.db"
    else:
        cache_root = config.CACHE_ROOT
        shared_dir = config.SHARED_CONTAINER_DIR
        db_path = config.DB_PATH

    engine = make_engine(db_path)
    init_db(engine)

    cover_manager = CoverImageManager(shared_dir)
    reload_signal = reload_signal or RecordingReloadSignal()

    return ReaderServices(
        engine=engine,
        page_store=PageStore(cache_root),
        cover_manager=cover_manager,
        progress_handler=SQLChapterProgressHandler(engine),
        reload_signal=reload_signal,
        notifier=WidgetTimelineNotifier(cover_manager, reload_signal, debounce_delay=debounce_delay),
        double_pages=DoublePageRule(config.DOUBLE_PAGE_SPREADS),
        fetcher=fetcher or DBMultiverseSource(config.COMIC_LANGUAGE),
    )
