from .chapter import Chapter
from .cover import ChapterCoverMetadata, CurrentChapterData, WidgetSyncState
from .page import CachedChapter, Page

__all__ = [
    "Chapter",
    "ChapterCoverMetadata",
    "CurrentChapterData",
    "WidgetSyncState",
    "CachedChapter",
    "Page",
]
