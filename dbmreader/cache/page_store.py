import json
import logging
import os
import shutil
import threading
from pathlib import Path
from typing import Optional

from dbmreader.core.config import CACHE_ROOT
from dbmreader.models import CachedChapter, Page

logger = logging.getLogger(__name__)

INDEX_FILE_NAME = "metadata.json"


class PageStore:
    """File-backed page cache.

    Single pages live at ``Chapters/Chapter_<N>/Page_<P>.jpg``. Double-page
    spreads are stored as ``Page_<P>-<Q>.jpg`` and recorded in the chapter's
    ``metadata.json`` index, since their name cannot be derived from ``P``.
    """

    def __init__(self, cache_root: Optional[Path] = None):

        self.cache_root = Path(cache_root) if cache_root is not None else CACHE_ROOT
        self.chapters_dir = self.cache_root / "Chapters"

        self._locks: dict[int, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _chapter_lock(self, chapter: int) -> threading.Lock:

        with self._locks_guard:
            lock = self._locks.get(chapter)
            if lock is None:
                lock = self._locks[chapter] = threading.Lock()
            return lock

    def chapter_dir(self, chapter: int) -> Path:

        return self.chapters_dir / f"Chapter_{chapter}"

    @staticmethod
    def page_file_name(page: int, second_page: Optional[int] = None) -> str:

        if second_page is not None:
            return f"Page_{page}-{second_page}.jpg"
        return f"Page_{page}.jpg"

    def page_path(self, chapter: int, page: int, second_page: Optional[int] = None) -> Path:

        return self.chapter_dir(chapter) / self.page_file_name(page, second_page)

    def _index_path(self, chapter: int) -> Path:

        return self.chapter_dir(chapter) / INDEX_FILE_NAME

    def _read_index(self, chapter: int) -> list[dict]:
        # missing or unreadable index counts as empty
        index_path = self._index_path(chapter)
        if not index_path.exists():
            return []

        try:
            payload = json.loads(index_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable page index %s: %s", index_path, e)
            return []

        pages = payload.get("pages") if isinstance(payload, dict) else None
        if not isinstance(pages, list):
            logger.warning("Ignoring malformed page index %s", index_path)
            return []
        return [entry for entry in pages if isinstance(entry, dict)]

    def _write_index(self, chapter: int, pages: list[dict]):

        _write_atomic(self._index_path(chapter), json.dumps({"pages": pages}, indent=2).encode("utf-8"))

    def load(self, chapter: int, page: int) -> Optional[Page]:
        """Return the cached page, or None on a cache miss."""
        single_path = self.page_path(chapter, page)
        if single_path.is_file():
            return Page(chapter=chapter, page_number=page, image_data=single_path.read_bytes())

        for entry in self._read_index(chapter):
            if entry.get("pageNumber") != page:
                continue

            file_name = entry.get("fileName")
            second_page = entry.get("secondPageNumber")
            if not isinstance(file_name, str) or not isinstance(second_page, int):
                continue

            spread_path = self.chapter_dir(chapter) / file_name
            if spread_path.is_file():
                return Page(
                    chapter=chapter,
                    page_number=page,
                    second_page_number=second_page,
                    image_data=spread_path.read_bytes(),
                )

        return None

    def has(self, chapter: int, page: int) -> bool:

        return self.load(chapter, page) is not None

    def save(self, page: Page) -> Path:
        """Persist ``page`` and return the image path.

        Raises OSError when the chapter folder, the image or the index
        cannot be written. The image is written before the index entry.
        """
        file_path = self.page_path(page.chapter, page.page_number, page.second_page_number)

        with self._chapter_lock(page.chapter):
            file_path.parent.mkdir(parents=True, exist_ok=True)
            _write_atomic(file_path, page.image_data)

            if page.second_page_number is not None:
                pages = self._read_index(page.chapter)
                pages.append({
                    "pageNumber": page.page_number,
                    "secondPageNumber": page.second_page_number,
                    "fileName": file_path.name,
                })
                self._write_index(page.chapter, pages)

        return file_path

    def list_cached_chapters(self) -> list[CachedChapter]:

        if not self.chapters_dir.is_dir():
            return []

        chapters = []
        for folder in self.chapters_dir.iterdir():
            if not folder.is_dir() or not folder.name.startswith("Chapter_"):
                continue
            image_count = sum(1 for p in folder.iterdir() if p.is_file() and p.suffix.lower() == ".jpg")
            chapters.append(CachedChapter(number=folder.name[len("Chapter_"):], image_count=image_count))

        return sorted(chapters, key=_chapter_sort_key)

    def clear(self):
        """Delete everything under the cache root."""
        if not self.cache_root.exists():
            return

        for entry in self.cache_root.iterdir():
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
        logger.info("Cleared page cache at %s", self.cache_root)

    def get_stats(self) -> dict:

        chapters = self.list_cached_chapters()
        disk_size = 0
        if self.chapters_dir.is_dir():
            disk_size = sum(p.stat().st_size for p in self.chapters_dir.rglob("*.jpg") if p.is_file())

        return {
            "chapters": len(chapters),
            "images": sum(c.image_count for c in chapters),
            "disk_size_mb": disk_size / (1024 * 1024),
        }


def _chapter_sort_key(chapter: CachedChapter):
    if chapter.number.isdigit():
        return (0, int(chapter.number))
    return (1, chapter.number)


def _write_atomic(path: Path, data: bytes):
    # a partial write must never be visible under the final name
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        tmp_path.write_bytes(data)
        os.replace(tmp_path, path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise
