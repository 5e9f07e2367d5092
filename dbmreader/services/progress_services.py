import logging
from typing import Optional

from sqlalchemy.engine import Engine
from sqlmodel import select

from dbmreader.db.session import get_session
from dbmreader.models import Chapter
from dbmreader.models.chapter import utcnow

logger = logging.getLogger(__name__)


class SQLChapterProgressHandler:
    """Chapter list storage: last read page and read flags, keyed by chapter number."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def _get_or_create(self, session, chapter: Chapter) -> Chapter:
        row = session.exec(select(Chapter).where(Chapter.number == chapter.number)).first()
        if row is None:
            row = Chapter(
                number=chapter.number,
                name=chapter.name,
                start_page=chapter.start_page,
                end_page=chapter.end_page,
                universe=chapter.universe,
            )
            session.add(row)
        return row

    def save_chapter(self, chapter: Chapter) -> Chapter:
        """Register ``chapter`` or refresh its name and page range, keeping progress."""
        with get_session(self.engine) as session:
            row = self._get_or_create(session, chapter)
            row.name = chapter.name
            row.start_page = chapter.start_page
            row.end_page = chapter.end_page
            row.universe = chapter.universe
            row.updated_at = utcnow()
            session.commit()
            session.refresh(row)
            session.expunge(row)
            return row

    def update_last_read_page(self, page: int, chapter: Chapter):
        with get_session(self.engine) as session:
            row = self._get_or_create(session, chapter)
            row.last_read_page = page
            row.updated_at = utcnow()
            session.commit()

    def mark_chapter_as_read(self, chapter: Chapter):
        with get_session(self.engine) as session:
            row = self._get_or_create(session, chapter)
            if not row.is_read:
                row.is_read = True
                row.read_at = utcnow()
            row.updated_at = utcnow()
            session.commit()
        logger.info("Chapter %s marked as read", chapter.number)

    def load_last_read_page(self, number: int) -> Optional[int]:
        with get_session(self.engine) as session:
            row = session.exec(select(Chapter).where(Chapter.number == number)).first()
            return row.last_read_page if row else None

    def load_chapter(self, number: int) -> Optional[Chapter]:
        with get_session(self.engine) as session:
            row = session.exec(select(Chapter).where(Chapter.number == number)).first()
            if row is None:
                return None
            session.expunge(row)
            return row
