import json
import logging
import os
from io import BytesIO
from pathlib import Path
from typing import Any, Optional

from PIL import Image, UnidentifiedImageError

from dbmreader.core.config import COVER_JPEG_QUALITY, COVER_MAX_SIZE, SHARED_CONTAINER_DIR
from dbmreader.models import ChapterCoverMetadata, CurrentChapterData, WidgetSyncState

logger = logging.getLogger(__name__)

IMAGE_FILE_NAME = "chapterCoverImage.jpg"
CHAPTER_DATA_FILE_NAME = "currentChapterData.json"
SYNC_STATE_FILE_NAME = "widgetSyncState.json"


def compress_cover(image_data: bytes,
                   max_size: tuple[int, int] = COVER_MAX_SIZE,
                   quality: int = COVER_JPEG_QUALITY) -> Optional[bytes]:
    try:
        img = Image.open(BytesIO(image_data)).convert("RGB")
    except (UnidentifiedImageError, OSError) as e:
        logger.debug("Cover image could not be decoded: %s", e)
        return None

    img.thumbnail(max_size)
    out = BytesIO()
    img.save(out, "JPEG", quality=quality, optimize=True)
    return out.getvalue()


class CoverImageManager:
    """Files shared with the home-screen widget.

    Holds the current chapter's cover, its ``currentChapterData.json`` record
    and the widget sync state of the last reload.
    """

    def __init__(self, shared_container_dir: Optional[Path] = None):
        self.shared_container_dir = Path(shared_container_dir) if shared_container_dir is not None else SHARED_CONTAINER_DIR
        self.image_path = self.shared_container_dir / IMAGE_FILE_NAME
        self.chapter_data_path = self.shared_container_dir / CHAPTER_DATA_FILE_NAME
        self.sync_state_path = self.shared_container_dir / SYNC_STATE_FILE_NAME

    def _read_json(self, path: Path) -> Any:
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Failed to read %s: %s", path.name, e)
            return None

    def _write_json(self, path: Path, payload: dict):
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(payload), encoding="utf-8")
        os.replace(tmp_path, path)

    def load_current_chapter_data(self) -> Optional[CurrentChapterData]:
        return CurrentChapterData.from_dict(self._read_json(self.chapter_data_path))

    def save_current_chapter_data(self, image_data: bytes, metadata: ChapterCoverMetadata) -> Optional[CurrentChapterData]:
        compressed = compress_cover(image_data)
        if compressed is None:
            logger.error("Failed to compress cover for chapter %s", metadata.chapter_number)
            return None

        try:
            self.image_path.parent.mkdir(parents=True, exist_ok=True)
            self.image_path.write_bytes(compressed)
        except OSError as e:
            logger.error("Unable to save cover image for chapter %s: %s", metadata.chapter_number, e)
            return None

        chapter_data = CurrentChapterData(
            number=metadata.chapter_number,
            name=metadata.chapter_name,
            progress=metadata.read_progress,
            cover_image_path=str(self.image_path),
        )
        try:
            self._write_json(self.chapter_data_path, chapter_data.to_dict())
        except OSError as e:
            logger.error("Failed to save current chapter data: %s", e)
            return None

        logger.debug("Current chapter data saved to %s", self.chapter_data_path)
        return chapter_data

    def update_progress(self, new_progress: int) -> Optional[CurrentChapterData]:
        current = self.load_current_chapter_data()
        if current is None:
            logger.debug("No current chapter recorded, progress %s not stored", new_progress)
            return None

        updated = CurrentChapterData(
            number=current.number,
            name=current.name,
            progress=new_progress,
            cover_image_path=current.cover_image_path,
        )
        try:
            self._write_json(self.chapter_data_path, updated.to_dict())
        except OSError as e:
            logger.error("Failed to update progress: %s", e)
            return None
        return updated

    def load_widget_sync_state(self) -> Optional[WidgetSyncState]:
        return WidgetSyncState.from_dict(self._read_json(self.sync_state_path))

    def save_widget_sync_state(self, state: WidgetSyncState):
        try:
            self._write_json(self.sync_state_path, state.to_dict())
        except OSError as e:
            logger.error("Failed to save widget sync state: %s", e)
