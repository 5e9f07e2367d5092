from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class ChapterCoverMetadata:
    chapter_name: str
    chapter_number: int
    read_progress: int


@dataclass(frozen=True)
class CurrentChapterData:
    """The chapter being read, as the widget sees it."""
    number: int
    name: str
    progress: int
    cover_image_path: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "number": self.number,
            "name": self.name,
            "progress": self.progress,
            "coverImagePath": self.cover_image_path,
        }

    @classmethod
    def from_dict(cls, data: Any) -> Optional["CurrentChapterData"]:
        if not isinstance(data, dict):
            return None
        try:
            return cls(
                number=int(data["number"]),
                name=str(data["name"]),
                progress=int(data["progress"]),
                cover_image_path=str(data["coverImagePath"]),
            )
        except (KeyError, TypeError, ValueError):
            return None


@dataclass(frozen=True)
class WidgetSyncState:
    """Last state that caused a widget reload."""
    chapter: int
    progress: int

    def to_dict(self) -> dict[str, Any]:
        return {"chapter": self.chapter, "progress": self.progress}

    @classmethod
    def from_dict(cls, data: Any) -> Optional["WidgetSyncState"]:
        if not isinstance(data, dict):
            return None
        try:
            return cls(chapter=int(data["chapter"]), progress=int(data["progress"]))
        except (KeyError, TypeError, ValueError):
            return None
