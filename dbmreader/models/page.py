from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Page:
    chapter: int
    page_number: int
    image_data: bytes = field(repr=False)
    second_page_number: Optional[int] = None

    @property
    def is_double_page(self) -> bool:
        return self.second_page_number is not None


@dataclass(frozen=True)
class CachedChapter:
    number: str
    image_count: int
