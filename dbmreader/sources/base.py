from abc import ABC, abstractmethod
from dataclasses import dataclass, field


class PageFetchError(Exception):
    """A page could not be retrieved this round."""

    def __init__(self, page_number: int, reason: str):
        super().__init__(f"Page {page_number}: {reason}")
        self.page_number = page_number
        self.reason = reason


@dataclass(frozen=True)
class PageImage:
    page_number: int
    url: str
    data: bytes = field(repr=False)


class PageFetcher(ABC):
    @property
    @abstractmethod
    def source_name(self) -> str:
        pass

    @abstractmethod
    async def fetch(self, page_number: int) -> PageImage:
        """Return the image for ``page_number`` or raise PageFetchError."""
        pass

    async def close(self):
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
