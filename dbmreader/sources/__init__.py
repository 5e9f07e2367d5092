from .base import PageFetcher, PageFetchError, PageImage
from .dbmultiverse import DBMultiverseSource

__all__ = ["PageFetcher", "PageFetchError", "PageImage", "DBMultiverseSource"]
