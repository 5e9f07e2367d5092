from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Chapter(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    number: int = Field(index=True, unique=True)
    name: str
    start_page: int
    end_page: int
    universe: Optional[int] = None
    last_read_page: Optional[int] = None
    is_read: bool = Field(default=False)
    read_at: Optional[datetime] = None
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def page_count(self) -> int:
        return self.end_page - self.start_page + 1

    def __repr__(self):
        return f"Chapter(number={self.number}, pages={self.start_page}-{self.end_page})"
