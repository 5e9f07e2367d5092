from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel

from dbmreader.bootstrap import ReaderServices
from dbmreader.models import Chapter, Page
from .deps import get_services

router = APIRouter(tags=["reader"])


class ChapterIn(BaseModel):
    name: str
    start_page: int
    end_page: int
    universe: Optional[int] = None


class CurrentPageIn(BaseModel):
    page: int


def _chapter_dict(chapter: Chapter) -> dict:
    return {
        "number": chapter.number,
        "name": chapter.name,
        "startPage": chapter.start_page,
        "endPage": chapter.end_page,
        "universe": chapter.universe,
        "lastReadPage": chapter.last_read_page,
        "isRead": chapter.is_read,
    }


def _page_dict(page: Page) -> dict:
    return {
        "pageNumber": page.page_number,
        "secondPageNumber": page.second_page_number,
        "size": len(page.image_data),
    }


def _require_chapter(services: ReaderServices, number: int) -> Chapter:
    chapter = services.progress_handler.load_chapter(number)
    if chapter is None:
        raise HTTPException(status_code=404, detail=f"Chapter {number} is not registered")
    return chapter


@router.put("/{number}")
def register_chapter(number: int, body: ChapterIn, services: ReaderServices = Depends(get_services)):
    if body.end_page < body.start_page:
        raise HTTPException(status_code=422, detail="end_page must not precede start_page")
    chapter = services.progress_handler.save_chapter(Chapter(number=number, **body.model_dump()))
    return _chapter_dict(chapter)


@router.post("/{number}/open")
async def open_chapter(number: int, services: ReaderServices = Depends(get_services)):
    """Fetch the chapter's first page and make it the widget's current chapter."""
    chapter = _require_chapter(services, number)
    loader = services.open_chapter(chapter)

    pages = await loader.load_pages([chapter.start_page])
    if pages:
        loader.save_chapter_cover_page(pages[0])

    return {"chapter": _chapter_dict(chapter), "cover": bool(pages)}


@router.get("/{number}/pages")
async def load_pages(number: int,
                     pages: list[int] = Query(...),
                     services: ReaderServices = Depends(get_services)):
    loader = services.open_chapter(_require_chapter(services, number))
    return [_page_dict(p) for p in await loader.load_pages(pages)]


@router.get("/{number}/pages/{page}/image")
async def page_image(number: int, page: int, services: ReaderServices = Depends(get_services)):
    loader = services.open_chapter(_require_chapter(services, number))
    loaded = await loader.load_pages([page])
    if not loaded:
        raise HTTPException(status_code=404, detail=f"Page {page} is not available yet")

    headers = {}
    if loaded[0].is_double_page:
        headers["X-Second-Page-Number"] = str(loaded[0].second_page_number)
    return Response(content=loaded[0].image_data, media_type="image/jpeg", headers=headers)


@router.put("/{number}/current-page")
def update_current_page(number: int, body: CurrentPageIn, services: ReaderServices = Depends(get_services)):
    loader = services.open_chapter(_require_chapter(services, number))
    loader.update_current_page_number(body.page)
    return {"page": body.page, "progress": loader.calculate_progress(body.page)}
