import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException

from dbmreader.bootstrap import ReaderServices
from .deps import get_services

logger = logging.getLogger(__name__)

router = APIRouter(tags=["cache"])


@router.get("/chapters")
def cached_chapters(services: ReaderServices = Depends(get_services)):
    return [asdict(c) for c in services.page_store.list_cached_chapters()]


@router.get("/stats")
def cache_stats(services: ReaderServices = Depends(get_services)):
    return services.page_store.get_stats()


@router.delete("")
def clear_cache(services: ReaderServices = Depends(get_services)):
    try:
        services.page_store.clear()
    except OSError as e:
        logger.error("Failed to clear cache: %s", e)
        raise HTTPException(status_code=500, detail=f"Could not clear cache: {e}")
    return {"cleared": True}
