from fastapi import APIRouter, Depends, HTTPException

from dbmreader.bootstrap import ReaderServices
from dbmreader.services.widget_notifier import RecordingReloadSignal
from .deps import get_services

router = APIRouter(tags=["widget"])


@router.get("/current-chapter")
def current_chapter(services: ReaderServices = Depends(get_services)):
    data = services.cover_manager.load_current_chapter_data()
    if data is None:
        raise HTTPException(status_code=404, detail="No chapter is being read")
    return data.to_dict()


@router.get("/timeline")
def timeline(services: ReaderServices = Depends(get_services)):
    kind = services.notifier.widget_kind
    signal = services.reload_signal
    version = signal.version(kind) if isinstance(signal, RecordingReloadSignal) else None
    return {"kind": kind, "version": version}
