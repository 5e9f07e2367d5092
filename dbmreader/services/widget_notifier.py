import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, Optional

from dbmreader.core.config import WIDGET_DEBOUNCE_SECONDS, WIDGET_KIND, WIDGET_MIN_PROGRESS_DELTA
from dbmreader.models import WidgetSyncState
from .cover_service import CoverImageManager

logger = logging.getLogger(__name__)


class WidgetReloadSignal(ABC):
    @abstractmethod
    def reload_timelines(self, kind: str):
        pass


class CallbackReloadSignal(WidgetReloadSignal):
    def __init__(self, callback: Callable[[str], None]):
        self.callback = callback

    def reload_timelines(self, kind: str):
        self.callback(kind)


class RecordingReloadSignal(WidgetReloadSignal):
    """Counts reloads per kind so a polling widget can spot new timelines."""

    def __init__(self):
        self.versions: dict[str, int] = {}

    def reload_timelines(self, kind: str):
        self.versions[kind] = self.versions.get(kind, 0) + 1

    def version(self, kind: str) -> int:
        return self.versions.get(kind, 0)


def should_reload(cached: Optional[WidgetSyncState],
                  target: WidgetSyncState,
                  force: bool = False,
                  minimum_delta: int = WIDGET_MIN_PROGRESS_DELTA) -> bool:
    if force or cached is None:
        return True
    if cached.chapter != target.chapter:
        return True
    return target.progress == 100 or abs(cached.progress - target.progress) >= minimum_delta


class WidgetTimelineNotifier:
    """Decides when reading progress is worth a widget reload.

    Chapter changes reload immediately. Progress changes are debounced on a
    timer thread and only reload once they move the widget by
    ``minimum_progress_delta`` or reach 100. Safe to call from sync code,
    event loop callbacks and worker threads alike.
    """

    def __init__(self,
                 cover_manager: CoverImageManager,
                 reload_signal: WidgetReloadSignal,
                 widget_kind: str = WIDGET_KIND,
                 debounce_delay: float = WIDGET_DEBOUNCE_SECONDS,
                 minimum_progress_delta: int = WIDGET_MIN_PROGRESS_DELTA):
        self.cover_manager = cover_manager
        self.reload_signal = reload_signal
        self.widget_kind = widget_kind
        self.debounce_delay = debounce_delay
        self.minimum_progress_delta = minimum_progress_delta

        self.cached_state: Optional[WidgetSyncState] = cover_manager.load_widget_sync_state()
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        # bumped by every event; a timer only fires for the generation it was armed with
        self._generation = 0

    @property
    def pending(self) -> bool:
        timer = self._timer
        return timer is not None and timer.is_alive()

    def _cancel_locked(self):
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None

    def cancel_pending(self):
        with self._lock:
            self._cancel_locked()

    def notify_chapter_change(self, chapter: int, progress: int) -> bool:
        with self._lock:
            self._cancel_locked()
            return self._trigger_reload_if_needed(WidgetSyncState(chapter=chapter, progress=progress), force=True)

    def notify_progress_change(self, progress: int):
        with self._lock:
            self._cancel_locked()
            timer = threading.Timer(self.debounce_delay, self._debounced_progress, args=(progress, self._generation))
            timer.daemon = True
            self._timer = timer
            timer.start()

    def _debounced_progress(self, progress: int, generation: int):
        try:
            # chapter is read when the timer fires, not when it was armed
            chapter_data = self.cover_manager.load_current_chapter_data()
            with self._lock:
                if generation != self._generation:
                    return
                if chapter_data is None:
                    logger.debug("Progress %s dropped, no current chapter", progress)
                    return
                self._trigger_reload_if_needed(WidgetSyncState(chapter=chapter_data.number, progress=progress))
        except Exception:
            logger.exception("Debounced widget reload for progress %s failed", progress)

    def _trigger_reload_if_needed(self, target: WidgetSyncState, force: bool = False) -> bool:
        if not should_reload(self.cached_state, target, force, self.minimum_progress_delta):
            logger.debug("Skipping widget reload for %s (last %s)", target, self.cached_state)
            return False

        self.reload_signal.reload_timelines(self.widget_kind)
        self.cached_state = target
        self.cover_manager.save_widget_sync_state(target)
        logger.info("Reloaded %s timelines: chapter %s at %s%%", self.widget_kind, target.chapter, target.progress)
        return True

    def wait_pending(self, timeout: Optional[float] = None):
        """Block until an armed debounce has fired or been cancelled."""
        timer = self._timer
        if timer is not None:
            timer.join(timeout)
