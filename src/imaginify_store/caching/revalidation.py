"""Page revalidation notifications issued after data changes."""

import asyncio
import inspect
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Deque, Dict, List, Set

from ..core.constants import REVALIDATION_HISTORY_LIMIT
from ..logging import get_logger

logger = get_logger(__name__)

RevalidationListener = Callable[["RevalidationEvent"], Any]


@dataclass
class RevalidationEvent:
    """A request to regenerate cached pages under a path."""
    path: str
    kind: str  # 'page' or 'layout'
    timestamp: datetime = field(default_factory=datetime.now)


class RevalidationService:
    """Fire-and-forget page revalidation hook.

    Listeners are plain or async callables taking a ``RevalidationEvent``.
    A failing listener is logged and never affects the caller.
    """
    
    def __init__(self, history_limit: int = REVALIDATION_HISTORY_LIMIT) -> None:
        self.history: Deque[RevalidationEvent] = deque(maxlen=history_limit)
        self._total = 0
        self._listeners: List[RevalidationListener] = []
        self._tasks: Set[asyncio.Task] = set()
        self._errors = 0
    
    def subscribe(self, listener: RevalidationListener) -> None:
        """Register a listener notified on every revalidation."""
        self._listeners.append(listener)
    
    def unsubscribe(self, listener: RevalidationListener) -> None:
        """Remove a previously registered listener."""
        if listener in self._listeners:
            self._listeners.remove(listener)
    
    def revalidate_path(self, path: str, kind: str = "page") -> RevalidationEvent:
        """Ask the web layer to regenerate cached pages under ``path``."""
        event = RevalidationEvent(path=path, kind=kind)
        self.history.append(event)
        self._total += 1
        logger.info("Path revalidation requested", path=path, kind=kind)
        
        for listener in list(self._listeners):
            self._notify(listener, event)
        
        return event
    
    def _notify(self, listener: RevalidationListener, event: RevalidationEvent) -> None:
        try:
            outcome = listener(event)
        except Exception as e:
            self._errors += 1
            logger.error("Revalidation listener failed", path=event.path, error=str(e))
            return
        
        if inspect.isawaitable(outcome):
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                if inspect.iscoroutine(outcome):
                    outcome.close()
                logger.warning("No running event loop for async revalidation listener", path=event.path)
                return
            task = loop.create_task(outcome) if inspect.iscoroutine(outcome) else asyncio.ensure_future(outcome)
            self._tasks.add(task)
            task.add_done_callback(self._on_task_done)
    
    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self._errors += 1
            logger.error("Async revalidation listener failed", error=str(error))
    
    async def drain(self) -> None:
        """Wait for scheduled async listeners to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
    
    def get_revalidation_stats(self) -> Dict[str, Any]:
        """Get statistics about revalidation activity."""
        return {
            "total_revalidations": self._total,
            "pending_listeners": len(self._tasks),
            "listener_errors": self._errors,
            "paths": sorted({event.path for event in self.history}),
            "last_updated": datetime.now().isoformat()
        }


# Global revalidation service instance
revalidation_service = RevalidationService()
