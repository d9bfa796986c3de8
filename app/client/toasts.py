"""One-at-a-time toast presentation, oldest first.

Two states: idle (no active item) and presenting. Leaving ``presenting``
by acknowledge or dismiss always re-checks the queue, so the queue drains
continuously while items remain.
"""
import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import Awaitable, Callable, Deque, Iterable, Optional

from client.api import ApiError, ApplicationsApi
from client.notifications import (
    ApplicantStatusNotification,
    EmployerApplyNotification,
    Notification,
    build_message,
    detail_path,
    toast_variant,
)
from core.config import settings

logger = logging.getLogger(__name__)

TOAST_DURATION_SECONDS = settings.TOAST_DURATION_SECONDS

IDLE = "idle"
PRESENTING = "presenting"


@dataclass(frozen=True)
class Toast:
    item: Notification
    message: str
    variant: str
    duration: float


Presenter = Callable[[Optional[Toast]], None]
Navigator = Callable[[str], None]


class ToastQueue:
    def __init__(
        self,
        api: ApplicationsApi,
        presenter: Optional[Presenter] = None,
        navigate: Optional[Navigator] = None,
        on_applicant_seen: Optional[Callable[[], Awaitable[None]]] = None,
        duration: float = TOAST_DURATION_SECONDS,
    ):
        self._api = api
        self._presenter = presenter
        self._navigate = navigate
        self._on_applicant_seen = on_applicant_seen
        self._duration = duration
        self._pending: Deque[Notification] = deque()
        self._timer: Optional[asyncio.TimerHandle] = None
        # Bumped on clear so in-flight acknowledgements are ignored
        self._generation = 0
        self.active: Optional[Notification] = None

    @property
    def state(self) -> str:
        return PRESENTING if self.active is not None else IDLE

    @property
    def pending(self) -> list[Notification]:
        return list(self._pending)

    def enqueue(self, items: Iterable[Notification]) -> None:
        self._pending.extend(items)
        self._show_next()

    def dismiss(self) -> None:
        """Close the active toast without marking it seen."""
        if self.active is None:
            return
        self._hide()
        self._show_next()

    async def acknowledge(self) -> None:
        """Mark the active item seen, go idle and navigate to its detail view."""
        item = self.active
        if item is None:
            return
        self._cancel_timer()
        generation = self._generation
        marked = False
        try:
            await self._mark_seen(item)
            marked = True
        except ApiError as exc:
            # the item stays unseen server-side and reappears after a reload
            logger.debug("Marking %s seen failed: %s", item.key, exc)
        if generation != self._generation:
            # cleared while the request was in flight
            return
        if self.active is item:
            self._hide()
        path = detail_path(item)
        if path and self._navigate:
            self._navigate(path)
        self._show_next()
        if marked and isinstance(item, ApplicantStatusNotification) and self._on_applicant_seen:
            await self._on_applicant_seen()

    def clear(self) -> None:
        self._generation += 1
        self._cancel_timer()
        self._pending.clear()
        if self.active is not None:
            self.active = None
            self._present(None)

    async def _mark_seen(self, item: Notification) -> None:
        if isinstance(item, EmployerApplyNotification):
            await self._api.mark_employer_seen(item.id)
        elif isinstance(item, ApplicantStatusNotification):
            await self._api.mark_application_seen(item.id)

    def _show_next(self) -> None:
        if self.active is not None or not self._pending:
            return
        item = self._pending.popleft()
        self.active = item
        self._present(Toast(
            item=item,
            message=build_message(item),
            variant=toast_variant(item),
            duration=self._duration,
        ))
        if self._duration:
            self._timer = asyncio.get_running_loop().call_later(self._duration, self._expire, item)

    def _expire(self, item: Notification) -> None:
        self._timer = None
        if self.active is item:
            self.dismiss()

    def _hide(self) -> None:
        self._cancel_timer()
        self.active = None
        self._present(None)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _present(self, toast: Optional[Toast]) -> None:
        if self._presenter:
            self._presenter(toast)
