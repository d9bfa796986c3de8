"""Periodic unseen-feed polling feeding the toast queue.

Runs as a task on the event loop: once immediately, then every
``interval`` seconds. Failures are logged and the next tick retries.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Optional

from pydantic import ValidationError

from client.api import ApiError, ApplicationsApi
from client.notifications import APPLICANT_STATUS, EMPLOYER_APPLY, parse_notification
from client.toasts import ToastQueue
from core.config import settings

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = settings.POLL_INTERVAL_SECONDS

APPLICANT = "applicant"
EMPLOYER = "employer"
RECOGNIZED_ROLES = (APPLICANT, EMPLOYER)


class NotificationPoller:
    def __init__(
        self,
        api: ApplicationsApi,
        role: str,
        queue: ToastQueue,
        interval: float = POLL_INTERVAL_SECONDS,
        on_enqueued: Optional[Callable[[], Awaitable[None]]] = None,
    ):
        if role not in RECOGNIZED_ROLES:
            raise ValueError(f"Cannot poll notifications for role {role!r}")
        self._api = api
        self.role = role
        self._queue = queue
        self._interval = interval
        self._on_enqueued = on_enqueued
        self._delivered: set[str] = set()
        # Bumped on stop so responses from a torn-down poll are dropped
        self._generation = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def delivered(self) -> frozenset[str]:
        return frozenset(self._delivered)

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        """Cancel the timer and forget everything delivered or queued."""
        self._generation += 1
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._delivered.clear()
        self._queue.clear()

    async def _run(self) -> None:
        while True:
            try:
                await self.poll_once()
            except Exception:
                logger.exception("Notification poll crashed, retrying next interval")
            await asyncio.sleep(self._interval)

    async def _fetch(self) -> tuple[str, list[dict]]:
        if self.role == APPLICANT:
            return APPLICANT_STATUS, await self._api.get_unseen_applications()
        return EMPLOYER_APPLY, await self._api.get_employer_unseen_applications()

    async def poll_once(self) -> int:
        """Run one poll cycle; returns how many items were enqueued."""
        generation = self._generation
        try:
            kind, payloads = await self._fetch()
        except ApiError as exc:
            logger.debug("Notification poll failed: %s", exc)
            return 0
        if generation != self._generation:
            return 0

        fresh = []
        for payload in payloads or []:
            try:
                item = parse_notification(payload, kind)
            except ValidationError:
                logger.debug("Skipping malformed %s notification: %r", kind, payload)
                continue
            if item.key in self._delivered:
                continue
            self._delivered.add(item.key)
            fresh.append(item)

        if not fresh:
            return 0
        # Feed is newest first, the queue is oldest first
        fresh.reverse()
        self._queue.enqueue(fresh)
        if self._on_enqueued:
            await self._on_enqueued()
        return len(fresh)
