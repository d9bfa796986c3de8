"""Session-scoped notification state.

A ``NotificationSession`` belongs to exactly one signed-in user and role.
``SessionManager`` throws it away and builds a new one whenever the
authenticated user changes instead of resetting it in place.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from client.api import ApiError, ApplicationsApi
from client.poller import APPLICANT, RECOGNIZED_ROLES, POLL_INTERVAL_SECONDS, NotificationPoller
from client.toasts import TOAST_DURATION_SECONDS, Navigator, Presenter, ToastQueue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthUser:
    id: int
    role: str
    token: str


class NotificationSession:
    def __init__(
        self,
        user: AuthUser,
        api: ApplicationsApi,
        presenter: Optional[Presenter] = None,
        navigate: Optional[Navigator] = None,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        toast_duration: float = TOAST_DURATION_SECONDS,
    ):
        self.user = user
        self.api = api
        self.unseen_count = 0
        is_applicant = user.role == APPLICANT
        self.toasts = ToastQueue(
            api,
            presenter=presenter,
            navigate=navigate,
            on_applicant_seen=self.refresh_unseen_count if is_applicant else None,
            duration=toast_duration,
        )
        self.poller = NotificationPoller(
            api,
            user.role,
            self.toasts,
            interval=poll_interval,
            on_enqueued=self.refresh_unseen_count if is_applicant else None,
        )

    async def refresh_unseen_count(self) -> None:
        """Keep the applicant's badge in line with the server."""
        if self.user.role != APPLICANT:
            return
        try:
            self.unseen_count = await self.api.get_unseen_count()
        except ApiError as exc:
            logger.debug("Unseen count refresh failed: %s", exc)

    def start(self) -> None:
        self.poller.start()

    async def close(self) -> None:
        await self.poller.stop()


class SessionManager:
    def __init__(
        self,
        api_factory: Callable[[str], ApplicationsApi],
        presenter: Optional[Presenter] = None,
        navigate: Optional[Navigator] = None,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        toast_duration: float = TOAST_DURATION_SECONDS,
    ):
        self._api_factory = api_factory
        self._presenter = presenter
        self._navigate = navigate
        self._poll_interval = poll_interval
        self._toast_duration = toast_duration
        self.current: Optional[NotificationSession] = None

    async def on_auth_change(self, user: Optional[AuthUser]) -> Optional[NotificationSession]:
        """Tear down the current session and start one for ``user`` if its role polls."""
        await self.close()
        if user is None or user.role not in RECOGNIZED_ROLES:
            return None
        api = self._api_factory(user.token)
        self.current = NotificationSession(
            user,
            api,
            presenter=self._presenter,
            navigate=self._navigate,
            poll_interval=self._poll_interval,
            toast_duration=self._toast_duration,
        )
        self.current.start()
        logger.debug("Started notification session for %s %s", user.role, user.id)
        return self.current

    async def close(self) -> None:
        session, self.current = self.current, None
        if session is not None:
            await session.close()
            await session.api.aclose()
