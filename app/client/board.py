import copy
import logging
from typing import Optional

from client.api import ApiError, ApplicationsApi

logger = logging.getLogger(__name__)


class ApplicantsBoard:
    """Employer view of one job's applications with optimistic status changes."""

    def __init__(self, api: ApplicationsApi, job_id: int):
        self._api = api
        self.job_id = job_id
        self.applications: list[dict] = []
        self.updating_id: Optional[int] = None

    async def load(self) -> list[dict]:
        self.applications = await self._api.get_job_applications(self.job_id)
        return self.applications

    async def change_status(self, application_id: int, next_status: str) -> dict:
        """Show the new status immediately; restore the previous list if the server refuses."""
        snapshot = copy.deepcopy(self.applications)
        self.applications = [
            {**a, "status": next_status} if a.get("id") == application_id else a
            for a in self.applications
        ]
        self.updating_id = application_id
        try:
            updated = await self._api.update_application_status(application_id, next_status)
        except ApiError as exc:
            logger.info("Status change for application %s rolled back: %s", application_id, exc.message)
            self.applications = snapshot
            raise
        finally:
            self.updating_id = None

        self.applications = [
            updated if a.get("id") == application_id else a
            for a in self.applications
        ]
        return updated
