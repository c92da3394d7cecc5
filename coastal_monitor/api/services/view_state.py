import asyncio
import logging
from collections import OrderedDict
from typing import List, Optional

from coastal_monitor.api.models.errors import AuthenticationRequired
from coastal_monitor.api.models.schemas import HazardReport, SocialMediaAnalysis, User

logger = logging.getLogger(__name__)


class ReportStore:
    """Reports and user as last loaded for one view; reloaded only through refresh()."""

    def __init__(self, report_entity, user_entity, limit=100, sort='-created_date'):
        self.report_entity = report_entity
        self.user_entity = user_entity
        self.limit = limit
        self.sort = sort
        self.reports: List[HazardReport] = []
        self.user: Optional[User] = None

    async def refresh(self):
        reports, user = await asyncio.gather(
            self.report_entity.list(self.sort, self.limit),
            self.user_entity.me(),
            return_exceptions=True
        )

        if isinstance(user, AuthenticationRequired):
            raise user
        if isinstance(user, Exception):
            logger.error(f"Error loading user: {user}")
            self.user = None
        else:
            self.user = user

        if isinstance(reports, AuthenticationRequired):
            raise reports
        if isinstance(reports, Exception):
            logger.error(f"Error loading reports: {reports}")
            self.reports = []
        else:
            self.reports = reports

        logger.info(f"Loaded {len(self.reports)} reports")
        return self


class SocialAnalysisCache:
    """Last simulated social-media analysis per user, kept in process memory only.

    Users without an id or email are never cached. Past `max_entries` the
    least recently used user is dropped.
    """

    def __init__(self, max_entries=256):
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, SocialMediaAnalysis]" = OrderedDict()

    @staticmethod
    def _key(user: Optional[User]):
        if user is None:
            return None
        return user.id or user.email

    def get(self, user: Optional[User]) -> Optional[SocialMediaAnalysis]:
        key = self._key(user)
        if key is None or key not in self._entries:
            return None
        self._entries.move_to_end(key)
        return self._entries[key]

    def put(self, user: Optional[User], analysis: SocialMediaAnalysis):
        key = self._key(user)
        if key is None:
            return
        self._entries[key] = analysis
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def __len__(self):
        return len(self._entries)
