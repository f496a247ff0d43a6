# backend/slotengine/repositories/availability_repository.py
"""
Availability Repository.

Data access for a host's schedule:
- Weekly rules for one weekday
- Date overrides for one host civil date
- Full schedule listing and creation of rules and overrides

Weekdays use 0=Sunday .. 6=Saturday.
"""

from datetime import date
import logging
from typing import Any, List, Optional, cast

from sqlalchemy.orm import Session

from ..models.availability import DateOverride, WeeklyRule
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AvailabilityRepository(BaseRepository[WeeklyRule]):
    """
    Repository for schedule rows.

    The generic CRUD helpers operate on WeeklyRule; overrides have
    dedicated methods.
    """

    def __init__(self, db: Session, timeout_seconds: Optional[float] = None):
        super().__init__(db, WeeklyRule, timeout_seconds=timeout_seconds)
        self.logger = logging.getLogger(__name__)

    def get_weekly_rules(self, host_id: str, weekday: int) -> List[WeeklyRule]:
        """Weekly rules for a host on a weekday, ordered by start time."""
        return self._read(
            "get weekly rules",
            lambda: cast(
                List[WeeklyRule],
                self.db.query(WeeklyRule)
                .filter(WeeklyRule.host_id == host_id, WeeklyRule.day_of_week == weekday)
                .order_by(WeeklyRule.start_time)
                .all(),
            ),
        )

    def get_date_overrides(self, host_id: str, override_date: date) -> List[DateOverride]:
        """All override rows (available or not) for a host civil date."""
        return self._read(
            "get date overrides",
            lambda: cast(
                List[DateOverride],
                self.db.query(DateOverride)
                .filter(DateOverride.host_id == host_id, DateOverride.date == override_date)
                .order_by(DateOverride.start_time)
                .all(),
            ),
        )

    def list_weekly_rules(self, host_id: str) -> List[WeeklyRule]:
        return self._read(
            "list weekly rules",
            lambda: cast(
                List[WeeklyRule],
                self.db.query(WeeklyRule)
                .filter(WeeklyRule.host_id == host_id)
                .order_by(WeeklyRule.day_of_week, WeeklyRule.start_time)
                .all(),
            ),
        )

    def list_date_overrides(self, host_id: str) -> List[DateOverride]:
        return self._read(
            "list date overrides",
            lambda: cast(
                List[DateOverride],
                self.db.query(DateOverride)
                .filter(DateOverride.host_id == host_id)
                .order_by(DateOverride.date, DateOverride.start_time)
                .all(),
            ),
        )

    def create_rule(self, **kwargs: Any) -> WeeklyRule:
        return self.create(**kwargs)

    def create_override(self, **kwargs: Any) -> DateOverride:
        """Create an override row. Does not commit."""
        override_repo: BaseRepository[DateOverride] = BaseRepository(
            self.db, DateOverride, timeout_seconds=self.timeout_seconds
        )
        return override_repo.create(**kwargs)
