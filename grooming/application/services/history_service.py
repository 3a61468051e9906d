from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List
import logging

from ..ports.history_repo import HistoryRepository, AppointmentHistoryDto
from ...utils import utcnow

logger = logging.getLogger(__name__)


@dataclass
class HistoryService:
    """Archives completed appointments into the append-only history table.

    Runs outside the appointment write path. Archiving is idempotent: an
    appointment that already has a history row is skipped.
    """
    repo: HistoryRepository
    clock: Callable[[], datetime] = utcnow

    def archive_completed(self) -> List[AppointmentHistoryDto]:
        archived_at = self.clock()
        archived = [self.repo.append(appt, archived_at) for appt in self.repo.completed_without_history()]
        if archived:
            logger.info(f"Archived {len(archived)} completed appointments")
        return archived

    def list_for_user(self, user_id: int) -> List[AppointmentHistoryDto]:
        return self.repo.list_for_user(user_id)
