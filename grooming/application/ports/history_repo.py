from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Protocol

from .appointments_repo import AppointmentDto


@dataclass
class AppointmentHistoryDto:
    id: int
    appointment_id: int
    user_id: int
    service_type_id: int
    scheduled_at: datetime
    completed_at: datetime
    base_price: Decimal
    discount_applied: Decimal
    final_price: Decimal


class HistoryRepository(Protocol):
    def completed_without_history(self) -> List[AppointmentDto]:
        ...

    def append(self, appointment: AppointmentDto, completed_at: datetime) -> AppointmentHistoryDto:
        ...

    def list_for_user(self, user_id: int) -> List[AppointmentHistoryDto]:
        ...
