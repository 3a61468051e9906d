from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Protocol
from datetime import datetime, date
from decimal import Decimal

from .pricing_oracle import PriceSnapshot


class AppointmentStatus(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED)


@dataclass
class AppointmentDto:
    id: int
    user_id: int
    service_type_id: int
    scheduled_at: datetime
    status: str
    created_at: datetime
    base_price: Decimal
    discount_amount: Decimal
    final_price: Decimal
    version: int = 1

    @property
    def prices(self) -> PriceSnapshot:
        return PriceSnapshot(self.base_price, self.discount_amount, self.final_price)


class AppointmentsRepository(Protocol):
    def get_by_id(self, appointment_id: int) -> Optional[AppointmentDto]:
        ...

    def get_for_update(self, appointment_id: int) -> Optional[AppointmentDto]:
        ...

    def list(self, on_date: Optional[date] = None, name_contains: Optional[str] = None) -> List[AppointmentDto]:
        ...

    def list_for_owner(self, user_id: int) -> List[AppointmentDto]:
        ...

    def create(self, user_id: int, service_type_id: int, scheduled_at: datetime, created_at: datetime, prices: PriceSnapshot) -> AppointmentDto:
        ...

    def update_schedule(self, appointment_id: int, expected_version: int, service_type_id: int, scheduled_at: datetime, prices: PriceSnapshot) -> AppointmentDto:
        ...

    def update_status(self, appointment_id: int, expected_version: int, status: str) -> AppointmentDto:
        ...

    def delete(self, appointment_id: int, expected_version: int) -> None:
        ...
