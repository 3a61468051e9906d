# grooming/db/models/appointments/history.py
from decimal import Decimal
from typing import Optional
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from datetime import datetime

from ....utils import utcnow

class AppointmentHistory(SQLModel, table=True):
    __tablename__ = "appointment_history"
    id: Optional[int] = Field(default=None, primary_key=True)
    # No FK on appointment_id: appointments are hard-deleted, history is kept
    appointment_id: int = Field(index=True, unique=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    service_type_id: int = Field(foreign_key="service_types.id")
    scheduled_at: datetime = Field(sa_type=DateTime)
    completed_at: datetime = Field(default_factory=utcnow, sa_type=DateTime, index=True)
    base_price: Decimal = Field(max_digits=10, decimal_places=2)
    discount_applied: Decimal = Field(max_digits=10, decimal_places=2)
    final_price: Decimal = Field(max_digits=10, decimal_places=2)
