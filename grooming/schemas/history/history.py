# grooming/schemas/history/history.py
from pydantic import BaseModel, ConfigDict
from datetime import datetime
from decimal import Decimal

class AppointmentHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    appointment_id: int
    user_id: int
    service_type_id: int
    scheduled_at: datetime
    completed_at: datetime
    base_price: Decimal
    discount_applied: Decimal
    final_price: Decimal

class ArchiveResult(BaseModel):
    archived: int
