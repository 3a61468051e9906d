# grooming/schemas/appointments/appointment.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal

class AppointmentBase(BaseModel):
    service_type_id: int = Field(gt=0)
    scheduled_at: datetime

class AppointmentCreate(AppointmentBase):
    pass

class AppointmentUpdate(AppointmentBase):
    pass

class StatusUpdate(BaseModel):
    status: str = Field(min_length=1)

class AppointmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    username: str
    first_name: str
    service_type_id: int
    service_type_name: str
    duration_minutes: int
    base_price: Decimal
    discount_amount: Decimal
    final_price: Decimal
    scheduled_at: datetime
    status: str
    created_at: datetime

class AppointmentDetailResponse(AppointmentResponse):
    user_created_at: Optional[datetime] = None

class AppointmentPermissions(BaseModel):
    can_modify: bool
    can_delete: bool
