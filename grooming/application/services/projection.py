from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..ports.appointments_repo import AppointmentDto
from ..ports.catalog_repo import ServiceTypeDto
from ..ports.user_repo import UserDto

UNAVAILABLE_SERVICE_TYPE_NAME = "Unavailable"


@dataclass
class AppointmentSummary:
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


@dataclass
class AppointmentDetail(AppointmentSummary):
    user_created_at: Optional[datetime]


def to_summary(
    appointment: AppointmentDto,
    service_type: Optional[ServiceTypeDto],
    owner: Optional[UserDto],
    unavailable_name: str = UNAVAILABLE_SERVICE_TYPE_NAME,
) -> AppointmentSummary:
    # Prices always come from the stored snapshot, never from the catalog
    return AppointmentSummary(
        id=appointment.id,
        user_id=appointment.user_id,
        username=owner.username if owner else "",
        first_name=owner.first_name if owner else "",
        service_type_id=appointment.service_type_id,
        service_type_name=service_type.name if service_type else unavailable_name,
        duration_minutes=service_type.duration_minutes if service_type else 0,
        base_price=appointment.base_price,
        discount_amount=appointment.discount_amount,
        final_price=appointment.final_price,
        scheduled_at=appointment.scheduled_at,
        status=appointment.status,
        created_at=appointment.created_at,
    )


def to_detail(
    appointment: AppointmentDto,
    service_type: Optional[ServiceTypeDto],
    owner: Optional[UserDto],
    unavailable_name: str = UNAVAILABLE_SERVICE_TYPE_NAME,
) -> AppointmentDetail:
    summary = to_summary(appointment, service_type, owner, unavailable_name)
    return AppointmentDetail(**vars(summary), user_created_at=owner.created_at if owner else None)
