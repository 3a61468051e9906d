from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response, status
import logging

from ..application.services.appointments_service import AppointmentsService
from ..schemas.appointments.appointment import (
    AppointmentCreate,
    AppointmentUpdate,
    StatusUpdate,
    AppointmentResponse,
    AppointmentDetailResponse,
    AppointmentPermissions,
)
from ..schemas.common.common import ErrorResponse
from .deps import get_current_user, get_appointments_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/appointments",
    tags=["Appointments"],
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)


@router.get("", response_model=List[AppointmentResponse])
def list_appointments(
    on_date: Optional[date] = Query(default=None, alias="date", description="Only appointments scheduled on this calendar day (UTC)"),
    customer_name: Optional[str] = Query(default=None, description="Substring of the customer's name or username"),
    current_user: int = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    appts = appt_service.list(on_date=on_date, name_contains=customer_name)
    return [AppointmentResponse.model_validate(a) for a in appts]


@router.post(
    "",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
def create_appointment(
    appointment_data: AppointmentCreate,
    response: Response,
    current_user: int = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    appt = appt_service.create(current_user, appointment_data.service_type_id, appointment_data.scheduled_at)
    response.headers["Location"] = f"{router.prefix}/{appt.id}"
    return AppointmentResponse.model_validate(appt)


@router.get("/mine", response_model=List[AppointmentResponse])
def list_my_appointments(
    current_user: int = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    return [AppointmentResponse.model_validate(a) for a in appt_service.list_for_owner(current_user)]


@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(
    appointment_id: int,
    current_user: int = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    return AppointmentResponse.model_validate(appt_service.get_by_id(appointment_id))


@router.get("/{appointment_id}/details", response_model=AppointmentDetailResponse)
def get_appointment_details(
    appointment_id: int,
    current_user: int = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    return AppointmentDetailResponse.model_validate(appt_service.get_detail(appointment_id))


@router.get("/{appointment_id}/permissions", response_model=AppointmentPermissions)
def get_appointment_permissions(
    appointment_id: int,
    current_user: int = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    return AppointmentPermissions(
        can_modify=appt_service.can_modify(appointment_id, current_user),
        can_delete=appt_service.can_delete(appointment_id, current_user),
    )


@router.put(
    "/{appointment_id}",
    response_model=AppointmentResponse,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def update_appointment(
    appointment_id: int,
    appointment_data: AppointmentUpdate,
    current_user: int = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    appt = appt_service.update(appointment_id, current_user, appointment_data.service_type_id, appointment_data.scheduled_at)
    return AppointmentResponse.model_validate(appt)


@router.delete(
    "/{appointment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={403: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def delete_appointment(
    appointment_id: int,
    current_user: int = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    appt_service.delete(appointment_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch(
    "/{appointment_id}/status",
    response_model=AppointmentResponse,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def update_appointment_status(
    appointment_id: int,
    status_data: StatusUpdate,
    current_user: int = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    appt = appt_service.set_status(appointment_id, current_user, status_data.status.strip())
    return AppointmentResponse.model_validate(appt)
