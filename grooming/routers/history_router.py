from typing import List
from fastapi import APIRouter, Depends

from ..application.services.history_service import HistoryService
from ..schemas.history.history import AppointmentHistoryResponse, ArchiveResult
from .deps import get_current_user, get_history_service

router = APIRouter(prefix="/appointment-history", tags=["Appointment History"])


@router.get("", response_model=List[AppointmentHistoryResponse])
def get_my_history(
    current_user: int = Depends(get_current_user),
    history_service: HistoryService = Depends(get_history_service),
):
    return [AppointmentHistoryResponse.model_validate(h) for h in history_service.list_for_user(current_user)]


@router.post("/archive", response_model=ArchiveResult)
def archive_completed(
    current_user: int = Depends(get_current_user),
    history_service: HistoryService = Depends(get_history_service),
):
    return ArchiveResult(archived=len(history_service.archive_completed()))
