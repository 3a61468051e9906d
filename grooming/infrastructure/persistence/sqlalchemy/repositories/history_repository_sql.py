from datetime import datetime
from typing import List
import logging

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .....db.models import Appointment, AppointmentHistory
from .....application.ports.appointments_repo import AppointmentDto, AppointmentStatus
from .....application.ports.history_repo import HistoryRepository, AppointmentHistoryDto
from .appointments_repository_sql import appointment_to_dto

logger = logging.getLogger(__name__)


class SqlHistoryRepository(HistoryRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, h: AppointmentHistory) -> AppointmentHistoryDto:
        return AppointmentHistoryDto(
            id=h.id,
            appointment_id=h.appointment_id,
            user_id=h.user_id,
            service_type_id=h.service_type_id,
            scheduled_at=h.scheduled_at,
            completed_at=h.completed_at,
            base_price=h.base_price,
            discount_applied=h.discount_applied,
            final_price=h.final_price,
        )

    def completed_without_history(self) -> List[AppointmentDto]:
        archived = select(AppointmentHistory.appointment_id)
        rows = self.session.exec(
            select(Appointment)
            .where(Appointment.status == AppointmentStatus.COMPLETED.value)
            .where(Appointment.id.not_in(archived))
            .order_by(Appointment.id)
        ).all()
        return [appointment_to_dto(r) for r in rows]

    def append(self, appointment: AppointmentDto, completed_at: datetime) -> AppointmentHistoryDto:
        entry = AppointmentHistory(
            appointment_id=appointment.id,
            user_id=appointment.user_id,
            service_type_id=appointment.service_type_id,
            scheduled_at=appointment.scheduled_at,
            completed_at=completed_at,
            base_price=appointment.base_price,
            discount_applied=appointment.discount_amount,
            final_price=appointment.final_price,
        )
        self.session.add(entry)
        try:
            self.session.commit()
        except IntegrityError:
            # Archived concurrently; history rows are never rewritten
            self.session.rollback()
            logger.warning(f"Appointment {appointment.id} already archived")
            entry = self.session.exec(
                select(AppointmentHistory).where(AppointmentHistory.appointment_id == appointment.id)
            ).one()
            return self._to_dto(entry)
        self.session.refresh(entry)
        return self._to_dto(entry)

    def list_for_user(self, user_id: int) -> List[AppointmentHistoryDto]:
        rows = self.session.exec(
            select(AppointmentHistory)
            .where(AppointmentHistory.user_id == user_id)
            .order_by(AppointmentHistory.completed_at.desc(), AppointmentHistory.id.desc())
        ).all()
        return [self._to_dto(r) for r in rows]
