from datetime import date, datetime, time, timedelta
from typing import List, Optional
import logging

from sqlalchemy import update, delete, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from .....db.models import Appointment, User
from .....application.ports.appointments_repo import (
    AppointmentsRepository,
    AppointmentDto,
    AppointmentStatus,
)
from .....application.ports.pricing_oracle import PriceSnapshot
from .....exceptions import ConcurrentModificationError, NotFoundError

logger = logging.getLogger(__name__)


def like_pattern(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def appointment_to_dto(a: Appointment) -> AppointmentDto:
    return AppointmentDto(
        id=a.id,
        user_id=a.user_id,
        service_type_id=a.service_type_id,
        scheduled_at=a.scheduled_at,
        status=a.status,
        created_at=a.created_at,
        base_price=a.base_price,
        discount_amount=a.discount_amount,
        final_price=a.final_price,
        version=a.version,
    )


class SqlAppointmentsRepository(AppointmentsRepository):
    def __init__(self, session: Session):
        self.session = session
        self.table = Appointment.__table__

    def get_by_id(self, appointment_id: int) -> Optional[AppointmentDto]:
        a = self.session.get(Appointment, appointment_id, populate_existing=True)
        return appointment_to_dto(a) if a else None

    def get_for_update(self, appointment_id: int) -> Optional[AppointmentDto]:
        # Row lock where the dialect has one; the version check covers the rest
        a = self.session.exec(
            select(Appointment)
            .where(Appointment.id == appointment_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).first()
        return appointment_to_dto(a) if a else None

    def list(self, on_date: Optional[date] = None, name_contains: Optional[str] = None) -> List[AppointmentDto]:
        stmt = select(Appointment)
        if on_date is not None:
            start = datetime.combine(on_date, time.min)
            stmt = stmt.where(Appointment.scheduled_at >= start).where(Appointment.scheduled_at < start + timedelta(days=1))
        if name_contains:
            pattern = like_pattern(name_contains)
            stmt = stmt.join(User, User.id == Appointment.user_id).where(
                or_(User.first_name.ilike(pattern, escape="\\"), User.username.ilike(pattern, escape="\\"))
            )
        rows = self.session.exec(stmt.order_by(Appointment.scheduled_at.asc(), Appointment.id.asc())).all()
        return [appointment_to_dto(r) for r in rows]

    def list_for_owner(self, user_id: int) -> List[AppointmentDto]:
        rows = self.session.exec(
            select(Appointment)
            .where(Appointment.user_id == user_id)
            .order_by(Appointment.scheduled_at.asc(), Appointment.id.asc())
        ).all()
        return [appointment_to_dto(r) for r in rows]

    def create(self, user_id: int, service_type_id: int, scheduled_at: datetime, created_at: datetime, prices: PriceSnapshot) -> AppointmentDto:
        appt = Appointment(
            user_id=user_id,
            service_type_id=service_type_id,
            scheduled_at=scheduled_at,
            status=AppointmentStatus.PENDING.value,
            created_at=created_at,
            base_price=prices.base_price,
            discount_amount=prices.discount_amount,
            final_price=prices.final_price,
            version=1,
        )
        try:
            self.session.add(appt)
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
        self.session.refresh(appt)
        return appointment_to_dto(appt)

    def update_schedule(self, appointment_id: int, expected_version: int, service_type_id: int, scheduled_at: datetime, prices: PriceSnapshot) -> AppointmentDto:
        stmt = (
            update(self.table)
            .where(self.table.c.id == appointment_id)
            .where(self.table.c.version == expected_version)
            .values(
                service_type_id=service_type_id,
                scheduled_at=scheduled_at,
                base_price=prices.base_price,
                discount_amount=prices.discount_amount,
                final_price=prices.final_price,
                version=expected_version + 1,
            )
        )
        self._execute_guarded(stmt, appointment_id)
        return self.get_by_id(appointment_id)

    def update_status(self, appointment_id: int, expected_version: int, status: str) -> AppointmentDto:
        stmt = (
            update(self.table)
            .where(self.table.c.id == appointment_id)
            .where(self.table.c.version == expected_version)
            .values(status=status, version=expected_version + 1)
        )
        self._execute_guarded(stmt, appointment_id)
        return self.get_by_id(appointment_id)

    def delete(self, appointment_id: int, expected_version: int) -> None:
        stmt = (
            delete(self.table)
            .where(self.table.c.id == appointment_id)
            .where(self.table.c.version == expected_version)
        )
        self._execute_guarded(stmt, appointment_id)
        self.session.expunge_all()

    def _execute_guarded(self, stmt, appointment_id: int) -> None:
        """Run a version-guarded write and commit, or roll back on a stale version."""
        try:
            result = self.session.connection().execute(stmt)
            if result.rowcount != 1:
                self.session.rollback()
                exists = self.session.get(Appointment, appointment_id, populate_existing=True)
                if exists is None:
                    raise NotFoundError("Appointment not found.", code="AppointmentNotFound")
                logger.warning(f"Stale version for appointment {appointment_id}, write rejected")
                raise ConcurrentModificationError(appointment_id)
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
