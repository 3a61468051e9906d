from dataclasses import dataclass
from datetime import date

from ..ports.appointments_repo import AppointmentDto, AppointmentStatus
from ...exceptions import ForbiddenError, InvalidStateError
from ...utils import utc_date


@dataclass(frozen=True)
class AuthorizationPolicy:
    """Ownership rules for appointment mutations.

    Ownership is a flat equality check between the caller and the
    appointment's owner; there are no roles or delegation. The ``may_*``
    predicates answer yes/no for pre-flight checks, the ``ensure_*`` variants
    raise the matching service error.
    """

    def is_owner(self, appointment: AppointmentDto, user_id: int) -> bool:
        return appointment.user_id == user_id

    def is_same_day(self, appointment: AppointmentDto, today: date) -> bool:
        return utc_date(appointment.scheduled_at) == today

    def may_modify(self, appointment: AppointmentDto, user_id: int) -> bool:
        return self.is_owner(appointment, user_id)

    def may_delete(self, appointment: AppointmentDto, user_id: int, today: date) -> bool:
        return self.is_owner(appointment, user_id) and not self.is_same_day(appointment, today)

    def may_set_status(self, appointment: AppointmentDto, user_id: int, status: AppointmentStatus) -> bool:
        # Anyone may mark an appointment completed; only the owner may cancel it
        if status == AppointmentStatus.CANCELLED:
            return self.is_owner(appointment, user_id)
        return True

    def ensure_may_modify(self, appointment: AppointmentDto, user_id: int) -> None:
        if not self.may_modify(appointment, user_id):
            raise ForbiddenError("You can only edit your own appointments.")

    def ensure_may_delete(self, appointment: AppointmentDto, user_id: int, today: date) -> None:
        if not self.is_owner(appointment, user_id):
            raise ForbiddenError("You can only delete your own appointments.")
        if self.is_same_day(appointment, today):
            raise InvalidStateError("Appointments cannot be deleted on the day they are scheduled.", code="SameDayDeleteForbidden")

    def ensure_may_set_status(self, appointment: AppointmentDto, user_id: int, status: AppointmentStatus) -> None:
        if not self.may_set_status(appointment, user_id, status):
            raise ForbiddenError("You can only cancel your own appointments.")
