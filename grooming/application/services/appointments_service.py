import logging
from dataclasses import dataclass, field
from datetime import datetime, date
from typing import Callable, Dict, List, Optional, Union

from ..ports.appointments_repo import AppointmentsRepository, AppointmentDto, AppointmentStatus
from ..ports.audit_logger import AuditLogger
from ..ports.catalog_repo import CatalogRepository, ServiceTypeDto
from ..ports.pricing_oracle import PricingOracle, PriceSnapshot
from ..ports.user_repo import UserRepository, UserDto
from .authorization_policy import AuthorizationPolicy
from .projection import (
    AppointmentSummary,
    AppointmentDetail,
    UNAVAILABLE_SERVICE_TYPE_NAME,
    to_summary,
    to_detail,
)
from ...exceptions import (
    DependencyFailureError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
    PricingUnavailableError,
)
from ...utils import utcnow, as_utc_naive

logger = logging.getLogger(__name__)


@dataclass
class AppointmentsService:
    """Appointment lifecycle: create, read, update, status change and delete.

    Prices are computed through the injected pricing oracle at create/update
    time and stored as a frozen snapshot. Reads never consult the catalog
    price. All timestamps are handled as naive UTC; ``clock`` supplies "now".
    """
    repo: AppointmentsRepository
    catalog: CatalogRepository
    users: UserRepository
    pricing: PricingOracle
    policy: AuthorizationPolicy = field(default_factory=AuthorizationPolicy)
    audit: Optional[AuditLogger] = None
    clock: Callable[[], datetime] = utcnow
    unavailable_service_name: str = UNAVAILABLE_SERVICE_TYPE_NAME

    # ------------------------
    # Commands
    # ------------------------
    def create(self, owner_id: int, service_type_id: int, scheduled_at: datetime) -> AppointmentSummary:
        scheduled_at = as_utc_naive(scheduled_at)
        service_type = self._require_service_type(service_type_id)
        now = self.clock()
        self._ensure_not_in_past(scheduled_at, now)

        # Priced before the insert so the oracle never counts this appointment
        prices = self._price(owner_id, service_type, now)
        appt = self.repo.create(owner_id, service_type.id, scheduled_at, now, prices)

        logger.info(f"Appointment {appt.id} created by user {owner_id} for {scheduled_at.isoformat()} at {prices.final_price}")
        self._audit("appointment.create", owner_id, appt.id, details={
            "service_type_id": service_type.id,
            "base_price": str(prices.base_price),
            "discount_amount": str(prices.discount_amount),
            "final_price": str(prices.final_price),
        })
        return to_summary(appt, service_type, self.users.get_by_id(owner_id), self.unavailable_service_name)

    def update(self, appointment_id: int, caller_id: int, service_type_id: int, scheduled_at: datetime) -> AppointmentSummary:
        scheduled_at = as_utc_naive(scheduled_at)
        appt = self._require_for_update(appointment_id)
        if appt.status == AppointmentStatus.COMPLETED.value:
            raise InvalidStateError("Completed appointments cannot be edited.", code="AlreadyCompleted")
        self.policy.ensure_may_modify(appt, caller_id)
        service_type = self._require_service_type(service_type_id)
        self._ensure_not_in_past(scheduled_at, self.clock())

        # Discount tier is pinned to when the appointment was first booked
        prices = self._price(appt.user_id, service_type, appt.created_at)
        updated = self.repo.update_schedule(appt.id, appt.version, service_type.id, scheduled_at, prices)

        logger.info(f"Appointment {appt.id} updated by user {caller_id}")
        self._audit("appointment.update", caller_id, appt.id, details={
            "service_type_id": service_type.id,
            "scheduled_at": scheduled_at.isoformat(),
            "final_price": str(prices.final_price),
        })
        return to_summary(updated, service_type, self.users.get_by_id(updated.user_id), self.unavailable_service_name)

    def delete(self, appointment_id: int, caller_id: int) -> None:
        appt = self._require_for_update(appointment_id)
        self.policy.ensure_may_delete(appt, caller_id, self._today())
        self.repo.delete(appt.id, appt.version)
        logger.info(f"Appointment {appt.id} deleted by user {caller_id}")
        self._audit("appointment.delete", caller_id, appt.id)

    def set_status(self, appointment_id: int, caller_id: int, status: Union[str, AppointmentStatus]) -> AppointmentSummary:
        appt = self._require_for_update(appointment_id)
        target = self._parse_status(status)
        self.policy.ensure_may_set_status(appt, caller_id, target)

        current = AppointmentStatus(appt.status)
        if current == target:
            return self._project(appt)
        if current.is_terminal:
            raise InvalidStateError(
                f"Appointment is already {current.value} and cannot be moved to {target.value}.",
                code="TerminalStatus",
            )

        updated = self.repo.update_status(appt.id, appt.version, target.value)
        logger.info(f"Appointment {appt.id} status {current.value} -> {target.value} by user {caller_id}")
        self._audit("appointment.status", caller_id, appt.id, details={"from": current.value, "to": target.value})
        return self._project(updated)

    # ------------------------
    # Queries
    # ------------------------
    def get_by_id(self, appointment_id: int) -> AppointmentSummary:
        return self._project(self._require(appointment_id))

    def get_detail(self, appointment_id: int) -> AppointmentDetail:
        appt = self._require(appointment_id)
        return to_detail(
            appt,
            self.catalog.get(appt.service_type_id),
            self.users.get_by_id(appt.user_id),
            self.unavailable_service_name,
        )

    def list(self, on_date: Optional[date] = None, name_contains: Optional[str] = None) -> List[AppointmentSummary]:
        if name_contains is not None:
            name_contains = name_contains.strip() or None
        return self._project_many(self.repo.list(on_date=on_date, name_contains=name_contains))

    def list_for_owner(self, owner_id: int) -> List[AppointmentSummary]:
        return self._project_many(self.repo.list_for_owner(owner_id))

    def _project_many(self, appts: List[AppointmentDto]) -> List[AppointmentSummary]:
        # Catalog and owner lookups are shared across rows
        service_types: Dict[int, Optional[ServiceTypeDto]] = {}
        owners: Dict[int, Optional[UserDto]] = {}
        result = []
        for a in appts:
            if a.service_type_id not in service_types:
                service_types[a.service_type_id] = self.catalog.get(a.service_type_id)
            if a.user_id not in owners:
                owners[a.user_id] = self.users.get_by_id(a.user_id)
            result.append(to_summary(a, service_types[a.service_type_id], owners[a.user_id], self.unavailable_service_name))
        return result

    def can_modify(self, appointment_id: int, caller_id: int) -> bool:
        appt = self.repo.get_by_id(appointment_id)
        return appt is not None and self.policy.may_modify(appt, caller_id)

    def can_delete(self, appointment_id: int, caller_id: int) -> bool:
        appt = self.repo.get_by_id(appointment_id)
        return appt is not None and self.policy.may_delete(appt, caller_id, self._today())

    # ------------------------
    # Helpers
    # ------------------------
    def _today(self) -> date:
        return self.clock().date()

    def _require(self, appointment_id: int) -> AppointmentDto:
        appt = self.repo.get_by_id(appointment_id)
        if not appt:
            raise NotFoundError("Appointment not found.", code="AppointmentNotFound")
        return appt

    def _require_for_update(self, appointment_id: int) -> AppointmentDto:
        appt = self.repo.get_for_update(appointment_id)
        if not appt:
            raise NotFoundError("Appointment not found.", code="AppointmentNotFound")
        return appt

    def _require_service_type(self, service_type_id: int) -> ServiceTypeDto:
        service_type = self.catalog.get(service_type_id)
        if not service_type:
            raise NotFoundError("Invalid appointment type.", code="InvalidServiceType")
        return service_type

    def _ensure_not_in_past(self, scheduled_at: datetime, now: datetime) -> None:
        if scheduled_at.date() < now.date():
            raise InvalidArgumentError("Scheduled date cannot be in the past.", code="PastDate")

    def _parse_status(self, status: Union[str, AppointmentStatus]) -> AppointmentStatus:
        if isinstance(status, AppointmentStatus):
            return status
        try:
            return AppointmentStatus(status)
        except ValueError:
            valid_statuses = [s.value for s in AppointmentStatus]
            raise InvalidArgumentError(f"Invalid status. Must be one of: {valid_statuses}", code="InvalidStatus")

    def _price(self, user_id: int, service_type: ServiceTypeDto, reference_time: datetime) -> PriceSnapshot:
        try:
            discount = self.pricing.compute_discount(user_id, service_type.id, reference_time)
        except DependencyFailureError:
            raise
        except Exception as e:
            logger.error(f"Pricing failed for user {user_id}, service type {service_type.id}: {e}")
            raise PricingUnavailableError("Pricing is currently unavailable. The appointment was not saved.") from e

        try:
            return PriceSnapshot.from_discount(service_type.price, discount)
        except (ValueError, ArithmeticError) as e:
            logger.error(f"Pricing returned unusable discount {discount!r} for service type {service_type.id}: {e}")
            raise PricingUnavailableError("Pricing returned an invalid discount. The appointment was not saved.") from e

    def _project(self, appt: AppointmentDto) -> AppointmentSummary:
        return to_summary(
            appt,
            self.catalog.get(appt.service_type_id),
            self.users.get_by_id(appt.user_id),
            self.unavailable_service_name,
        )

    def _audit(self, action: str, user_id: int, appointment_id: Optional[int], details: Optional[dict] = None) -> None:
        if self.audit is not None:
            self.audit.log(action, user_id=user_id, appointment_id=appointment_id, success=True, details=details)
