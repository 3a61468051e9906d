from datetime import datetime
from decimal import Decimal
import logging

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from ...db.models import Appointment, ServiceType
from ...application.ports.appointments_repo import AppointmentStatus
from ...application.ports.pricing_oracle import PricingOracle, PriceSnapshot, to_money
from ...exceptions import PricingUnavailableError

logger = logging.getLogger(__name__)


class SqlLoyaltyPricingOracle(PricingOracle):
    """Loyalty discount based on the customer's completed visits.

    A customer with at least ``visit_threshold`` completed appointments that
    were booked strictly before ``reference_time`` gets ``discount_percent``
    off the catalog price. Only appointments already in the store are counted,
    so callers must price a new booking before inserting it.
    """

    def __init__(self, session: Session, visit_threshold: int = 3, discount_percent: int = 10):
        self.session = session
        self.visit_threshold = visit_threshold
        self.discount_percent = Decimal(discount_percent)

    def completed_visits_before(self, user_id: int, reference_time: datetime) -> int:
        return self.session.exec(
            select(func.count(Appointment.id))
            .where(Appointment.user_id == user_id)
            .where(Appointment.status == AppointmentStatus.COMPLETED.value)
            .where(Appointment.created_at < reference_time)
        ).one()

    def quote(self, user_id: int, service_type_id: int, reference_time: datetime) -> PriceSnapshot:
        try:
            service_type = self.session.get(ServiceType, service_type_id)
            if service_type is None:
                raise PricingUnavailableError(f"Cannot price unknown service type {service_type_id}")
            visits = self.completed_visits_before(user_id, reference_time)
        except SQLAlchemyError as e:
            logger.error(f"Loyalty pricing query failed: {e}")
            raise PricingUnavailableError("Pricing is currently unavailable.") from e

        base_price = to_money(service_type.price)
        discount = Decimal("0")
        if visits >= self.visit_threshold:
            discount = to_money(base_price * self.discount_percent / Decimal(100))
        logger.debug(f"User {user_id} has {visits} completed visits before {reference_time.isoformat()}, discount {discount}")
        return PriceSnapshot.from_discount(base_price, discount)

    def compute_discount(self, user_id: int, service_type_id: int, reference_time: datetime) -> Decimal:
        return self.quote(user_id, service_type_id, reference_time).discount_amount
