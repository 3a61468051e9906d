from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Protocol

CENTS = Decimal("0.01")


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PriceSnapshot:
    """Base price, discount and final price frozen onto an appointment.

    Built once when an appointment is created or fully updated and stored
    as-is afterwards. Construction enforces
    ``final_price == base_price - discount_amount`` and
    ``0 <= final_price <= base_price``.
    """
    base_price: Decimal
    discount_amount: Decimal
    final_price: Decimal

    def __post_init__(self):
        if self.base_price < 0:
            raise ValueError(f"Base price cannot be negative: {self.base_price}")
        if self.discount_amount < 0:
            raise ValueError(f"Discount cannot be negative: {self.discount_amount}")
        if self.final_price != self.base_price - self.discount_amount:
            raise ValueError("Final price must equal base price minus discount")
        if self.final_price < 0:
            raise ValueError(f"Discount {self.discount_amount} exceeds base price {self.base_price}")

    @classmethod
    def from_discount(cls, base_price, discount_amount) -> "PriceSnapshot":
        base = to_money(base_price)
        discount = to_money(discount_amount)
        return cls(base_price=base, discount_amount=discount, final_price=base - discount)


class PricingOracle(Protocol):
    def quote(self, user_id: int, service_type_id: int, reference_time: datetime) -> PriceSnapshot:
        ...

    def compute_discount(self, user_id: int, service_type_id: int, reference_time: datetime) -> Decimal:
        ...
