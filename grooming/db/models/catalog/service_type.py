# grooming/db/models/catalog/service_type.py
from decimal import Decimal
from typing import Optional, List
from sqlmodel import SQLModel, Field, Relationship

class ServiceType(SQLModel, table=True):
    __tablename__ = "service_types"
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=50, unique=True)
    duration_minutes: int
    price: Decimal = Field(max_digits=10, decimal_places=2)

    # Relationships
    appointments: List["Appointment"] = Relationship(back_populates="service_type")
