# grooming/schemas/catalog/service_type.py
from pydantic import BaseModel, ConfigDict
from decimal import Decimal

class ServiceTypeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    duration_minutes: int
    price: Decimal
