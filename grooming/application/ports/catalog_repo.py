from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Protocol


@dataclass(frozen=True)
class ServiceTypeDto:
    id: int
    name: str
    duration_minutes: int
    price: Decimal


class CatalogRepository(Protocol):
    def get(self, service_type_id: int) -> Optional[ServiceTypeDto]:
        ...

    def list_all(self) -> List[ServiceTypeDto]:
        ...
