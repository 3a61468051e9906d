from typing import List, Optional
from sqlmodel import Session, select

from .....db.models import ServiceType
from .....application.ports.catalog_repo import CatalogRepository, ServiceTypeDto


class SqlCatalogRepository(CatalogRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, s: ServiceType) -> ServiceTypeDto:
        return ServiceTypeDto(id=s.id, name=s.name, duration_minutes=s.duration_minutes, price=s.price)

    def get(self, service_type_id: int) -> Optional[ServiceTypeDto]:
        s = self.session.get(ServiceType, service_type_id)
        return self._to_dto(s) if s else None

    def list_all(self) -> List[ServiceTypeDto]:
        rows = self.session.exec(select(ServiceType).order_by(ServiceType.id)).all()
        return [self._to_dto(r) for r in rows]
