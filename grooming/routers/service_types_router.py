from typing import List
from fastapi import APIRouter, Depends
from sqlmodel import Session

from ..database import get_session
from ..infrastructure.persistence.sqlalchemy.repositories.catalog_repository_sql import SqlCatalogRepository
from ..schemas.catalog.service_type import ServiceTypeResponse

router = APIRouter(prefix="/service-types", tags=["Service Types"])


@router.get("", response_model=List[ServiceTypeResponse])
def list_service_types(session: Session = Depends(get_session)):
    return [ServiceTypeResponse.model_validate(s) for s in SqlCatalogRepository(session).list_all()]
