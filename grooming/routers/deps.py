from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session
import logging

from ..core.config import settings
from ..core.security import decode_jwt_token
from ..database import get_session
from ..application.services.appointments_service import AppointmentsService
from ..application.services.auth_service import AuthService
from ..application.services.history_service import HistoryService
from ..application.ports.pricing_oracle import PricingOracle
from ..infrastructure.audit.std_logger import StdAuditLogger
from ..infrastructure.persistence.sqlalchemy.repositories.appointments_repository_sql import SqlAppointmentsRepository
from ..infrastructure.persistence.sqlalchemy.repositories.catalog_repository_sql import SqlCatalogRepository
from ..infrastructure.persistence.sqlalchemy.repositories.history_repository_sql import SqlHistoryRepository
from ..infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository
from ..infrastructure.pricing.loyalty_oracle import SqlLoyaltyPricingOracle
from ..infrastructure.security.passlib_hasher import PasslibPasswordHasher

logger = logging.getLogger(__name__)

oauth2_scheme = HTTPBearer()

_audit_logger = StdAuditLogger()
_password_hasher = PasslibPasswordHasher()


def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(oauth2_scheme)) -> int:
    token = credentials.credentials
    payload = decode_jwt_token(token)
    if not payload:
        logger.warning("JWT token decode failed - invalid or expired token")
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token: missing user ID")
    try:
        return int(user_id)
    except (ValueError, TypeError):
        raise HTTPException(status_code=401, detail="Invalid token: invalid user ID format")


def get_pricing_oracle(session: Session = Depends(get_session)) -> PricingOracle:
    return SqlLoyaltyPricingOracle(
        session,
        visit_threshold=settings.LOYALTY_VISIT_THRESHOLD,
        discount_percent=settings.LOYALTY_DISCOUNT_PERCENT,
    )


def get_appointments_service(
    session: Session = Depends(get_session),
    pricing: PricingOracle = Depends(get_pricing_oracle),
) -> AppointmentsService:
    return AppointmentsService(
        repo=SqlAppointmentsRepository(session),
        catalog=SqlCatalogRepository(session),
        users=SqlUserRepository(session),
        pricing=pricing,
        audit=_audit_logger,
        unavailable_service_name=settings.UNAVAILABLE_SERVICE_TYPE_NAME,
    )


def get_auth_service(session: Session = Depends(get_session)) -> AuthService:
    return AuthService(user_repo=SqlUserRepository(session), hasher=_password_hasher)


def get_history_service(session: Session = Depends(get_session)) -> HistoryService:
    return HistoryService(repo=SqlHistoryRepository(session))
