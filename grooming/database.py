from decimal import Decimal
import logging

from sqlmodel import SQLModel, create_engine, Session, select

from .core.config import settings
from .db.models import ServiceType

logger = logging.getLogger(__name__)

# Choose engine options based on database scheme
db_url = settings.DATABASE_URL
engine_kwargs = {}

if db_url.startswith("sqlite"):
    # SQLite specific connect args
    engine_kwargs.update({
        "connect_args": {"check_same_thread": False}
    })
else:
    # Better resiliency for managed Postgres
    engine_kwargs.update({
        "pool_pre_ping": True,
        "pool_recycle": 300,
        "pool_size": 5,
        "max_overflow": 10,
    })

engine = create_engine(db_url, echo=settings.DEBUG, **engine_kwargs)

DEFAULT_SERVICE_TYPES = [
    {"name": "Wash", "duration_minutes": 30, "price": Decimal("50.00")},
    {"name": "Haircut", "duration_minutes": 60, "price": Decimal("120.00")},
    {"name": "Full Grooming", "duration_minutes": 90, "price": Decimal("150.00")},
]

def create_db_and_tables(bind=None):
    bind = bind or engine
    SQLModel.metadata.create_all(bind)
    if settings.SEED_CATALOG:
        seed_catalog(bind)

def seed_catalog(bind=None) -> int:
    """Insert the default service types when the catalog is empty."""
    with Session(bind or engine) as session:
        if session.exec(select(ServiceType)).first() is not None:
            return 0
        for item in DEFAULT_SERVICE_TYPES:
            session.add(ServiceType(**item))
        session.commit()
    logger.info(f"Seeded catalog with {len(DEFAULT_SERVICE_TYPES)} service types")
    return len(DEFAULT_SERVICE_TYPES)

def get_session():
    with Session(engine) as session:
        yield session
