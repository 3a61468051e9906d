import os

# Settings are read once at import time; configure before anything imports grooming
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-grooming-appointments-0123456789"
os.environ["RATE_LIMIT_PER_MINUTE"] = "100000"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("REDIS_URL", None)

from dataclasses import replace
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

import grooming.db.models  # noqa: F401  registers tables on SQLModel.metadata
from grooming.application.ports.appointments_repo import AppointmentDto, AppointmentStatus
from grooming.application.ports.catalog_repo import ServiceTypeDto
from grooming.application.ports.pricing_oracle import PriceSnapshot
from grooming.application.ports.user_repo import UserDto
from grooming.application.services.appointments_service import AppointmentsService
from grooming.exceptions import ConcurrentModificationError, NotFoundError

NOW = datetime(2026, 3, 10, 9, 0, 0)

WASH = ServiceTypeDto(id=1, name="Wash", duration_minutes=30, price=Decimal("50.00"))
HAIRCUT = ServiceTypeDto(id=2, name="Haircut", duration_minutes=60, price=Decimal("120.00"))

ALICE_ID = 7
BOB_ID = 9


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeCatalog:
    def __init__(self, *types: ServiceTypeDto):
        self.types = {t.id: t for t in types}

    def get(self, service_type_id: int) -> Optional[ServiceTypeDto]:
        return self.types.get(service_type_id)

    def list_all(self):
        return [self.types[k] for k in sorted(self.types)]


class FakeUsers:
    def __init__(self):
        self.users = {}
        self._id = 100

    def add(self, id: int, username: str, first_name: str, created_at: datetime = datetime(2025, 1, 1)) -> UserDto:
        user = UserDto(id=id, username=username, first_name=first_name, created_at=created_at, password_hash=None)
        self.users[id] = user
        return user

    def get_by_id(self, user_id: int):
        return self.users.get(user_id)

    def get_by_username(self, username: str):
        return next((u for u in self.users.values() if u.username == username), None)

    def create(self, username: str, password_hash: str, first_name: str) -> UserDto:
        self._id += 1
        user = UserDto(id=self._id, username=username, first_name=first_name, created_at=NOW, password_hash=password_hash)
        self.users[user.id] = user
        return user


class FakeApptRepo:
    """In-memory store handing out copies, with version-checked writes."""

    def __init__(self, users: FakeUsers):
        self._id = 1
        self.appts = {}
        self.users = users

    def _copy(self, a: Optional[AppointmentDto]) -> Optional[AppointmentDto]:
        return replace(a) if a else None

    def _check(self, appointment_id: int, expected_version: int) -> AppointmentDto:
        a = self.appts.get(appointment_id)
        if a is None:
            raise NotFoundError("Appointment not found.", code="AppointmentNotFound")
        if a.version != expected_version:
            raise ConcurrentModificationError(appointment_id)
        return a

    def get_by_id(self, appointment_id: int):
        return self._copy(self.appts.get(appointment_id))

    def get_for_update(self, appointment_id: int):
        return self._copy(self.appts.get(appointment_id))

    def list(self, on_date=None, name_contains=None):
        result = []
        for a in self.appts.values():
            if on_date is not None and a.scheduled_at.date() != on_date:
                continue
            if name_contains:
                owner = self.users.get_by_id(a.user_id)
                needle = name_contains.lower()
                if not owner or (needle not in owner.first_name.lower() and needle not in owner.username.lower()):
                    continue
            result.append(self._copy(a))
        return sorted(result, key=lambda a: (a.scheduled_at, a.id))

    def list_for_owner(self, user_id: int):
        mine = [self._copy(a) for a in self.appts.values() if a.user_id == user_id]
        return sorted(mine, key=lambda a: (a.scheduled_at, a.id))

    def create(self, user_id, service_type_id, scheduled_at, created_at, prices: PriceSnapshot):
        a = AppointmentDto(
            id=self._id,
            user_id=user_id,
            service_type_id=service_type_id,
            scheduled_at=scheduled_at,
            status=AppointmentStatus.PENDING.value,
            created_at=created_at,
            base_price=prices.base_price,
            discount_amount=prices.discount_amount,
            final_price=prices.final_price,
            version=1,
        )
        self.appts[a.id] = a
        self._id += 1
        return self._copy(a)

    def update_schedule(self, appointment_id, expected_version, service_type_id, scheduled_at, prices: PriceSnapshot):
        a = self._check(appointment_id, expected_version)
        a.service_type_id = service_type_id
        a.scheduled_at = scheduled_at
        a.base_price = prices.base_price
        a.discount_amount = prices.discount_amount
        a.final_price = prices.final_price
        a.version += 1
        return self._copy(a)

    def update_status(self, appointment_id, expected_version, status):
        a = self._check(appointment_id, expected_version)
        a.status = status
        a.version += 1
        return self._copy(a)

    def delete(self, appointment_id, expected_version):
        self._check(appointment_id, expected_version)
        del self.appts[appointment_id]


class FakeOracle:
    def __init__(self, catalog: FakeCatalog, discount=Decimal("0.00")):
        self.catalog = catalog
        self.discount = discount
        self.error: Optional[Exception] = None
        self.calls = []
        self.on_call = None

    def compute_discount(self, user_id, service_type_id, reference_time):
        self.calls.append((user_id, service_type_id, reference_time))
        if self.on_call:
            self.on_call()
        if self.error:
            raise self.error
        return self.discount

    def quote(self, user_id, service_type_id, reference_time):
        discount = self.compute_discount(user_id, service_type_id, reference_time)
        return PriceSnapshot.from_discount(self.catalog.get(service_type_id).price, discount)


class RecordingAudit:
    def __init__(self):
        self.entries = []

    def log(self, action, user_id, appointment_id=None, success=True, details=None):
        self.entries.append((action, user_id, appointment_id))


@pytest.fixture
def clock():
    return FakeClock(NOW)


@pytest.fixture
def catalog():
    return FakeCatalog(WASH, HAIRCUT)


@pytest.fixture
def users():
    u = FakeUsers()
    u.add(ALICE_ID, "alice", "Alice", created_at=datetime(2025, 6, 1, 12, 0))
    u.add(BOB_ID, "bobby", "Bob")
    return u


@pytest.fixture
def repo(users):
    return FakeApptRepo(users)


@pytest.fixture
def oracle(catalog):
    return FakeOracle(catalog)


@pytest.fixture
def audit():
    return RecordingAudit()


@pytest.fixture
def service(repo, catalog, users, oracle, audit, clock):
    return AppointmentsService(repo=repo, catalog=catalog, users=users, pricing=oracle, audit=audit, clock=clock)


@pytest.fixture
def db_engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(db_engine):
    with Session(db_engine) as s:
        yield s
