from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from sqlalchemy import DateTime

from grooming.application.ports.appointments_repo import AppointmentDto, AppointmentStatus
from grooming.application.ports.pricing_oracle import PriceSnapshot
from grooming.database import create_db_and_tables, seed_catalog
from grooming.db.models import Appointment, AppointmentHistory, User
from grooming.exceptions import ConcurrentModificationError, InvalidStateError, NotFoundError
from grooming.infrastructure.persistence.sqlalchemy.repositories.appointments_repository_sql import (
    SqlAppointmentsRepository,
    appointment_to_dto,
    like_pattern,
)
from grooming.infrastructure.persistence.sqlalchemy.repositories.catalog_repository_sql import SqlCatalogRepository
from grooming.infrastructure.persistence.sqlalchemy.repositories.history_repository_sql import SqlHistoryRepository
from grooming.infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository

from conftest import NOW

PRICES = PriceSnapshot.from_discount(Decimal("50.00"), Decimal("5.00"))


@pytest.fixture
def seeded(db_engine, session):
    create_db_and_tables(db_engine)
    return session


@pytest.fixture
def users_repo(seeded):
    return SqlUserRepository(seeded)


@pytest.fixture
def appts(seeded):
    return SqlAppointmentsRepository(seeded)


def _user(users_repo, username, first_name):
    return users_repo.create(username, "hash", first_name)


def test_seed_catalog_is_idempotent(db_engine, seeded):
    catalog = SqlCatalogRepository(seeded)
    names = [s.name for s in catalog.list_all()]
    assert names == ["Wash", "Haircut", "Full Grooming"]
    assert seed_catalog(db_engine) == 0
    assert len(SqlCatalogRepository(seeded).list_all()) == 3


def test_catalog_get(seeded):
    catalog = SqlCatalogRepository(seeded)
    wash = catalog.get(1)
    assert wash.name == "Wash"
    assert wash.duration_minutes == 30
    assert wash.price == Decimal("50.00")
    assert catalog.get(999) is None


def test_user_create_and_lookup(users_repo):
    user = _user(users_repo, "alice", "Alice")
    assert user.id is not None
    assert user.created_at is not None
    assert users_repo.get_by_username("alice").id == user.id
    assert users_repo.get_by_id(user.id).first_name == "Alice"
    assert users_repo.get_by_username("nobody") is None


def test_duplicate_username_is_rejected(users_repo):
    _user(users_repo, "alice", "Alice")
    with pytest.raises(InvalidStateError) as exc:
        _user(users_repo, "alice", "Another")
    assert exc.value.code == "UsernameTaken"


def test_create_stores_price_snapshot(users_repo, appts):
    user = _user(users_repo, "alice", "Alice")
    created = appts.create(user.id, 1, NOW + timedelta(days=1), NOW, PRICES)
    assert created.status == "Pending"
    assert created.version == 1
    fetched = appts.get_by_id(created.id)
    assert fetched.base_price == Decimal("50.00")
    assert fetched.discount_amount == Decimal("5.00")
    assert fetched.final_price == Decimal("45.00")
    assert fetched.created_at == NOW
    assert appts.get_by_id(created.id + 100) is None


def test_list_filters_by_date_and_name_in_schedule_order(users_repo, appts):
    alice = _user(users_repo, "alice", "Alice")
    bob = _user(users_repo, "bob_99", "Robert")
    day = datetime(2026, 4, 2)
    a3 = appts.create(alice.id, 1, day + timedelta(hours=15), NOW, PRICES)
    a1 = appts.create(bob.id, 1, day + timedelta(hours=8), NOW, PRICES)
    a2 = appts.create(alice.id, 2, day + timedelta(hours=23, minutes=59), NOW, PRICES)
    other = appts.create(bob.id, 1, day + timedelta(days=1), NOW, PRICES)

    assert [a.id for a in appts.list()] == [a1.id, a3.id, a2.id, other.id]
    assert [a.id for a in appts.list(on_date=date(2026, 4, 2))] == [a1.id, a3.id, a2.id]
    assert [a.id for a in appts.list(name_contains="LIC")] == [a3.id, a2.id]
    assert [a.id for a in appts.list(name_contains="rob")] == [a1.id, other.id]
    assert [a.id for a in appts.list(on_date=date(2026, 4, 3), name_contains="bob")] == [other.id]
    assert appts.list(on_date=date(2026, 4, 4)) == []


def test_name_filter_treats_wildcards_literally(users_repo, appts):
    plain = _user(users_repo, "bobx99", "Bob")
    under = _user(users_repo, "bob_99", "Bob")
    appts.create(plain.id, 1, NOW, NOW, PRICES)
    target = appts.create(under.id, 1, NOW, NOW, PRICES)

    assert [a.id for a in appts.list(name_contains="b_9")] == [target.id]
    assert appts.list(name_contains="%") == []


def test_like_pattern_escapes():
    assert like_pattern("50%_off\\") == "%50\\%\\_off\\\\%"


def test_list_for_owner(users_repo, appts):
    alice = _user(users_repo, "alice", "Alice")
    bob = _user(users_repo, "bob", "Bob")
    mine = appts.create(alice.id, 1, NOW + timedelta(days=2), NOW, PRICES)
    appts.create(bob.id, 1, NOW + timedelta(days=1), NOW, PRICES)
    assert [a.id for a in appts.list_for_owner(alice.id)] == [mine.id]


def test_update_schedule_bumps_version(users_repo, appts):
    user = _user(users_repo, "alice", "Alice")
    created = appts.create(user.id, 1, NOW, NOW, PRICES)
    new_prices = PriceSnapshot.from_discount(Decimal("120.00"), Decimal("0"))
    updated = appts.update_schedule(created.id, created.version, 2, NOW + timedelta(days=3), new_prices)
    assert updated.version == 2
    assert updated.service_type_id == 2
    assert updated.final_price == Decimal("120.00")
    assert updated.created_at == NOW


def test_stale_version_is_rejected_without_changes(users_repo, appts):
    user = _user(users_repo, "alice", "Alice")
    created = appts.create(user.id, 1, NOW, NOW, PRICES)
    appts.update_status(created.id, created.version, "Completed")

    with pytest.raises(ConcurrentModificationError):
        appts.update_status(created.id, created.version, "Cancelled")
    with pytest.raises(ConcurrentModificationError):
        appts.delete(created.id, created.version)

    current = appts.get_by_id(created.id)
    assert current.status == "Completed"
    assert current.version == 2


def test_delete_and_missing_rows(users_repo, appts):
    user = _user(users_repo, "alice", "Alice")
    created = appts.create(user.id, 1, NOW, NOW, PRICES)
    appts.delete(created.id, created.version)
    assert appts.get_by_id(created.id) is None
    assert appts.get_for_update(created.id) is None
    with pytest.raises(NotFoundError):
        appts.delete(created.id, created.version)
    with pytest.raises(NotFoundError):
        appts.update_status(created.id, 1, "Completed")


def test_history_archives_completed_once(seeded, users_repo, appts):
    user = _user(users_repo, "alice", "Alice")
    done = appts.create(user.id, 1, NOW, NOW, PRICES)
    appts.create(user.id, 2, NOW, NOW, PRICES)
    appts.update_status(done.id, 1, "Completed")

    history = SqlHistoryRepository(seeded)
    pending = history.completed_without_history()
    assert [a.id for a in pending] == [done.id]

    entry = history.append(pending[0], NOW + timedelta(hours=1))
    assert entry.appointment_id == done.id
    assert entry.discount_applied == Decimal("5.00")
    assert entry.final_price == Decimal("45.00")
    assert history.completed_without_history() == []

    again = history.append(pending[0], NOW + timedelta(hours=2))
    assert again.id == entry.id
    assert again.completed_at == NOW + timedelta(hours=1)
    assert len(history.list_for_user(user.id)) == 1


def test_history_survives_appointment_delete(seeded, users_repo, appts):
    user = _user(users_repo, "alice", "Alice")
    done = appts.create(user.id, 1, NOW, NOW, PRICES)
    completed = appts.update_status(done.id, 1, "Completed")
    history = SqlHistoryRepository(seeded)
    history.append(completed, NOW)

    appts.delete(done.id, completed.version)
    assert [h.appointment_id for h in history.list_for_user(user.id)] == [done.id]


@pytest.mark.parametrize("model,column", [
    (User, "created_at"),
    (Appointment, "scheduled_at"),
    (Appointment, "created_at"),
    (AppointmentHistory, "scheduled_at"),
    (AppointmentHistory, "completed_at"),
])
def test_timestamp_columns_store_naive_utc(model, column):
    col_type = model.__table__.c[column].type
    assert type(col_type) is DateTime
    assert col_type.timezone is False


def test_naive_timestamps_round_trip_through_every_table(seeded, users_repo, appts):
    user = _user(users_repo, "alice", "Alice")
    assert user.created_at.tzinfo is None

    created = appts.create(user.id, 1, NOW + timedelta(days=1), NOW, PRICES)
    completed = appts.update_status(created.id, created.version, "Completed")
    entry = SqlHistoryRepository(seeded).append(completed, NOW + timedelta(hours=3))

    stored = appts.get_by_id(created.id)
    assert stored.scheduled_at == NOW + timedelta(days=1)
    assert stored.created_at == NOW
    assert stored.scheduled_at.tzinfo is None
    assert entry.completed_at == NOW + timedelta(hours=3)
    assert entry.scheduled_at == NOW + timedelta(days=1)


def test_new_appointment_row_defaults_to_pending(seeded, users_repo):
    user = _user(users_repo, "alice", "Alice")
    row = Appointment(user_id=user.id, service_type_id=1, scheduled_at=NOW,
                      base_price=Decimal("50.00"), final_price=Decimal("50.00"))
    seeded.add(row)
    seeded.commit()
    seeded.refresh(row)
    assert row.status == AppointmentStatus.PENDING.value
    assert row.created_at.tzinfo is None


def test_unarchived_lookup_maps_rows_to_dtos(seeded, users_repo, appts):
    user = _user(users_repo, "alice", "Alice")
    created = appts.create(user.id, 2, NOW, NOW, PRICES)
    appts.update_status(created.id, created.version, "Completed")

    [pending] = SqlHistoryRepository(seeded).completed_without_history()
    assert isinstance(pending, AppointmentDto)
    assert pending == appointment_to_dto(seeded.get(Appointment, created.id))
    assert pending.version == 2
