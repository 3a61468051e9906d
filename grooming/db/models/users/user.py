# grooming/db/models/users/user.py
from typing import Optional, List
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime

# Timestamps are naive UTC, see grooming.utils.utcnow
from ....utils import utcnow

class User(SQLModel, table=True):
    __tablename__ = "users"
    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(max_length=50, unique=True, index=True)
    password_hash: str = Field(max_length=255)
    first_name: str = Field(max_length=100)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)

    # Relationships
    appointments: List["Appointment"] = Relationship(back_populates="user")
