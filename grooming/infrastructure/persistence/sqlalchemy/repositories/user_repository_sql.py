from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .....db.models import User
from .....application.ports.user_repo import UserRepository, UserDto
from .....exceptions import InvalidStateError

class SqlUserRepository(UserRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, user: User) -> UserDto:
        return UserDto(
            id=user.id,
            username=user.username,
            first_name=user.first_name,
            created_at=user.created_at,
            password_hash=user.password_hash,
        )

    def get_by_id(self, user_id: int) -> Optional[UserDto]:
        user = self.session.get(User, user_id)
        return self._to_dto(user) if user else None

    def get_by_username(self, username: str) -> Optional[UserDto]:
        user = self.session.exec(select(User).where(User.username == username)).first()
        return self._to_dto(user) if user else None

    def create(self, username: str, password_hash: str, first_name: str) -> UserDto:
        user = User(username=username, password_hash=password_hash, first_name=first_name)
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise InvalidStateError("Username already exists.", code="UsernameTaken")
        self.session.refresh(user)
        return self._to_dto(user)
