from dataclasses import dataclass
from typing import Any, Callable, Dict
import logging

from ..ports.user_repo import UserRepository, UserDto
from ..ports.password_hasher import PasswordHasher
from ...core.security import create_jwt_token
from ...exceptions import InvalidArgumentError, InvalidStateError, UnauthorizedError

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    token: str
    user_id: int
    username: str
    first_name: str


@dataclass
class AuthService:
    user_repo: UserRepository
    hasher: PasswordHasher
    token_factory: Callable[[Dict[str, Any]], str] = create_jwt_token

    def register(self, username: str, password: str, first_name: str) -> AuthResult:
        username = (username or "").strip()
        first_name = (first_name or "").strip()
        if not username or not password or not first_name:
            raise InvalidArgumentError("Username, password, and first name are required.", code="MissingFields")
        if self.user_repo.get_by_username(username):
            raise InvalidStateError("Username already exists.", code="UsernameTaken")
        user = self.user_repo.create(username, self.hasher.hash(password), first_name)
        logger.info(f"Registered user {user.id}")
        return self._issue(user)

    def login(self, username: str, password: str) -> AuthResult:
        if not username or not password:
            raise InvalidArgumentError("Username and password are required.", code="MissingFields")
        user = self.user_repo.get_by_username(username.strip())
        if not user or not user.password_hash or not self.hasher.verify(password, user.password_hash):
            logger.warning("Failed login attempt")
            raise UnauthorizedError("Invalid username or password.")
        return self._issue(user)

    def _issue(self, user: UserDto) -> AuthResult:
        token = self.token_factory({"sub": str(user.id), "username": user.username})
        return AuthResult(token=token, user_id=user.id, username=user.username, first_name=user.first_name)
