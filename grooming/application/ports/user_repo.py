from typing import Protocol, Optional
from datetime import datetime

class UserDto:
    def __init__(self, id: int, username: str, first_name: str, created_at: datetime,
                 password_hash: Optional[str] = None):
        self.id = id
        self.username = username
        self.first_name = first_name
        self.created_at = created_at
        self.password_hash = password_hash

class UserRepository(Protocol):
    def get_by_id(self, user_id: int) -> Optional[UserDto]:
        ...

    def get_by_username(self, username: str) -> Optional[UserDto]:
        ...

    def create(self, username: str, password_hash: str, first_name: str) -> UserDto:
        ...
