from passlib.context import CryptContext

from ...application.ports.password_hasher import PasswordHasher


class PasslibPasswordHasher(PasswordHasher):
    def __init__(self, schemes=None) -> None:
        self._context = CryptContext(schemes=schemes or ["pbkdf2_sha256"], deprecated="auto")

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return self._context.verify(password, password_hash)
        except ValueError:
            # Unrecognized or malformed hash
            return False
