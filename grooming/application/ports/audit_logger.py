from typing import Optional, Dict, Any, Protocol


class AuditLogger(Protocol):
    def log(self, action: str, user_id: int, appointment_id: Optional[int] = None, success: bool = True, details: Optional[Dict[str, Any]] = None) -> None:
        ...
