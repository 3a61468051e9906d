from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from typing import Optional

class APIException(HTTPException):
    def __init__(self, status_code: int, detail: str):
        super().__init__(status_code=status_code, detail=detail)


class ServiceError(APIException):
    """Base class for failures raised by the appointment services.

    Every error carries a machine-readable ``code`` next to the human readable
    detail so that callers can tell e.g. a past date from an invalid status.
    """
    status_code_default = 400
    code_default = "Error"

    def __init__(self, detail: str, code: Optional[str] = None):
        super().__init__(status_code=self.status_code_default, detail=detail)
        self.code = code or self.code_default


class NotFoundError(ServiceError):
    status_code_default = 404
    code_default = "NotFound"


class ForbiddenError(ServiceError):
    status_code_default = 403
    code_default = "NotOwner"


class InvalidArgumentError(ServiceError):
    status_code_default = 400
    code_default = "InvalidArgument"


class InvalidStateError(ServiceError):
    status_code_default = 409
    code_default = "InvalidState"


class ConcurrentModificationError(InvalidStateError):
    code_default = "ConcurrentModification"

    def __init__(self, appointment_id: int):
        super().__init__(f"Appointment {appointment_id} was modified concurrently, retry the request")
        self.appointment_id = appointment_id


class DependencyFailureError(ServiceError):
    status_code_default = 503
    code_default = "DependencyFailure"


class PricingUnavailableError(DependencyFailureError):
    code_default = "PricingUnavailable"


class UnauthorizedError(ServiceError):
    status_code_default = 401
    code_default = "InvalidCredentials"


def create_error_response(error_message: str, status_code: int = 400, code: Optional[str] = None) -> dict:
    """Create a standardized error response"""
    return {
        "success": False,
        "data": None,
        "error": error_message,
        "code": code,
    }


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    # Convert 403 from HTTPBearer to 401 for missing authentication
    if exc.status_code == 403 and "Not authenticated" in str(exc.detail):
        return JSONResponse(
            status_code=401,
            content=create_error_response("Authentication required", 401, "NotAuthenticated")
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.detail, exc.status_code, getattr(exc, "code", None)),
        headers=getattr(exc, "headers", None),
    )

async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in errors
    ) or "Invalid request"
    return JSONResponse(
        status_code=422,
        content=create_error_response(message, 422, "ValidationError"),
    )
