from fastapi import APIRouter, Depends

from ..application.services.auth_service import AuthService
from ..schemas.auth.auth import RegisterRequest, LoginRequest, AuthResponse
from .deps import get_auth_service

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=AuthResponse)
def register(request: RegisterRequest, auth_service: AuthService = Depends(get_auth_service)):
    result = auth_service.register(request.username, request.password, request.first_name)
    return AuthResponse.model_validate(result)


@router.post("/login", response_model=AuthResponse)
def login(request: LoginRequest, auth_service: AuthService = Depends(get_auth_service)):
    result = auth_service.login(request.username, request.password)
    return AuthResponse.model_validate(result)
