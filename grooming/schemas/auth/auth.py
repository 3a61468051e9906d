# grooming/schemas/auth/auth.py
from pydantic import BaseModel, ConfigDict, Field

class RegisterRequest(BaseModel):
    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1)
    first_name: str = Field(min_length=1, max_length=100)

class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)

class AuthResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    token: str
    token_type: str = "bearer"
    user_id: int
    username: str
    first_name: str
