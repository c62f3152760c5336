# tasky/auth/schemas.py
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6)

    @field_validator('name')
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    name: str
    email: str
    accountType: str = Field(validation_alias="account_type")


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserOut


class ProfileResponse(BaseModel):
    user: UserOut


class MessageResponse(BaseModel):
    message: str


class GoogleProfile(BaseModel):
    """Данные пользователя из проверенного Google ID Token."""
    google_id: str
    email: EmailStr
    name: str | None = None
