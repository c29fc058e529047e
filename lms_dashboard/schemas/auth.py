from pydantic import BaseModel, EmailStr


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    success: bool
    email: str


class AuthStatus(BaseModel):
    authenticated: bool
    email: str | None = None
