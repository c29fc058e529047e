import logging
import secrets

from fastapi import APIRouter, Depends, HTTPException, Request, status

from lms_dashboard.core.config import Settings, get_settings
from lms_dashboard.schemas.auth import AuthStatus, LoginRequest, LoginResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        401: {"description": "Invalid email domain or password"},
    },
)
def login(
    payload: LoginRequest,
    request: Request,
    settings: Settings = Depends(get_settings),
):
    # EmailStr has already lowercased the domain part
    domain = settings.allowed_email_domain.lower()
    if not payload.email.endswith(f"@{domain}"):
        logger.info("Login rejected: invalid email domain")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid email. Must be an @{domain} email address.",
        )

    if not secrets.compare_digest(
        payload.password.encode(), settings.master_password.encode()
    ):
        logger.info("Login rejected: invalid password")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid password.",
        )

    request.session["authenticated"] = True
    request.session["email"] = payload.email

    return {"success": True, "email": payload.email}


@router.post("/logout")
def logout(request: Request):
    request.session.clear()
    return {"success": True}


@router.get("/auth/status", response_model=AuthStatus)
def auth_status(request: Request):
    return {
        "authenticated": bool(request.session.get("authenticated")),
        "email": request.session.get("email"),
    }
