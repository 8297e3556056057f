"""Account endpoints.

    POST /register  - create an account
    POST /login     - check credentials, return a token and set the session cookie
    POST /logout    - clear the session cookie
    GET  /profile   - current user plus practice statistics
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, require_auth
from ..core.config import Environment, settings
from ..core.responses import json_response
from ..core.token_factory import create_token
from ..database import get_db
from ..exceptions import AuthenticationError
from ..services import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])


# --- Request/Response schemas ---


class RegisterRequest(BaseModel):
    username: str = Field("", description="3 to 50 characters, unique")
    password: str = Field("", description="At least 8 characters")

    model_config = {
        "json_schema_extra": {
            "examples": [{"username": "typist", "password": "securepass"}]
        }
    }


class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""


class UserResponse(BaseModel):
    id: int
    username: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    token: str
    user: UserResponse


class ProfileStats(BaseModel):
    text_count: int
    category_count: int
    texts_in_progress: int
    characters_typed: int


class ProfileResponse(BaseModel):
    user: UserResponse
    stats: ProfileStats
    message: Optional[str] = None


# --- Endpoints ---


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=201,
    summary="Register a new user",
)
def register_user(body: RegisterRequest, db: Session = Depends(get_db)):
    user = auth_service.register_user(db, body.username, body.password)
    return UserResponse.model_validate(user)


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Authenticate and receive a session token",
)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    user = auth_service.authenticate(db, body.username, body.password)
    token = create_token(
        user_id=user.id,
        username=user.username,
        secret=settings.secret_key,
        expires_hours=settings.token_expiry_hours,
    )
    response: JSONResponse = json_response(
        LoginResponse(token=token, user=UserResponse.model_validate(user))
    )
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.token_expiry_hours * 3600,
        httponly=True,
        samesite="lax",
        secure=settings.environment == Environment.PRODUCTION,
    )
    logger.info("User logged in", extra={"user_id": user.id})
    return response


@router.post("/logout", summary="Clear the session cookie")
def logout():
    response = json_response({"success": True, "message": "Logged out."})
    response.delete_cookie(settings.session_cookie_name)
    return response


@router.get(
    "/profile",
    response_model=ProfileResponse,
    summary="Current user and practice statistics",
)
def profile(
    message: Optional[str] = None,
    auth: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    user = auth_service.get_user_by_id(db, auth.user_id)
    if user is None:
        raise AuthenticationError()
    return ProfileResponse(
        user=UserResponse.model_validate(user),
        stats=ProfileStats(**auth_service.get_profile_stats(db, auth.user_id)),
        message=message,
    )
