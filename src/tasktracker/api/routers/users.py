"""Routes handling account registration and login."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...core.validation import validate_body
from ...deps import AuthServiceDependency
from ...schemas import AuthResponse, LoginRequest, RegisterRequest, UserPublic
from ...services import AuthResult
from ...validators import LOGIN_RULES, REGISTER_RULES

router = APIRouter(prefix="/users", tags=["users"])


def _auth_response(message: str, result: AuthResult) -> AuthResponse:
    return AuthResponse(
        message=message,
        token=result.token.token,
        user=UserPublic.model_validate(result.user),
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user account",
    dependencies=[Depends(validate_body(REGISTER_RULES))],
)
async def register(payload: RegisterRequest, service: AuthServiceDependency) -> AuthResponse:
    result = await service.register(
        name=payload.name,
        email=payload.email,
        password=payload.password,
    )
    return _auth_response("User registered successfully", result)


@router.post(
    "/login",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="Authenticate using email and password",
    dependencies=[Depends(validate_body(LOGIN_RULES))],
)
async def login(payload: LoginRequest, service: AuthServiceDependency) -> AuthResponse:
    result = await service.login(email=payload.email, password=payload.password)
    return _auth_response("Login successful", result)
