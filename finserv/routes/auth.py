# Load environment variables early
from dotenv import load_dotenv

load_dotenv()

from fastapi import APIRouter, Depends

from finserv.auth.jwt_auth import SessionClaims
from finserv.dependencies.auth import get_current_user, get_services
from finserv.models.requests import LoginRequest, RegisterRequest
from finserv.models.responses import AuthResponse, MeResponse, MessageResponse
from finserv.utils.debug import print__auth_debug

router = APIRouter(prefix="/api/auth")


@router.post(
    "/register",
    response_model=AuthResponse,
    responses={400: {"model": MessageResponse}, 500: {"model": MessageResponse}},
)
async def register(request: RegisterRequest, services=Depends(get_services)):
    """Create an account and return a session token.

    Errors (all ``{"message": ...}``):
        400 All fields are required
        400 Email already in use
        500 Server error
    """
    print__auth_debug("📝 REGISTER: request received")
    return await services.auth_gateway.register(
        request.name, request.email, request.password
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={400: {"model": MessageResponse}, 500: {"model": MessageResponse}},
)
async def login(request: LoginRequest, services=Depends(get_services)):
    """Exchange email and password for a session token.

    Errors:
        400 Invalid credentials (unknown email and wrong password alike)
        500 Server error
    """
    print__auth_debug("🔑 LOGIN: request received")
    return await services.auth_gateway.login(request.email, request.password)


@router.get(
    "/me",
    response_model=MeResponse,
    responses={401: {"model": MessageResponse}},
)
async def me(
    claims: SessionClaims = Depends(get_current_user),
    services=Depends(get_services),
):
    """Profile of the bearer token's user.

    Errors:
        401 Missing token / Invalid token
    """
    return await services.auth_gateway.me(claims)
