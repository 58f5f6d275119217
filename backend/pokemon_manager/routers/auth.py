# backend/pokemon_manager/routers/auth.py

import logging

from fastapi import APIRouter, Depends

from ..config import Settings
from ..dependencies import get_settings, get_user_repository
from ..models import LoginRequest, LoginResponse, RegisterRequest, RegisterResponse
from ..repositories import UserRepository
from ..user_service import login_user, register_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    summary="Register a New User",
    description="Creates a user account and returns its profile together with an access token.",
)
async def register(
    payload: RegisterRequest,
    users: UserRepository = Depends(get_user_repository),
    settings: Settings = Depends(get_settings),
):
    logger.info("Received registration request.")
    user_data, access_token = await register_user(users, payload, settings)
    return RegisterResponse(data=user_data, access_token=access_token)


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Log In",
    description="Validates credentials and returns the user's profile together with an access token.",
)
async def login(
    payload: LoginRequest,
    users: UserRepository = Depends(get_user_repository),
    settings: Settings = Depends(get_settings),
):
    user_data, access_token = await login_user(users, payload, settings)
    logger.info(f"User {user_data.id} logged in.")
    return LoginResponse(data=user_data, access_token=access_token)
