# backend/pokemon_manager/user_service.py

import logging
from typing import Tuple

from sqlalchemy.exc import IntegrityError

from .config import Settings
from .exceptions import InvalidCredentialsError, NotFoundError, UserAlreadyExistsError
from .models import LoginRequest, RegisterRequest, UserPublic
from .repositories import UserRepository
from .security import hash_password, sign_token, verify_password

logger = logging.getLogger(__name__)


async def register_user(
    repository: UserRepository, payload: RegisterRequest, settings: Settings
) -> Tuple[UserPublic, str]:
    """Creates the user and returns its public profile with a fresh access token."""
    email = payload.email.lower()
    if await repository.exists(email):
        raise UserAlreadyExistsError("Email is already used")

    password_hash = hash_password(payload.password, settings.password_hash_iterations)
    try:
        user = await repository.create(name=payload.name, email=email, password_hash=password_hash)
    except IntegrityError as e:
        # Lost a race with another registration for the same email
        await repository.session.rollback()
        raise UserAlreadyExistsError("Email is already used") from e

    user_data = UserPublic.model_validate(user)
    logger.info(f"Registered user {user_data.id}.")
    return user_data, sign_token(user_data.model_dump(), settings)


async def login_user(
    repository: UserRepository, payload: LoginRequest, settings: Settings
) -> Tuple[UserPublic, str]:
    user = await repository.get_by_email(payload.email.lower())
    if user is None:
        raise InvalidCredentialsError("Email ID is incorrect")
    if not verify_password(payload.password, user.password):
        raise InvalidCredentialsError("Password is incorrect")

    user_data = UserPublic.model_validate(user)
    return user_data, sign_token(user_data.model_dump(), settings)


async def get_user_by_id(repository: UserRepository, user_id: int) -> UserPublic:
    user = await repository.get_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return UserPublic.model_validate(user)
