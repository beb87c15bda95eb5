"""
User API Routes

Handles:
- User registration (Sign Up)
- Current user retrieval
- The caller's open checkouts
"""

from fastapi import APIRouter, Depends, status
from loguru import logger

from lendshelf.api.dependencies import (
    CurrentUser,
    get_checkout_repository,
    get_user_repository,
)
from lendshelf.api.schemas import (
    CheckoutResponse,
    CreateUserRequest,
    ErrorResponse,
    UserResponse,
)

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        422: {"model": ErrorResponse, "description": "Email already registered"},
    },
)
async def register_user(
    user: CreateUserRequest,
    repo = Depends(get_user_repository),
):
    """Register a new user."""
    logger.info(f"Registering user: {user.email}")

    created = await repo.create(user.to_command())
    return UserResponse.from_user(created)


@router.get("/me", response_model=UserResponse)
async def read_users_me(current_user: CurrentUser):
    """Get current user profile."""
    return UserResponse.from_user(current_user)


@router.get("/me/checkouts", response_model=list[CheckoutResponse])
async def read_my_checkouts(
    current_user: CurrentUser,
    repo = Depends(get_checkout_repository),
):
    """Books the current user has checked out and not yet returned."""
    checkouts = await repo.find_unreturned_by_user_id(current_user.id)
    return [CheckoutResponse.from_checkout(c) for c in checkouts]
