"""
Authentication API Routes for LendShelf.

Handles:
- User login (Token generation)
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from loguru import logger

from lendshelf.api.dependencies import ServiceContainer, get_service_container
from lendshelf.api.schemas import ErrorResponse, Token
from lendshelf.errors import UnauthenticatedError
from lendshelf.security import create_access_token, verify_password

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/token",
    response_model=Token,
    responses={
        401: {"model": ErrorResponse, "description": "Incorrect email or password"},
    },
)
async def login_for_access_token(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    container: ServiceContainer = Depends(get_service_container),
):
    """
    Login endpoint.
    Returns JWT token if credentials are valid.
    """
    # Find user by email (username field in form)
    credentials = await container.user_repository.find_credentials(form_data.username)

    if credentials is None or not verify_password(form_data.password, credentials.password_hash):
        logger.warning(f"Failed login for {form_data.username}")
        raise UnauthenticatedError("Incorrect email or password")

    access_token = create_access_token(credentials.user_id, container.settings)

    return Token(
        access_token=access_token,
        token_type="bearer",
        user_id=credentials.user_id,
    )
