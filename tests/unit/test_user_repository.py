"""
Tests for UserRepository.
"""

from uuid import uuid4

import pytest

from lendshelf.errors import UnprocessableResource
from lendshelf.security import verify_password
from lendshelf.storage import CreateUser, Role

pytestmark = pytest.mark.asyncio


async def test_create_and_find(user_repository):
    user = await user_repository.create(
        CreateUser(name="Ada", email="ada@example.com", password="analytical")
    )

    found = await user_repository.find_by_id(user.id)

    assert found == user
    assert found.role == Role.USER


async def test_create_admin(user_repository):
    user = await user_repository.create(
        CreateUser(name="Root", email="root@example.com", password="super-secret"),
        role=Role.ADMIN,
    )

    assert (await user_repository.find_by_id(user.id)).role == Role.ADMIN


async def test_duplicate_email_rejected(user_repository, owner):
    with pytest.raises(UnprocessableResource):
        await user_repository.create(
            CreateUser(name="Impostor", email=owner.email, password="whatever1")
        )


async def test_find_missing_user(user_repository):
    assert await user_repository.find_by_id(uuid4()) is None


async def test_credentials_store_hash_not_password(user_repository, owner):
    credentials = await user_repository.find_credentials(owner.email)

    assert credentials.user_id == owner.id
    assert credentials.password_hash != "owner-password"
    assert verify_password("owner-password", credentials.password_hash)


async def test_credentials_for_unknown_email(user_repository):
    assert await user_repository.find_credentials("nobody@example.com") is None
