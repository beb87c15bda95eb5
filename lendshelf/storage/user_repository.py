"""
User Repository for LendShelf.

Registration and lookup of users. Passwords are stored hashed.
"""

from typing import Optional
from uuid import UUID, uuid4

from loguru import logger
from sqlalchemy import insert, select

from lendshelf.errors import PersistenceError, UnprocessableResource
from lendshelf.security import get_password_hash
from .database import ConnectionPool
from .models import RoleModel, UserModel
from .records import CreateUser, Role, User, UserCredentials


def _user_query():
    return select(
        UserModel.user_id,
        UserModel.name,
        UserModel.email,
        RoleModel.name.label("role_name"),
    ).join(RoleModel, RoleModel.role_id == UserModel.role_id)


class UserRepository:
    """Repository for user accounts."""

    def __init__(self, pool: ConnectionPool):
        self.pool = pool

    async def create(self, event: CreateUser, role: Role = Role.USER) -> User:
        """
        Register a new user.

        Raises:
            UnprocessableResource: Email already registered
            PersistenceError: Role table not seeded or database failure
        """
        user_id = uuid4()
        password_hash = get_password_hash(event.password)

        async with self.pool.begin("create user") as session:
            existing = (
                await session.execute(
                    select(UserModel.user_id).where(UserModel.email == event.email)
                )
            ).first()
            if existing is not None:
                raise UnprocessableResource("Email already registered")

            role_id = (
                await session.execute(
                    select(RoleModel.role_id).where(RoleModel.name == role.value)
                )
            ).scalar_one_or_none()
            if role_id is None:
                raise PersistenceError(f"Role '{role.value}' is not configured")

            await session.execute(
                insert(UserModel).values(
                    user_id=user_id,
                    name=event.name,
                    email=event.email,
                    password=password_hash,
                    role_id=role_id,
                )
            )

        logger.info(f"User registered: {user_id}")
        return User(id=user_id, name=event.name, email=event.email, role=role)

    async def find_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID."""
        stmt = _user_query().where(UserModel.user_id == user_id)
        async with self.pool.begin("find user") as session:
            row = (await session.execute(stmt)).first()

        if row:
            return User.from_row(row)
        return None

    async def find_credentials(self, email: str) -> Optional[UserCredentials]:
        """Get the stored password hash for an email, if registered."""
        stmt = select(UserModel.user_id, UserModel.password).where(UserModel.email == email)
        async with self.pool.begin("find user credentials") as session:
            row = (await session.execute(stmt)).first()

        if row:
            return UserCredentials(user_id=row.user_id, password_hash=row.password)
        return None
