from __future__ import annotations

"""Operator account store (`users`)."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from medialytics.db.models import User


class UserRepositoryProtocol:
    async def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    async def create(self, *, email: str, hashed_password: str) -> User:
        raise NotImplementedError


class SqlUserRepository(UserRepositoryProtocol):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(User.email == email)
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def create(self, *, email: str, hashed_password: str) -> User:
        user = User(email=email, hashed_password=hashed_password)
        self.session.add(user)
        await self.session.flush()
        return user


def get_user_repository(session: AsyncSession) -> UserRepositoryProtocol:
    return SqlUserRepository(session)
