from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_
from mdfury.database.models.db_models import User
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class UserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        result = await self.db.execute(select(User).filter(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_user_by_fp(self, fp: str) -> Optional[User]:
        result = await self.db.execute(select(User).filter(User.fp == fp))
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).filter(User.email == email))
        return result.scalar_one_or_none()

    async def get_user_by_username(self, username: str) -> Optional[User]:
        result = await self.db.execute(select(User).filter(User.username == username))
        return result.scalar_one_or_none()

    async def get_user_by_login(self, login: str) -> Optional[User]:
        """Login accepts either the username or the email address"""
        result = await self.db.execute(
            select(User).filter(or_(User.username == login, User.email == login))
        )
        return result.scalars().first()

    async def get_user_by_api_token(self, api_token: str) -> Optional[User]:
        result = await self.db.execute(select(User).filter(User.api_token == api_token))
        return result.scalar_one_or_none()

    async def insert_user(self, user_data: dict) -> Optional[User]:
        """Create a user; returns None when username or email is taken"""
        try:
            user = User(**user_data)
            self.db.add(user)
            await self.db.commit()
            await self.db.refresh(user)
            logger.info(f"Successfully created user: {user.username}")
            return user

        except IntegrityError as e:
            logger.warning(f"Database integrity error creating user: {str(e)}")
            await self.db.rollback()
            return None

    async def update_user(self, user: User, updates: dict) -> User:
        try:
            for key, value in updates.items():
                setattr(user, key, value)
            await self.db.commit()
            await self.db.refresh(user)
            return user
        except Exception as e:
            logger.error(f"Error updating user {user.fp}: {str(e)}")
            await self.db.rollback()
            raise

    async def delete_user(self, user: User) -> None:
        await self.db.delete(user)
        await self.db.commit()
