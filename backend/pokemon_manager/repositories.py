from typing import Iterable, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from .db_models import Favorite, User


class UserRepository:
    """
    Thin data-access layer around the User model.

    Lookups return None when nothing matches; callers decide whether absence
    is an error.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def get_by_id(self, user_id: int) -> Optional[User]:
        return await self.session.get(User, user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def exists(self, email: str) -> bool:
        result = await self.session.execute(select(User.id).where(User.email == email).limit(1))
        return result.first() is not None

    async def create(self, *, name: str, email: str, password_hash: str) -> User:
        user = User(name=name, email=email, password=password_hash)
        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)
        return user


class FavoritesRepository:
    """
    Thin data-access layer around the Favorite model.

    Write methods commit their own transaction and roll back on failure, so
    a bulk insert is applied completely or not at all.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def find_by_user(self, user_id: int) -> List[int]:
        """Returns the user's favorite Pokémon ids in insertion order."""
        result = await self.session.execute(
            select(Favorite.pokemon_id)
            .where(Favorite.user_id == user_id)
            .order_by(Favorite.id)
        )
        return list(result.scalars().all())

    async def create(self, user_id: int, pokemon_id: int) -> Favorite:
        favorite = Favorite(user_id=user_id, pokemon_id=pokemon_id)
        self.session.add(favorite)
        await self._commit()
        return favorite

    async def bulk_create(self, user_id: int, pokemon_ids: Iterable[int]) -> int:
        rows = [Favorite(user_id=user_id, pokemon_id=pokemon_id) for pokemon_id in pokemon_ids]
        if not rows:
            return 0
        self.session.add_all(rows)
        await self._commit()
        return len(rows)

    async def destroy(self, user_id: int, pokemon_id: int) -> int:
        result = await self.session.execute(
            delete(Favorite).where(
                Favorite.user_id == user_id,
                Favorite.pokemon_id == pokemon_id,
            )
        )
        await self._commit()
        return result.rowcount or 0

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
