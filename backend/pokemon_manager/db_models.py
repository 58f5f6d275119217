from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """
    Base class for all ORM models.

    SQLAlchemy uses this to keep track of tables and mappings.
    """
    pass


class User(Base):
    """
    ORM model for the 'users' table.

    `password` holds the salted hash, never the plain text.
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    role: Mapped[int] = mapped_column(Integer, nullable=False, default=2)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationship: one User -> many favorites
    favorites: Mapped[list["Favorite"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
    )


class Favorite(Base):
    """
    ORM model for the 'favorites' table.

    One row per (user, Pokémon) pair; the unique constraint keeps concurrent
    adds from storing the same favorite twice.
    """
    __tablename__ = "favorites"
    __table_args__ = (
        UniqueConstraint("user_id", "pokemon_id", name="uq_favorites_user_pokemon"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    pokemon_id: Mapped[int] = mapped_column(Integer, nullable=False)

    user: Mapped[User] = relationship(
        back_populates="favorites",
    )
