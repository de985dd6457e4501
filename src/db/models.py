"""SQLAlchemy declarative base and save-game ORM models.

One row per entity; ordered collections keep an explicit ``position``
so a load rebuilds roster / board / offers in their original order.
"""

from datetime import datetime

from sqlalchemy import (
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import JSON


class Base(DeclarativeBase):
    """Base class for all database models."""


class GuildModel(Base):
    """ORM model for a saved guild."""

    __tablename__ = "guilds"

    guild_id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False, default="")
    gold: Mapped[int] = mapped_column(Integer, nullable=False)
    reputation_level: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    reputation_experience: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    pending_reputation_experience: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    fallen: Mapped[list] = mapped_column(JSON, default=list)
    month: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    week: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String, nullable=False, default="active")
    next_serial: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    rng_state: Mapped[str] = mapped_column(Text, nullable=False)
    saved_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class HeroModel(Base):
    """ORM model for heroes, on the roster or waiting in a recruitment offer."""

    __tablename__ = "heroes"

    row_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    hero_id: Mapped[str] = mapped_column(String, nullable=False)
    guild_id: Mapped[str] = mapped_column(
        String, ForeignKey("guilds.guild_id"), nullable=False
    )
    membership: Mapped[str] = mapped_column(String, nullable=False)  # "roster" | "offer"
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(String, nullable=False, default="")
    level: Mapped[int] = mapped_column(Integer, nullable=False)
    hero_class: Mapped[str] = mapped_column(String, nullable=False)
    personality: Mapped[str] = mapped_column(String, nullable=False)
    experience: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    injury: Mapped[str] = mapped_column(String, nullable=False, default="healthy")
    weeks_remaining: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    quest_weeks_remaining: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    companions: Mapped[list] = mapped_column(JSON, default=list)

    __table_args__ = (
        UniqueConstraint("guild_id", "hero_id", name="uq_hero"),
        Index("idx_hero_guild", "guild_id"),
    )


class HeroOpinionModel(Base):
    """Directional opinion: observer → subject."""

    __tablename__ = "hero_opinions"

    opinion_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    guild_id: Mapped[str] = mapped_column(
        String, ForeignKey("guilds.guild_id"), nullable=False
    )
    observer_id: Mapped[str] = mapped_column(String, nullable=False)
    subject_id: Mapped[str] = mapped_column(String, nullable=False)
    value: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint("guild_id", "observer_id", "subject_id", name="uq_opinion_pair"),
        Index("idx_opinion_guild", "guild_id"),
    )


class ItemModel(Base):
    """ORM model for items wherever they are held."""

    __tablename__ = "items"

    row_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    item_id: Mapped[str] = mapped_column(String, nullable=False)
    guild_id: Mapped[str] = mapped_column(
        String, ForeignKey("guilds.guild_id"), nullable=False
    )
    name: Mapped[str] = mapped_column(String, nullable=False, default="")
    kind: Mapped[str] = mapped_column(String, nullable=False)
    class_restriction: Mapped[str | None] = mapped_column(String, nullable=True)
    effectiveness_bonus: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    # "hero" | "storage" | "unlocks" | "quest"
    owner_type: Mapped[str] = mapped_column(String, nullable=False)
    owner_id: Mapped[str | None] = mapped_column(String, nullable=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("guild_id", "item_id", name="uq_item"),
        Index("idx_item_owner", "guild_id", "owner_type"),
    )


class QuestModel(Base):
    """ORM model for quests on the board."""

    __tablename__ = "quests"

    row_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    quest_id: Mapped[str] = mapped_column(String, nullable=False)
    guild_id: Mapped[str] = mapped_column(
        String, ForeignKey("guilds.guild_id"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    title: Mapped[str] = mapped_column(String, nullable=False, default="")
    difficulty: Mapped[int] = mapped_column(Integer, nullable=False)
    duration_weeks: Mapped[int] = mapped_column(Integer, nullable=False)
    expires_in_weeks: Mapped[int] = mapped_column(Integer, nullable=False)
    hero_experience: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    gold: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    reputation_experience: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (UniqueConstraint("guild_id", "quest_id", name="uq_quest"),)


class RecruitmentOfferModel(Base):
    """ORM model for pending recruitment offers."""

    __tablename__ = "recruitment_offers"

    row_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    offer_id: Mapped[str] = mapped_column(String, nullable=False)
    guild_id: Mapped[str] = mapped_column(
        String, ForeignKey("guilds.guild_id"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    hero_id: Mapped[str] = mapped_column(String, nullable=False)
    signing_bonus: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (UniqueConstraint("guild_id", "offer_id", name="uq_offer"),)
