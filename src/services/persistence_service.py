"""Persistence Service — 길드 상태 저장/불러오기

Core Guild ↔ ORM 변환. Saving replaces the previous save of the same
guild_id. Everything needed to continue a game is stored: directional
opinions, injury countdowns, item ownership, board and offer order, the
id serial and the random source state.
"""

import logging
import random
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from src.core.event_bus import EventBus
from src.core.guild.models import (
    GameStatus,
    Guild,
    Hero,
    HeroClass,
    InjuryState,
    Item,
    ItemKind,
    Personality,
    Quest,
    RecruitmentOffer,
    RewardBundle,
)
from src.core.guild.rng import dump_state, load_state
from src.db.models import (
    GuildModel,
    HeroModel,
    HeroOpinionModel,
    ItemModel,
    QuestModel,
    RecruitmentOfferModel,
)
from src.services.guild_service import GuildService

logger = logging.getLogger(__name__)

ROSTER = "roster"
OFFER = "offer"

OWNER_HERO = "hero"
OWNER_STORAGE = "storage"
OWNER_UNLOCKS = "unlocks"
OWNER_QUEST = "quest"

_ENTITY_MODELS = (
    HeroOpinionModel,
    ItemModel,
    RecruitmentOfferModel,
    QuestModel,
    HeroModel,
)


class GuildPersistenceService:
    """세이브 슬롯 = guild_id"""

    def __init__(self, db: Session) -> None:
        self._db = db

    # ── 저장 ─────────────────────────────────────────────────

    def save(self, guild: Guild, rng: random.Random) -> None:
        self._delete_rows(guild.guild_id)

        row = self._db.get(GuildModel, guild.guild_id)
        if row is None:
            row = GuildModel(guild_id=guild.guild_id)
            self._db.add(row)
        row.name = guild.name
        row.gold = guild.gold
        row.reputation_level = guild.reputation_level
        row.reputation_experience = guild.reputation_experience
        row.pending_reputation_experience = guild.pending_reputation_experience
        row.fallen = list(guild.fallen)
        row.month = guild.month
        row.week = guild.week
        row.status = guild.status.value
        row.next_serial = guild.next_serial
        row.rng_state = dump_state(rng)
        row.saved_at = datetime.now(timezone.utc)
        # guild row first so FK targets exist
        self._db.flush()

        for position, hero in enumerate(guild.roster.values()):
            self._add_hero(guild.guild_id, hero, ROSTER, position)

        for position, offer in enumerate(guild.offers.values()):
            self._add_hero(guild.guild_id, offer.hero, OFFER, position)
            self._db.add(
                RecruitmentOfferModel(
                    offer_id=offer.offer_id,
                    guild_id=guild.guild_id,
                    position=position,
                    hero_id=offer.hero.hero_id,
                    signing_bonus=offer.signing_bonus,
                )
            )

        for position, quest in enumerate(guild.quest_board.values()):
            self._db.add(self._quest_to_orm(guild.guild_id, quest, position))
            if quest.rewards.item is not None:
                self._add_item(guild.guild_id, quest.rewards.item, OWNER_QUEST, quest.quest_id)

        for position, item in enumerate(guild.storage.values()):
            self._add_item(guild.guild_id, item, OWNER_STORAGE, None, position)
        for position, item in enumerate(guild.unlocks.values()):
            self._add_item(guild.guild_id, item, OWNER_UNLOCKS, None, position)

        self._db.commit()
        logger.info(
            f"Guild {guild.guild_id} saved: month {guild.month}, "
            f"{len(guild.roster)} heroes, {len(guild.quest_board)} quests"
        )

    def _add_hero(self, guild_id: str, hero: Hero, membership: str, position: int) -> None:
        self._db.add(
            HeroModel(
                hero_id=hero.hero_id,
                guild_id=guild_id,
                membership=membership,
                position=position,
                name=hero.name,
                level=hero.level,
                hero_class=hero.hero_class.value,
                personality=hero.personality.value,
                experience=hero.experience,
                injury=hero.injury.value,
                weeks_remaining=hero.weeks_remaining,
                quest_weeks_remaining=hero.quest_weeks_remaining,
                companions=sorted(hero.companions),
            )
        )
        for subject_id, value in hero.opinions.items():
            self._db.add(
                HeroOpinionModel(
                    guild_id=guild_id,
                    observer_id=hero.hero_id,
                    subject_id=subject_id,
                    value=value,
                )
            )
        if hero.item is not None:
            self._add_item(guild_id, hero.item, OWNER_HERO, hero.hero_id)

    def _add_item(
        self,
        guild_id: str,
        item: Item,
        owner_type: str,
        owner_id: Optional[str],
        position: int = 0,
    ) -> None:
        self._db.add(
            ItemModel(
                item_id=item.item_id,
                guild_id=guild_id,
                name=item.name,
                kind=item.kind.value,
                class_restriction=item.class_restriction.value
                if item.class_restriction
                else None,
                effectiveness_bonus=item.effectiveness_bonus,
                owner_type=owner_type,
                owner_id=owner_id,
                position=position,
            )
        )

    @staticmethod
    def _quest_to_orm(guild_id: str, quest: Quest, position: int) -> QuestModel:
        return QuestModel(
            quest_id=quest.quest_id,
            guild_id=guild_id,
            position=position,
            title=quest.title,
            difficulty=quest.difficulty,
            duration_weeks=quest.duration_weeks,
            expires_in_weeks=quest.expires_in_weeks,
            hero_experience=quest.rewards.hero_experience,
            gold=quest.rewards.gold,
            reputation_experience=quest.rewards.reputation_experience,
        )

    def _delete_rows(self, guild_id: str) -> None:
        """이전 저장의 하위 행 삭제. 길드 행은 유지하고 값만 갱신."""
        for model in _ENTITY_MODELS:
            for row in self._db.query(model).filter(model.guild_id == guild_id).all():
                self._db.delete(row)
        self._db.flush()

    # ── 불러오기 ─────────────────────────────────────────────

    def exists(self, guild_id: str) -> bool:
        return self._db.get(GuildModel, guild_id) is not None

    def load(self, guild_id: str) -> Optional[Tuple[Guild, random.Random]]:
        """저장된 길드 복원. 없으면 None."""
        row = self._db.get(GuildModel, guild_id)
        if row is None:
            return None

        items = self._load_items(guild_id)
        opinions = self._load_opinions(guild_id)

        heroes: Dict[str, Hero] = {}
        memberships: Dict[str, List[HeroModel]] = {ROSTER: [], OFFER: []}
        hero_rows = (
            self._db.query(HeroModel)
            .filter(HeroModel.guild_id == guild_id)
            .order_by(HeroModel.membership, HeroModel.position)
            .all()
        )
        for hero_row in hero_rows:
            heroes[hero_row.hero_id] = self._hero_from_orm(
                hero_row,
                opinions.get(hero_row.hero_id, {}),
                items.get((OWNER_HERO, hero_row.hero_id), [None])[0],
            )
            memberships[hero_row.membership].append(hero_row)

        guild = Guild(
            guild_id=row.guild_id,
            name=row.name,
            gold=row.gold,
            reputation_level=row.reputation_level,
            reputation_experience=row.reputation_experience,
            pending_reputation_experience=row.pending_reputation_experience,
            fallen=list(row.fallen or []),
            month=row.month,
            week=row.week,
            status=GameStatus(row.status),
            next_serial=row.next_serial,
        )
        guild.roster = {h.hero_id: heroes[h.hero_id] for h in memberships[ROSTER]}

        offer_rows = (
            self._db.query(RecruitmentOfferModel)
            .filter(RecruitmentOfferModel.guild_id == guild_id)
            .order_by(RecruitmentOfferModel.position)
            .all()
        )
        guild.offers = {
            o.offer_id: RecruitmentOffer(
                offer_id=o.offer_id,
                hero=heroes[o.hero_id],
                signing_bonus=o.signing_bonus,
            )
            for o in offer_rows
        }

        quest_rows = (
            self._db.query(QuestModel)
            .filter(QuestModel.guild_id == guild_id)
            .order_by(QuestModel.position)
            .all()
        )
        guild.quest_board = {
            q.quest_id: self._quest_from_orm(q, items.get((OWNER_QUEST, q.quest_id), [None])[0])
            for q in quest_rows
        }

        guild.storage = {i.item_id: i for i in items.get((OWNER_STORAGE, None), [])}
        guild.unlocks = {i.item_id: i for i in items.get((OWNER_UNLOCKS, None), [])}

        rng = load_state(random.Random(), row.rng_state)
        logger.info(f"Guild {guild_id} loaded: month {guild.month}, {len(guild.roster)} heroes")
        return guild, rng

    def load_service(self, guild_id: str, event_bus: EventBus) -> Optional[GuildService]:
        loaded = self.load(guild_id)
        if loaded is None:
            return None
        guild, rng = loaded
        return GuildService(guild, rng, event_bus)

    def _load_items(self, guild_id: str) -> Dict[Tuple[str, Optional[str]], List[Item]]:
        rows = (
            self._db.query(ItemModel)
            .filter(ItemModel.guild_id == guild_id)
            .order_by(ItemModel.position)
            .all()
        )
        grouped: Dict[Tuple[str, Optional[str]], List[Item]] = {}
        for r in rows:
            item = Item(
                item_id=r.item_id,
                name=r.name,
                kind=ItemKind(r.kind),
                class_restriction=HeroClass(r.class_restriction) if r.class_restriction else None,
                effectiveness_bonus=r.effectiveness_bonus,
            )
            grouped.setdefault((r.owner_type, r.owner_id), []).append(item)
        return grouped

    def _load_opinions(self, guild_id: str) -> Dict[str, Dict[str, int]]:
        rows = (
            self._db.query(HeroOpinionModel)
            .filter(HeroOpinionModel.guild_id == guild_id)
            .order_by(HeroOpinionModel.opinion_id)
            .all()
        )
        opinions: Dict[str, Dict[str, int]] = {}
        for r in rows:
            opinions.setdefault(r.observer_id, {})[r.subject_id] = r.value
        return opinions

    @staticmethod
    def _hero_from_orm(
        row: HeroModel, opinions: Dict[str, int], item: Optional[Item]
    ) -> Hero:
        return Hero(
            hero_id=row.hero_id,
            name=row.name,
            level=row.level,
            hero_class=HeroClass(row.hero_class),
            personality=Personality(row.personality),
            experience=row.experience,
            item=item,
            opinions=dict(opinions),
            injury=InjuryState(row.injury),
            weeks_remaining=row.weeks_remaining,
            quest_weeks_remaining=row.quest_weeks_remaining,
            companions=set(row.companions or []),
        )

    @staticmethod
    def _quest_from_orm(row: QuestModel, item: Optional[Item]) -> Quest:
        return Quest(
            quest_id=row.quest_id,
            title=row.title,
            difficulty=row.difficulty,
            duration_weeks=row.duration_weeks,
            expires_in_weeks=row.expires_in_weeks,
            rewards=RewardBundle(
                hero_experience=row.hero_experience,
                gold=row.gold,
                reputation_experience=row.reputation_experience,
                item=item,
            ),
        )
