"""길드 경제 규칙 — 급여, 평판, 게시판, 모집, 영웅 성장

Pure rules used by the monthly tick. Everything random draws from the
injected RandomSource; ids come from Guild.issue_id so a fixed seed
reproduces the same board, the same recruits and the same ids.
"""

import logging
from typing import Dict, List, Tuple

from src.core.guild.models import (
    LEVEL_MAX,
    MAX_ITEM_BONUS,
    REPUTATION_MAX,
    Guild,
    Hero,
    HeroClass,
    Item,
    ItemKind,
    Personality,
    Quest,
    RecruitmentOffer,
    RewardBundle,
    clamp_level,
)
from src.core.guild.rng import RandomSource, roll_percent

logger = logging.getLogger(__name__)

WEEKS_PER_MONTH = 4

# === 평판 ===
DISMISSAL_REPUTATION_PENALTY = 20

# === 게시판 ===
BASE_BOARD_SIZE = 3
MAX_BOARD_SIZE = 6
QUEST_GOLD_PER_DIFFICULTY = 30
QUEST_GOLD_JITTER = 20
QUEST_HERO_EXP_PER_DIFFICULTY = 25
QUEST_REPUTATION_EXP_PER_DIFFICULTY = 10
QUEST_ITEM_BASE_CHANCE = 15.0  # %
QUEST_ITEM_CHANCE_PER_CHARTER = 5.0  # %
QUEST_CHARTER_SHARE = 20.0  # % of item rewards that are charters
QUEST_DURATION_WEEKS = (1, 4)
QUEST_EXPIRY_WEEKS = (4, 8)

# === 모집 ===
RECRUITMENT_ROLLS = 2
RECRUITMENT_BASE_CHANCE = 0.30
RECRUITMENT_CHANCE_PER_REPUTATION = 0.05
RECRUITMENT_MAX_CHANCE = 0.80
SIGNING_BONUS_PER_LEVEL = 25

HERO_NAMES = (
    "Aldric", "Brenna", "Cassian", "Dagny", "Edda", "Fenwick", "Garrick",
    "Hilde", "Ivo", "Jorun", "Kestrel", "Lioba", "Marek", "Nessa", "Oswin",
    "Perrin", "Quilla", "Roderic", "Sunniva", "Tamsin", "Ulric", "Vanya",
    "Wendel", "Yrsa",
)
QUEST_TITLES = (
    "Clear the goblin warren",
    "Escort the salt caravan",
    "Hunt the marsh wyrm",
    "Recover the abbey relic",
    "Break the bandit blockade",
    "Scout the sunken road",
    "Guard the harvest fair",
    "Slay the barrow wight",
)
ITEM_NAMES: Dict[HeroClass, str] = {
    HeroClass.WARRIOR: "Longsword",
    HeroClass.TANK: "Tower Shield",
    HeroClass.SUPPORT: "Healer's Satchel",
}
CHARTER_NAME = "Guild Charter"

_CLASSES = tuple(HeroClass)
_PERSONALITIES = tuple(Personality)


# ── 급여 ────────────────────────────────────────────────


def total_salary(guild: Guild) -> int:
    return sum(hero.salary for hero in guild.roster.values())


# ── 평판 ────────────────────────────────────────────────


def reputation_threshold(level: int) -> int:
    """레벨 도달에 필요한 누적 평판 경험치. 1→50, 2→150, ..., 10→2750."""
    return 25 * level * (level + 1)


def reputation_level_for(experience: int) -> int:
    level = 0
    while level < REPUTATION_MAX and experience >= reputation_threshold(level + 1):
        level += 1
    return level


def apply_pending_reputation(guild: Guild) -> int:
    """이번 달 누적 평판 경험치 반영. 레벨 변화량 반환 (해고 패널티로 음수 가능).

    The pending pool may be negative after dismissals; the cumulative
    total is floored at 0 here.
    """
    before = guild.reputation_level
    guild.reputation_experience = max(
        0, guild.reputation_experience + guild.pending_reputation_experience
    )
    guild.pending_reputation_experience = 0
    guild.reputation_level = reputation_level_for(guild.reputation_experience)
    return guild.reputation_level - before


def apply_dismissal_penalty(guild: Guild) -> int:
    """해고 패널티를 이번 달 평판 경험치에서 차감. 월말 반영 시 합산된다."""
    guild.pending_reputation_experience -= DISMISSAL_REPUTATION_PENALTY
    return DISMISSAL_REPUTATION_PENALTY


# ── 영웅 성장 ────────────────────────────────────────────


def experience_to_next_level(level: int) -> int:
    return 100 * level


def award_hero_experience(hero: Hero, amount: int) -> int:
    """경험치 지급 + 레벨업. 올라간 레벨 수 반환. 최대 레벨에서는 누적하지 않음."""
    if amount <= 0 or hero.level >= LEVEL_MAX:
        return 0

    hero.experience += amount
    gained = 0
    while hero.level < LEVEL_MAX and hero.experience >= experience_to_next_level(hero.level):
        hero.experience -= experience_to_next_level(hero.level)
        hero.level += 1
        gained += 1
    if hero.level >= LEVEL_MAX:
        hero.experience = 0
    if gained:
        logger.info(f"Hero {hero.hero_id} reached level {hero.level}")
    return gained


# ── 아이템 ──────────────────────────────────────────────


def generate_item(rng: RandomSource, guild: Guild, charter_share: float = QUEST_CHARTER_SHARE) -> Item:
    if roll_percent(rng, charter_share):
        return Item(item_id=guild.issue_id("item"), name=CHARTER_NAME, kind=ItemKind.CHARTER)

    hero_class = rng.choice(_CLASSES)
    restricted = rng.randint(0, 1) == 1
    bonus = MAX_ITEM_BONUS if rng.randint(0, 1) == 1 else MAX_ITEM_BONUS / 2
    return Item(
        item_id=guild.issue_id("item"),
        name=ITEM_NAMES[hero_class] if restricted else "Traveller's Charm",
        kind=ItemKind.EQUIPMENT,
        class_restriction=hero_class if restricted else None,
        effectiveness_bonus=bonus,
    )


# ── 게시판 ──────────────────────────────────────────────


def quest_board_size(charters: int) -> int:
    return min(MAX_BOARD_SIZE, BASE_BOARD_SIZE + charters)


def difficulty_range(reputation_level: int, charters: int) -> Tuple[int, int]:
    """평판과 헌장 수로 게시판 난이도 범위 결정."""
    low = clamp_level(reputation_level - 1)
    high = clamp_level(reputation_level + 2 + charters)
    return low, high


def generate_quest(rng: RandomSource, guild: Guild) -> Quest:
    charters = len(guild.unlocks)
    low, high = difficulty_range(guild.reputation_level, charters)
    difficulty = rng.randint(low, high)

    item = None
    if roll_percent(rng, QUEST_ITEM_BASE_CHANCE + QUEST_ITEM_CHANCE_PER_CHARTER * charters):
        item = generate_item(rng, guild)

    return Quest(
        quest_id=guild.issue_id("quest"),
        title=rng.choice(QUEST_TITLES),
        difficulty=difficulty,
        duration_weeks=rng.randint(*QUEST_DURATION_WEEKS),
        expires_in_weeks=rng.randint(*QUEST_EXPIRY_WEEKS),
        rewards=RewardBundle(
            hero_experience=QUEST_HERO_EXP_PER_DIFFICULTY * difficulty,
            gold=QUEST_GOLD_PER_DIFFICULTY * difficulty + rng.randint(0, QUEST_GOLD_JITTER),
            reputation_experience=QUEST_REPUTATION_EXP_PER_DIFFICULTY * difficulty,
            item=item,
        ),
    )


def advance_quest_expiry(guild: Guild, weeks: int) -> None:
    for quest in guild.quest_board.values():
        quest.expires_in_weeks = max(0, quest.expires_in_weeks - weeks)


def refresh_quest_board(guild: Guild, rng: RandomSource) -> Tuple[List[Quest], List[Quest]]:
    """만료 퀘스트 제거 후 빈 자리를 새 퀘스트로 채움.

    Returns:
        (expired, posted)
    """
    expired = [q for q in guild.quest_board.values() if q.is_expired]
    for quest in expired:
        del guild.quest_board[quest.quest_id]

    posted: List[Quest] = []
    while len(guild.quest_board) < quest_board_size(len(guild.unlocks)):
        quest = generate_quest(rng, guild)
        guild.quest_board[quest.quest_id] = quest
        posted.append(quest)

    logger.info(f"Quest board refreshed: {len(expired)} expired, {len(posted)} posted")
    return expired, posted


# ── 모집 ────────────────────────────────────────────────


def recruitment_chance(reputation_level: int) -> float:
    return min(
        RECRUITMENT_MAX_CHANCE,
        RECRUITMENT_BASE_CHANCE + RECRUITMENT_CHANCE_PER_REPUTATION * reputation_level,
    )


def signing_bonus_for(level: int) -> int:
    return SIGNING_BONUS_PER_LEVEL * level


def generate_hero(rng: RandomSource, guild: Guild, level: int) -> Hero:
    return Hero(
        hero_id=guild.issue_id("hero"),
        name=rng.choice(HERO_NAMES),
        level=level,
        hero_class=rng.choice(_CLASSES),
        personality=rng.choice(_PERSONALITIES),
    )


def roll_recruitment_offers(guild: Guild, rng: RandomSource) -> List[RecruitmentOffer]:
    """이번 달 모집 제안. 확률과 레벨 분포가 평판에 비례."""
    chance = recruitment_chance(guild.reputation_level) * 100.0
    offers: List[RecruitmentOffer] = []
    for _ in range(RECRUITMENT_ROLLS):
        if not roll_percent(rng, chance):
            continue
        level = clamp_level(1 + guild.reputation_level // 2 + rng.randint(0, 2))
        hero = generate_hero(rng, guild, level)
        offers.append(
            RecruitmentOffer(
                offer_id=guild.issue_id("offer"),
                hero=hero,
                signing_bonus=signing_bonus_for(level),
            )
        )
    return offers


# ── 새 게임 ─────────────────────────────────────────────


def create_guild(
    rng: RandomSource,
    name: str = "Guild",
    gold: int = 200,
    starting_heroes: int = 3,
    guild_id: str = "guild_main",
) -> Guild:
    guild = Guild(guild_id=guild_id, name=name, gold=gold)
    for _ in range(starting_heroes):
        hero = generate_hero(rng, guild, level=1)
        guild.roster[hero.hero_id] = hero
    refresh_quest_board(guild, rng)
    for offer in roll_recruitment_offers(guild, rng):
        guild.offers[offer.offer_id] = offer
    logger.info(
        f"Guild {guild.guild_id} founded: {len(guild.roster)} heroes, {guild.gold} gold"
    )
    return guild
