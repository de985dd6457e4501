"""길드 시뮬레이션 Core 패키지 — 공개 API"""

from src.core.guild.models import (
    GameStatus,
    Guild,
    Hero,
    HeroClass,
    InjurySeverity,
    InjuryState,
    Item,
    ItemKind,
    Personality,
    Quest,
    RecruitmentOffer,
    RewardBundle,
    clamp_opinion,
    salary_for_level,
)
from src.core.guild.errors import (
    GameOver,
    GuildError,
    HeroNotFound,
    HeroUnavailable,
    InsufficientGold,
    InvalidEquipment,
    InvalidPartyComposition,
    ItemNotFound,
    MonthEndReached,
    OfferNotFound,
    QuestExpired,
    QuestNotOffered,
)
from src.core.guild.party import Party, assemble_party
from src.core.guild.synergy import SynergyTuple, evaluate_synergy
from src.core.guild.opinions import (
    PERSONALITY_RULES,
    compute_opinion_updates,
    decay_bonded_opinions,
)
from src.core.guild.resolution import (
    QuestResolution,
    ResolutionOdds,
    evaluate_odds,
    draw_outcome,
    injury_avoid_probability,
    severity_distribution,
    success_probability,
)
from src.core.guild.injury import advance_injury_timer, apply_injury
from src.core.guild.economy import WEEKS_PER_MONTH, create_guild

__all__ = [
    "GameStatus",
    "Guild",
    "Hero",
    "HeroClass",
    "InjurySeverity",
    "InjuryState",
    "Item",
    "ItemKind",
    "Personality",
    "Quest",
    "RecruitmentOffer",
    "RewardBundle",
    "clamp_opinion",
    "salary_for_level",
    "GameOver",
    "GuildError",
    "HeroNotFound",
    "HeroUnavailable",
    "InsufficientGold",
    "InvalidEquipment",
    "InvalidPartyComposition",
    "ItemNotFound",
    "MonthEndReached",
    "OfferNotFound",
    "QuestExpired",
    "QuestNotOffered",
    "Party",
    "assemble_party",
    "SynergyTuple",
    "evaluate_synergy",
    "PERSONALITY_RULES",
    "compute_opinion_updates",
    "decay_bonded_opinions",
    "QuestResolution",
    "ResolutionOdds",
    "evaluate_odds",
    "draw_outcome",
    "injury_avoid_probability",
    "severity_distribution",
    "success_probability",
    "advance_injury_timer",
    "apply_injury",
    "WEEKS_PER_MONTH",
    "create_guild",
]
