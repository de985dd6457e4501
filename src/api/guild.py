"""Guild API endpoints."""

from dataclasses import asdict
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from src.api.schemas import (
    ActionResponse,
    AdvanceMonthRequest,
    EquipRequest,
    GuildSummary,
    HeroInfo,
    ItemInfo,
    NotificationInfo,
    OddsInfo,
    OfferInfo,
    OpinionsResponse,
    QuestAttemptRequest,
    QuestInfo,
    SaveRequest,
)
from src.core.event_bus import EventBus
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
from src.core.guild.models import Hero, Item, Quest
from src.core.logging import get_logger
from src.db.database import get_db
from src.services.guild_service import GuildService
from src.services.notification_service import NotificationService
from src.services.persistence_service import GuildPersistenceService

logger = get_logger(__name__)

router = APIRouter(prefix="/guild", tags=["guild"])

ERROR_STATUS: dict[type, int] = {
    HeroNotFound: 404,
    QuestNotOffered: 404,
    OfferNotFound: 404,
    ItemNotFound: 404,
    QuestExpired: 409,
    HeroUnavailable: 409,
    InsufficientGold: 409,
    MonthEndReached: 409,
    GameOver: 409,
    InvalidPartyComposition: 422,
    InvalidEquipment: 422,
}


def get_guild_service(request: Request) -> GuildService:
    """GuildService 인스턴스 반환 (의존성 주입)"""
    service: GuildService = request.app.state.guild_service
    return service


def get_notification_service(request: Request) -> NotificationService:
    """NotificationService 인스턴스 반환 (의존성 주입)"""
    service: NotificationService = request.app.state.notification_service
    return service


def get_event_bus(request: Request) -> EventBus:
    bus: EventBus = request.app.state.event_bus
    return bus


def _raise_http(error: GuildError) -> NoReturn:
    status = ERROR_STATUS.get(type(error), 400)
    logger.warning(f"Rejected: {error.code} ({error.message})")
    raise HTTPException(status_code=status, detail={"success": False, **error.to_dict()})


def _build_item_info(item: Item | None) -> ItemInfo | None:
    if item is None:
        return None
    return ItemInfo(
        item_id=item.item_id,
        name=item.name,
        kind=item.kind.value,
        class_restriction=item.class_restriction.value if item.class_restriction else None,
        effectiveness_bonus=item.effectiveness_bonus,
    )


def _build_hero_info(hero: Hero) -> HeroInfo:
    return HeroInfo(
        hero_id=hero.hero_id,
        name=hero.name,
        level=hero.level,
        experience=hero.experience,
        hero_class=hero.hero_class.value,
        personality=hero.personality.value,
        injury=hero.injury.value,
        weeks_remaining=hero.weeks_remaining,
        quest_weeks_remaining=hero.quest_weeks_remaining,
        is_available=hero.is_available,
        salary=hero.salary,
        item=_build_item_info(hero.item),
    )


def _build_quest_info(quest: Quest) -> QuestInfo:
    return QuestInfo(
        quest_id=quest.quest_id,
        title=quest.title,
        difficulty=quest.difficulty,
        duration_weeks=quest.duration_weeks,
        expires_in_weeks=quest.expires_in_weeks,
        hero_experience=quest.rewards.hero_experience,
        gold=quest.rewards.gold,
        reputation_experience=quest.rewards.reputation_experience,
        item=_build_item_info(quest.rewards.item),
    )


# ── 조회 ─────────────────────────────────────────────────────


@router.get("", response_model=GuildSummary)
def get_guild(service: GuildService = Depends(get_guild_service)) -> GuildSummary:
    guild = service.guild
    return GuildSummary(
        guild_id=guild.guild_id,
        name=guild.name,
        gold=guild.gold,
        reputation_level=guild.reputation_level,
        reputation_experience=guild.reputation_experience,
        pending_reputation_experience=guild.pending_reputation_experience,
        month=guild.month,
        week=guild.week,
        status=guild.status.value,
        roster_size=len(guild.roster),
        salary_due=sum(service.salary_due().values()),
        storage=[_build_item_info(i) for i in guild.storage.values()],
        unlocks=[_build_item_info(i) for i in guild.unlocks.values()],
    )


@router.get("/roster", response_model=list[HeroInfo])
def get_roster(service: GuildService = Depends(get_guild_service)) -> list[HeroInfo]:
    return [_build_hero_info(h) for h in service.get_roster()]


@router.get("/quests", response_model=list[QuestInfo])
def get_quests(service: GuildService = Depends(get_guild_service)) -> list[QuestInfo]:
    return [_build_quest_info(q) for q in service.get_quest_board()]


@router.get("/offers", response_model=list[OfferInfo])
def get_offers(service: GuildService = Depends(get_guild_service)) -> list[OfferInfo]:
    return [
        OfferInfo(
            offer_id=o.offer_id,
            signing_bonus=o.signing_bonus,
            hero=_build_hero_info(o.hero),
        )
        for o in service.get_offers()
    ]


@router.get("/heroes/{hero_id}/opinions", response_model=OpinionsResponse)
def get_opinions(
    hero_id: str,
    service: GuildService = Depends(get_guild_service),
) -> OpinionsResponse:
    try:
        opinions = service.get_opinions(hero_id)
    except GuildError as e:
        _raise_http(e)
    return OpinionsResponse(hero_id=hero_id, opinions=opinions)


@router.get("/notifications", response_model=list[NotificationInfo])
def get_notifications(
    unread_only: bool = False,
    notifications: NotificationService = Depends(get_notification_service),
) -> list[NotificationInfo]:
    return [
        NotificationInfo(message=n.message, event_type=n.event_type, is_unread=n.is_unread)
        for n in notifications.list_notifications(unread_only=unread_only)
    ]


@router.post("/notifications/read", response_model=ActionResponse)
def mark_notifications_read(
    notifications: NotificationService = Depends(get_notification_service),
) -> ActionResponse:
    count = notifications.mark_all_read()
    return ActionResponse(success=True, message=f"{count} notifications read")


@router.post("/quests/{quest_id}/odds", response_model=OddsInfo)
def preview_odds(
    quest_id: str,
    request: QuestAttemptRequest,
    service: GuildService = Depends(get_guild_service),
) -> OddsInfo:
    """파티 구성 미리보기. 난수를 소비하지 않는다."""
    try:
        odds = service.preview_odds(request.hero_ids, quest_id)
    except GuildError as e:
        _raise_http(e)
    return OddsInfo(
        quest_id=odds.quest_id,
        hero_ids=list(odds.hero_ids),
        success_probability=odds.success_probability,
        injury_avoid_probability=odds.injury_avoid_probability,
        level_delta=odds.synergy.level_delta,
        relationship_factor=odds.synergy.relationship_factor,
        equipment_factor=odds.synergy.equipment_factor,
    )


# ── 변경 ─────────────────────────────────────────────────────


@router.post("/quests/{quest_id}/attempt", response_model=ActionResponse)
def attempt_quest(
    quest_id: str,
    request: QuestAttemptRequest,
    service: GuildService = Depends(get_guild_service),
) -> ActionResponse:
    try:
        outcome = service.submit_quest_attempt(request.hero_ids, quest_id)
    except GuildError as e:
        _raise_http(e)
    return ActionResponse(
        success=True,
        message="Quest succeeded" if outcome.success else "Quest failed",
        data=asdict(outcome),
    )


@router.post("/advance-week", response_model=ActionResponse)
def advance_week(service: GuildService = Depends(get_guild_service)) -> ActionResponse:
    try:
        report = service.advance_week()
    except GuildError as e:
        _raise_http(e)
    return ActionResponse(success=True, message=f"Week {report.week}", data=asdict(report))


@router.post("/advance-month", response_model=ActionResponse)
def advance_month(
    request: AdvanceMonthRequest,
    service: GuildService = Depends(get_guild_service),
) -> ActionResponse:
    try:
        report = service.advance_month(request.dismissals)
    except GuildError as e:
        _raise_http(e)
    if report.is_lost:
        message = "The guild went bankrupt"
    elif report.is_won:
        message = "The guild reached the highest reputation"
    else:
        message = f"Month {report.month} ended"
    return ActionResponse(success=True, message=message, data=asdict(report))


@router.post("/offers/{offer_id}/accept", response_model=ActionResponse)
def accept_offer(
    offer_id: str,
    service: GuildService = Depends(get_guild_service),
) -> ActionResponse:
    try:
        hero = service.accept_recruitment(offer_id)
    except GuildError as e:
        _raise_http(e)
    return ActionResponse(
        success=True,
        message=f"{hero.name} joined the guild",
        data=_build_hero_info(hero).model_dump(),
    )


@router.post("/heroes/{hero_id}/dismiss", response_model=ActionResponse)
def dismiss_hero(
    hero_id: str,
    service: GuildService = Depends(get_guild_service),
) -> ActionResponse:
    try:
        result = service.dismiss_hero(hero_id)
    except GuildError as e:
        _raise_http(e)
    return ActionResponse(success=True, message=f"{hero_id} dismissed", data=asdict(result))


@router.post("/heroes/{hero_id}/equip", response_model=ActionResponse)
def equip_item(
    hero_id: str,
    request: EquipRequest,
    service: GuildService = Depends(get_guild_service),
) -> ActionResponse:
    try:
        previous = service.equip_item(hero_id, request.item_id)
    except GuildError as e:
        _raise_http(e)
    return ActionResponse(
        success=True,
        message=f"{hero_id} equipped {request.item_id}",
        data={"returned_item_id": previous},
    )


@router.post("/heroes/{hero_id}/unequip", response_model=ActionResponse)
def unequip_item(
    hero_id: str,
    service: GuildService = Depends(get_guild_service),
) -> ActionResponse:
    try:
        item_id = service.unequip_item(hero_id)
    except GuildError as e:
        _raise_http(e)
    return ActionResponse(success=True, message=f"{item_id} returned to storage")


# ── 저장/불러오기 ────────────────────────────────────────────


@router.post("/save", response_model=ActionResponse)
def save_guild(
    request: SaveRequest,
    service: GuildService = Depends(get_guild_service),
    db: Session = Depends(get_db),
) -> ActionResponse:
    guild = service.guild
    if request.guild_id and request.guild_id != guild.guild_id:
        raise HTTPException(
            status_code=400,
            detail=f"Active guild is {guild.guild_id}, not {request.guild_id}",
        )
    GuildPersistenceService(db).save(guild, service.rng)
    return ActionResponse(success=True, message=f"Guild {guild.guild_id} saved")


@router.post("/load/{guild_id}", response_model=ActionResponse)
def load_guild(
    guild_id: str,
    http_request: Request,
    db: Session = Depends(get_db),
    bus: EventBus = Depends(get_event_bus),
) -> ActionResponse:
    service = GuildPersistenceService(db).load_service(guild_id, bus)
    if service is None:
        raise HTTPException(status_code=404, detail=f"No saved guild: {guild_id}")
    http_request.app.state.guild_service = service
    return ActionResponse(
        success=True,
        message=f"Guild {guild_id} loaded",
        data={"month": service.guild.month, "gold": service.guild.gold},
    )
