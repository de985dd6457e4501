"""API request/response schemas."""

from typing import Any, Optional

from pydantic import BaseModel, Field


# === Request Schemas ===


class QuestAttemptRequest(BaseModel):
    """퀘스트 시도 요청"""

    hero_ids: list[str] = Field(..., description="파티 영웅 ID 3명")


class AdvanceMonthRequest(BaseModel):
    """월간 진행 요청: 급여 전 해고할 영웅"""

    dismissals: list[str] = Field(default_factory=list)


class EquipRequest(BaseModel):
    item_id: str = Field(..., min_length=1)


class SaveRequest(BaseModel):
    guild_id: Optional[str] = Field(None, description="생략 시 현재 길드 ID")


# === Response Schemas ===


class ItemInfo(BaseModel):
    item_id: str
    name: str
    kind: str
    class_restriction: Optional[str] = None
    effectiveness_bonus: float = 0.0


class HeroInfo(BaseModel):
    """영웅 정보"""

    hero_id: str
    name: str
    level: int
    experience: int
    hero_class: str
    personality: str
    injury: str
    weeks_remaining: int
    quest_weeks_remaining: int = 0
    is_available: bool
    salary: int
    item: Optional[ItemInfo] = None


class QuestInfo(BaseModel):
    quest_id: str
    title: str
    difficulty: int
    duration_weeks: int
    expires_in_weeks: int
    hero_experience: int
    gold: int
    reputation_experience: int
    item: Optional[ItemInfo] = None


class OfferInfo(BaseModel):
    offer_id: str
    signing_bonus: int
    hero: HeroInfo


class GuildSummary(BaseModel):
    """길드 상태 요약"""

    guild_id: str
    name: str
    gold: int
    reputation_level: int
    reputation_experience: int
    pending_reputation_experience: int
    month: int
    week: int
    status: str
    roster_size: int
    salary_due: int
    storage: list[ItemInfo] = []
    unlocks: list[ItemInfo] = []


class OpinionsResponse(BaseModel):
    hero_id: str
    opinions: dict[str, int]


class NotificationInfo(BaseModel):
    message: str
    event_type: str
    is_unread: bool


class ActionResponse(BaseModel):
    """변경 작업 응답"""

    success: bool
    message: str = ""
    data: Optional[dict[str, Any]] = None


class OddsInfo(BaseModel):
    """파티 판정 확률 미리보기"""

    quest_id: str
    hero_ids: list[str]
    success_probability: float
    injury_avoid_probability: float
    level_delta: float
    relationship_factor: float
    equipment_factor: int
