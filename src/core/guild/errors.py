"""Typed failures for rejected guild actions.

Every error carries a stable ``code`` and a ``detail`` dict so the
presentation layer can offer the player a corrected choice. Operations
validate before mutating, so a raised GuildError leaves state untouched.
"""

from typing import Any, Dict, Optional


class GuildError(ValueError):
    """Base class for recoverable, rejected actions."""

    code = "guild_error"

    def __init__(self, message: str, detail: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail: Dict[str, Any] = detail or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message, "detail": self.detail}


class InvalidPartyComposition(GuildError):
    """Not exactly 3 distinct roster heroes."""

    code = "invalid_party_composition"


class HeroUnavailable(GuildError):
    """Injured, recovering or dead hero assigned to a party."""

    code = "hero_unavailable"


class HeroNotFound(GuildError):
    code = "hero_not_found"


class QuestNotOffered(GuildError):
    code = "quest_not_offered"


class QuestExpired(GuildError):
    code = "quest_expired"


class InsufficientGold(GuildError):
    code = "insufficient_gold"


class OfferNotFound(GuildError):
    code = "offer_not_found"


class ItemNotFound(GuildError):
    code = "item_not_found"


class InvalidEquipment(GuildError):
    """Class-restricted item or guild charter offered to a hero."""

    code = "invalid_equipment"


class GameOver(GuildError):
    code = "game_over"


class MonthEndReached(GuildError):
    """The last week of a month is only closed by the monthly tick."""

    code = "month_end_reached"
