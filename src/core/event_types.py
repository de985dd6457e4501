"""이벤트 유형 상수

GuildService가 발행하고 NotificationService 등이 구독한다.
"""


class EventTypes:
    """이벤트 유형 문자열 상수"""

    # roster
    HERO_RECRUITED = "hero_recruited"
    HERO_DISMISSED = "hero_dismissed"
    HERO_INJURED = "hero_injured"
    HERO_RECOVERED = "hero_recovered"
    HERO_DIED = "hero_died"
    HERO_LEVELLED_UP = "hero_levelled_up"

    # quest board
    QUEST_POSTED = "quest_posted"
    QUEST_EXPIRED = "quest_expired"
    QUEST_COMPLETED = "quest_completed"
    QUEST_FAILED = "quest_failed"
    ITEM_AWARDED = "item_awarded"

    # economy loop
    MONTH_ADVANCED = "month_advanced"
    REPUTATION_CHANGED = "reputation_changed"
    GAME_WON = "game_won"
    GAME_LOST = "game_lost"

    ALL = (
        HERO_RECRUITED,
        HERO_DISMISSED,
        HERO_INJURED,
        HERO_RECOVERED,
        HERO_DIED,
        HERO_LEVELLED_UP,
        QUEST_POSTED,
        QUEST_EXPIRED,
        QUEST_COMPLETED,
        QUEST_FAILED,
        ITEM_AWARDED,
        MONTH_ADVANCED,
        REPUTATION_CHANGED,
        GAME_WON,
        GAME_LOST,
    )
