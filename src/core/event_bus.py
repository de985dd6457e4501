"""EventBus - 서비스 간 이벤트 통신 인프라

규칙:
- 이벤트는 식별자(ID)와 작은 값만 전달한다
- 전파 깊이 최대 MAX_DEPTH 단계
- 한 작업(operation) 안에서 같은 source:event_type:key 중복 발행 금지
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Set

from src.core.logging import get_logger

logger = get_logger(__name__)

MAX_DEPTH = 5  # 한 작업 내 이벤트 전파 최대 깊이


@dataclass
class GameEvent:
    """이벤트 데이터 컨테이너

    Args:
        event_type: 이벤트 유형 (예: "hero_injured", "quest_completed")
        data: 이벤트 데이터 (ID 위주, 무거운 객체 금지)
        source: 발행한 서비스 이름
        key: 중복 판정 단위 (예: hero_id). 같은 유형을 대상별로 여러 번 발행할 때 사용
    """

    event_type: str
    data: Dict[str, Any]
    source: str
    key: str = ""

    # 내부 추적용 (외부에서 설정하지 않음)
    _depth: int = field(default=0, repr=False)


# 핸들러 타입: GameEvent를 받는 callable
EventHandler = Callable[[GameEvent], None]


class EventBus:
    """동기식 이벤트 버스

    사용 패턴:
        bus = EventBus()
        bus.subscribe("hero_died", notifications.handle)
        bus.emit(GameEvent(event_type="hero_died", data={"hero_id": "hero_00001"},
                           source="guild_service", key="hero_00001"))
        bus.reset_chain()  # 작업 종료 시
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[EventHandler]] = defaultdict(list)
        self._current_depth: int = 0
        self._emitted_in_chain: Set[str] = set()

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """이벤트 구독 등록"""
        self._handlers[event_type].append(handler)
        logger.debug(f"EventBus subscribe: {event_type} → {handler.__qualname__}")

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        """이벤트 구독 해제"""
        if event_type in self._handlers:
            try:
                self._handlers[event_type].remove(handler)
                logger.debug(
                    f"EventBus unsubscribe: {event_type} → {handler.__qualname__}"
                )
            except ValueError:
                logger.warning(
                    f"Handler not registered: {event_type} → {handler.__qualname__}"
                )

    def emit(self, event: GameEvent) -> None:
        """이벤트 발행. 등록된 핸들러를 동기 호출.

        안전장치:
        1. 전파 깊이 MAX_DEPTH 초과 시 무시
        2. 동일 source:event_type:key 중복 발행 시 무시
        3. 핸들러 예외는 기록만 하고 발행한 작업을 깨뜨리지 않음
        """
        if self._current_depth >= MAX_DEPTH:
            logger.warning(
                f"EventBus depth exceeded ({MAX_DEPTH}): "
                f"{event.source}:{event.event_type} dropped"
            )
            return

        chain_key = f"{event.source}:{event.event_type}:{event.key}"
        if chain_key in self._emitted_in_chain:
            logger.warning(f"EventBus duplicate blocked: {chain_key}")
            return

        self._emitted_in_chain.add(chain_key)
        event._depth = self._current_depth

        handlers = self._handlers.get(event.event_type, [])
        if not handlers:
            logger.debug(f"EventBus: no subscribers for {event.event_type}")
            return

        logger.debug(
            f"EventBus emit: {event.event_type} (source={event.source}, "
            f"depth={self._current_depth}, handlers={len(handlers)})"
        )

        self._current_depth += 1
        try:
            for handler in list(handlers):
                try:
                    handler(event)
                except Exception:
                    logger.exception(
                        f"EventBus handler error: {handler.__qualname__} "
                        f"(event={event.event_type})"
                    )
        finally:
            self._current_depth -= 1

    def reset_chain(self) -> None:
        """작업 종료 시 호출. 중복 추적 초기화."""
        self._emitted_in_chain.clear()
        self._current_depth = 0

    def clear(self) -> None:
        """모든 구독 해제 (테스트용)"""
        self._handlers.clear()
        self.reset_chain()

    @property
    def handler_count(self) -> int:
        """등록된 총 핸들러 수"""
        return sum(len(h) for h in self._handlers.values())
