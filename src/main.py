"""FastAPI application entrypoint."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from src.api.guild import router as guild_router
from src.api.health import router as health_router
from src.config import settings
from src.core.event_bus import EventBus
from src.core.logging import get_logger, setup_logging
from src.db.database import init_db
from src.services.guild_service import GuildService
from src.services.notification_service import NotificationService

setup_logging(settings.LOG_LEVEL, sql_echo=settings.DEBUG)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    # DB 테이블 생성
    logger.info("Creating database tables...")
    init_db()
    logger.info("Database tables created.")

    # 새 게임 초기화
    logger.info("Initializing GuildService...")
    event_bus = EventBus()
    notification_service = NotificationService(event_bus)
    guild_service = GuildService.new_game(
        event_bus,
        seed=settings.GAME_SEED,
        name=settings.GUILD_NAME,
        gold=settings.STARTING_GOLD,
        starting_heroes=settings.STARTING_HEROES,
    )
    app.state.event_bus = event_bus
    app.state.notification_service = notification_service
    app.state.guild_service = guild_service
    logger.info(
        f"GuildService initialized (seed={settings.GAME_SEED}, "
        f"{len(guild_service.guild.roster)} heroes, {guild_service.guild.gold} gold)."
    )

    yield

    # 종료 시 정리
    logger.info("Shutting down...")
    notification_service.detach()
    event_bus.clear()


app = FastAPI(title="Guild Simulation", lifespan=lifespan)

app.include_router(health_router)
app.include_router(guild_router)
