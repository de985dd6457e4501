"""Application configuration loaded from environment variables and .env file."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Values are loaded from environment variables first,
    then from a .env file in the project root as fallback.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    DATABASE_URL: str = "sqlite:///./guild.db"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # New game
    GAME_SEED: int = 42
    GUILD_NAME: str = "Guild"
    STARTING_GOLD: int = 200
    STARTING_HEROES: int = 3


settings = Settings()
