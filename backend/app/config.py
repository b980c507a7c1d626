from __future__ import annotations
import os
from pydantic import BaseModel

class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "dev")
    app_name: str = os.getenv("APP_NAME", "promptleague-api")
    app_display_name: str = os.getenv("APP_DISPLAY_NAME", "PromptLeague")
    app_version: str = os.getenv("APP_VERSION", "0.1.0")
    git_sha: str = os.getenv("GIT_SHA", "dev")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    database_url: str = os.getenv("DATABASE_URL", "postgresql+asyncpg://postgres:postgres@db:5432/promptleague_dev")
    redis_url: str = os.getenv("REDIS_URL", "redis://redis:6379/0")

    # Bearer token expected on the periodic prompt-cycle trigger
    cron_secret: str = os.getenv("CRON_SECRET", "dev-cron-secret")
    transition_queue_name: str = os.getenv("TRANSITION_QUEUE_NAME", "default")

    # Defaults for newly created leagues
    default_submission_days: int = int(os.getenv("DEFAULT_SUBMISSION_DAYS", "7"))
    default_voting_days: int = int(os.getenv("DEFAULT_VOTING_DAYS", "2"))
    default_votes_per_player: int = int(os.getenv("DEFAULT_VOTES_PER_PLAYER", "3"))

settings = Settings()
