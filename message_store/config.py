from functools import lru_cache

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from message_store.schemas import IdPolicy


class Settings(BaseSettings):
    """
    Process-wide settings loaded from environment variables.
    Read once by the host application before any table is created.
    """

    # env_file is only used as fallback, env vars take precedence
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_ignore_empty=True,
    )

    # Name of the table holding message records - required
    MESSAGES_TABLE: str

    # SQL database backing SqlStoreClient
    DATABASE_URL: str = "sqlite:///./messages.db"

    LOG_LEVEL: str = "INFO"

    # Passed to Message.create by the host: always, if_missing, when_test
    MESSAGE_ID_POLICY: IdPolicy = IdPolicy.IF_MISSING


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache so the environment is read only once per process.
    """
    return Settings()


class TableConfig(BaseModel):
    """
    Explicit configuration handed to MessagesTable.

    The table name is fixed for the lifetime of the adapter, so the
    adapter never reads the environment itself.
    """
    model_config = {"frozen": True}

    table_name: str = Field(..., min_length=1, description="Target table name")

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "TableConfig":
        """Resolve the table config from process settings."""
        settings = settings or get_settings()
        return cls(table_name=settings.MESSAGES_TABLE)
