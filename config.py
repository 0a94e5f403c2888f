from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration sourced from environment variables."""

    model_config = SettingsConfigDict(env_file="./.env", extra="ignore")

    # History storage configuration
    HISTORY_BACKEND: str = "tinydb"
    HISTORY_DB_PATH: str = "./data/history.json"
    HISTORY_FILES_DIR: str = "./data/storage"
    HISTORY_STORAGE_KEY: str = "chatHistory"
    HISTORY_NO_RESPONSE_TEXT: str = "No response received"

    # Sidebar
    SIDEBAR_OPEN_BY_DEFAULT: bool = True

    # Logging
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    # Server
    API_HOST: str = "127.0.0.1"
    API_PORT: int = 8000


config = Config()
