from typing import Optional, Any, Union
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, PostgresDsn, ValidationInfo, field_validator
from pathlib import Path

# Define the root directory of the poor_jokes service
SERVICE_ROOT_DIR = Path(__file__).parent.parent.resolve()
# Path to the repository root (two levels up from this settings.py)
PROJECT_ROOT_DIR = SERVICE_ROOT_DIR.parent

class Settings(BaseSettings):
    # Application settings
    APP_NAME: str = "PoorJokesService"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # Security settings
    ALLOWED_HOSTS: Union[str, list[str]] = "localhost,127.0.0.1,0.0.0.0"
    # The extension calls from chrome-extension:// origins, so allow any origin by default
    CORS_ORIGINS: Union[str, list[str]] = "*"
    CORS_ALLOW_CREDENTIALS: bool = False
    CORS_ALLOW_METHODS: Union[str, list[str]] = "GET,POST,OPTIONS"
    CORS_ALLOW_HEADERS: Union[str, list[str]] = "Content-Type,Authorization,x-admin-password,x-api-version"
    ADMIN_PASSWORD: str = "change-me"

    # Database settings
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "user"
    DB_PASSWORD: str = "password"
    DB_NAME: str = "poor_jokes"
    DATABASE_URL: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("DATABASE_URL", mode='before')
    @classmethod
    def assemble_db_connection(cls, v: Optional[str], info: ValidationInfo) -> Any:
        if isinstance(v, str):
            return v
        db_user = info.data.get("DB_USER")
        db_password = info.data.get("DB_PASSWORD")
        db_host = info.data.get("DB_HOST")
        db_port = info.data.get("DB_PORT")
        db_name = info.data.get("DB_NAME")

        return str(PostgresDsn.build(
            scheme="postgresql+asyncpg",
            username=db_user,
            password=db_password,
            host=db_host,
            port=int(db_port) if db_port else None,
            path=f"{db_name or ''}",
        ))

    def model_post_init(self, __context) -> None:
        """Parse comma-separated strings into lists after model initialization."""
        if isinstance(self.ALLOWED_HOSTS, str):
            self.ALLOWED_HOSTS = [host.strip() for host in self.ALLOWED_HOSTS.split(',') if host.strip()]

        if isinstance(self.CORS_ORIGINS, str):
            self.CORS_ORIGINS = [origin.strip() for origin in self.CORS_ORIGINS.split(',') if origin.strip()]

        if isinstance(self.CORS_ALLOW_METHODS, str):
            self.CORS_ALLOW_METHODS = [method.strip() for method in self.CORS_ALLOW_METHODS.split(',') if method.strip()]

        if isinstance(self.CORS_ALLOW_HEADERS, str):
            if self.CORS_ALLOW_HEADERS == "*":
                self.CORS_ALLOW_HEADERS = ["*"]
            else:
                self.CORS_ALLOW_HEADERS = [header.strip() for header in self.CORS_ALLOW_HEADERS.split(',') if header.strip()]

    # Moderation settings
    SIMILARITY_THRESHOLD: float = 0.90
    MIN_JOKE_LENGTH: int = 10
    MAX_JOKE_LENGTH: int = 500
    MAX_SUBMISSION_LENGTH: int = 500
    MAX_SUBMITTER_LENGTH: int = 100

    # Telegram bot
    TELEGRAM_BOT_TOKEN: Optional[str] = None
    TELEGRAM_CHAT_ID: Optional[str] = None
    TELEGRAM_WEBHOOK_SECRET: Optional[str] = None
    TELEGRAM_API_BASE: str = "https://api.telegram.org"

    # Discord webhook and interactions (application public key, hex)
    DISCORD_WEBHOOK_URL: Optional[str] = None
    DISCORD_PUBLIC_KEY: Optional[str] = None

    # E-mail (SMTP)
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_USE_TLS: bool = True
    NOTIFY_EMAIL_FROM: Optional[str] = None
    NOTIFY_EMAIL_TO: Optional[str] = None

    # Daily AI joke generator (OpenAI-compatible chat completions API)
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_API_BASE: str = "https://api.openai.com/v1"
    OPENAI_MODEL: str = "gpt-3.5-turbo"
    GENERATOR_DAILY_COUNT: int = 5
    GENERATOR_MAX_ATTEMPTS: int = 10
    GENERATOR_QUALITY_THRESHOLD: float = 0.7
    GENERATOR_TIMEOUT_SECONDS: float = 30.0
    # Bearer token for the scheduler calling the daily generation endpoint
    CRON_SECRET: Optional[str] = None

    # Link placed in moderator notifications
    ADMIN_URL: str = "http://localhost:8000/admin"

    # Notification delivery
    NOTIFICATION_TIMEOUT_SECONDS: float = 10.0
    NOTIFICATION_QUEUE_SIZE: int = 100

    # Logging configuration path (can be overridden by env var)
    LOGGING_CONFIG_PATH: str = str(SERVICE_ROOT_DIR / "config" / "logging_config.yaml")

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT_DIR / ".env"),  # Load variables from project root .env
        env_file_encoding='utf-8',
        extra='ignore'
    )


# Instantiate settings
settings = Settings()
