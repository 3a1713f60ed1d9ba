"""Application settings loaded from environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "AUTOPILOT_"}

    openai_api_key: str = Field(description="OpenAI API key")
    openai_model: str = Field(default="gpt-4o", description="OpenAI model name")
    llm_max_retries: int = Field(
        default=2, ge=0, description="Retries for failed model calls"
    )
    analysis_temperature: float = Field(
        default=0.2, description="Sampling temperature for prompt analysis"
    )
    db_path: Path = Field(
        default=Path.home() / ".autopilot" / "autopilot.db",
        description="SQLite database path",
    )
    encryption_key: str = Field(description="Key material for token encryption")
    environment: str = Field(default="development", description="Deployment environment")
    log_level: str = Field(default="INFO", description="Logging level")
    dispatch_strategy: str = Field(
        default="direct",
        description="'direct' (direct adapters, hub fallback) or 'hub' (hub only)",
    )

    hub_api_key: str = Field(default="", description="Integration hub secret")
    hub_base_url: str = Field(
        default="https://api.picaos.com/v1", description="Integration hub API base"
    )
    hub_connect_url: str = Field(
        default="https://connect.picaos.com/connect",
        description="Hosted connect page of the integration hub",
    )
    webhook_secret: str = Field(default="", description="HMAC secret for hub webhooks")

    telegram_bot_token: str = Field(default="", description="Telegram bot token")
    google_client_id: str = Field(default="", description="Google OAuth client id")
    google_client_secret: str = Field(default="", description="Google OAuth client secret")
    slack_client_id: str = Field(default="", description="Slack OAuth client id")
    slack_client_secret: str = Field(default="", description="Slack OAuth client secret")

    app_url: str = Field(default="http://localhost:3001", description="Backend base URL")
    frontend_url: str = Field(default="http://localhost:5173", description="Frontend base URL")
    http_timeout: float = Field(default=30.0, description="Outbound HTTP timeout (seconds)")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"
