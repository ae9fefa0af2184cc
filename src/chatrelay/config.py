from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="chatrelay")
    app_version: str = Field(default="0.1.0")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Observability
    otel_exporter_otlp_endpoint: str = Field(default="http://jaeger:4318")
    otel_service_name: str = Field(default="chatrelay")
    log_level: str = Field(default="INFO")

    # Shared server-side credential, stored as SecretStr so it never lands in logs
    openai_api_key: SecretStr | None = Field(default=None)
    openai_base_url: str = Field(default="https://api.openai.com/v1")

    # Cost cap applied when callers ride on the shared credential
    downgrade_premium_prefix: str = Field(default="gpt-4")
    downgrade_fallback_model: str = Field(default="gpt-3.5-turbo-16k")
    downgrade_message_threshold: int = Field(default=2)

    # LLM call behaviour
    llm_timeout: int = Field(default=60)


settings = Settings()
