from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	# Database
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")

	# Text generation used for AI summaries. Provider can be "openai" (any
	# OpenAI-compatible chat completions endpoint) or "gemini" (Generative Language API)
	llm_provider: str = Field(default="openai", validation_alias="LLM_PROVIDER")
	llm_api_key: str | None = Field(default=None, validation_alias="LLM_API_KEY")
	llm_model: str = Field(default="gpt-4o-mini", validation_alias="LLM_MODEL")
	# Optional endpoint override; defaults depend on the provider
	llm_base_url: str | None = Field(default=None, validation_alias="LLM_BASE_URL")
	llm_timeout_seconds: float = Field(default=30, validation_alias="LLM_TIMEOUT_SECONDS")

	# Auth configuration
	jwt_secret_key: str = Field(default="change-me", validation_alias="ACCESS_TOKEN_SECRET")
	refresh_secret_key: str = Field(default="change-me-too", validation_alias="REFRESH_TOKEN_SECRET")
	jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
	access_token_expire_minutes: int = Field(default=60, validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES")
	refresh_token_expire_days: int = Field(default=7, validation_alias="REFRESH_TOKEN_EXPIRE_DAYS")
	# Data-entry routes accept anonymous calls unless this is switched on
	require_auth: bool = Field(default=False, validation_alias="REQUIRE_AUTH")
	# Set on the refresh cookie; keep off for local http development
	secure_cookies: bool = Field(default=False, validation_alias="SECURE_COOKIES")

	# Allowed browser origins (deployed frontend, local dev server)
	cors_origins: List[str] = Field(default_factory=list, validation_alias="CORS_ORIGINS")

	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
