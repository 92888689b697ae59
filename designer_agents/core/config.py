"""Runtime settings, read from the environment or a local ``.env`` file."""

from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Model access
    anthropic_api_key: Optional[str] = None
    llm_provider: str = "anthropic"
    llm_model: str = "claude-haiku-4-5"
    llm_max_tokens: int = 4096

    # Routing: ask the LLM for a step plan on compound requests
    multi_step_enabled: bool = True

    # Logs
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"
    redact_sensitive_data: bool = True


settings = Settings()


# Agent names, in classifier priority order
SPECIALIST_AGENTS = ["PageAgent", "CreatorAgent", "UpdateAgent"]

AGENT_DESCRIPTIONS = {
    "PageAgent": "Creates, switches between and deletes pages",
    "CreatorAgent": "Creates components, sections and data tables",
    "UpdateAgent": "Updates, moves and deletes existing components",
    "ValidatorAgent": "Checks the memory log against the original request",
}
