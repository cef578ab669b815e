"""
src/config.py

Settings, defaults and logging setup for the terminal assistant.
Values come from the environment (prefix TOOLCHAT_) or a local .env file.
"""


import logging
from enum import Enum
from functools import lru_cache
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TokenLimit(str, Enum):

    MAX_TOKENS = "max_tokens"
    MAX_COMPLETION_TOKENS = "max_completion_tokens"


# Defaults
DEFAULT_MODEL: str = "gpt-4o-mini"
DEFAULT_MAX_TOKENS: int = 2000
DEFAULT_MAX_LOOPS: int = 10
DEFAULT_POLL_INTERVAL_MS: int = 100
DEFAULT_SYSTEM_PROMPT: str = (
    "You are a concise, helpful assistant. "
    "Use the provided tools to fetch facts when they are relevant."
)

# Constants served by the get_constants tool
CONSTANT_X: int = 42
CONSTANT_Y: int = 7


class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_prefix="TOOLCHAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    openai_model: str = DEFAULT_MODEL
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, gt=0)
    max_completion_tokens: int = Field(default=DEFAULT_MAX_TOKENS, gt=0)
    max_loops: int = Field(default=DEFAULT_MAX_LOOPS, gt=0)
    poll_interval_ms: int = Field(default=DEFAULT_POLL_INTERVAL_MS, gt=0)
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    keep_history: bool = False

    docs_dir: Path = Path("docs")
    log_dir: Path = Path("logs")
    log_level: str = "INFO"

    # Conventional names, no prefix
    openai_api_key: Optional[str] = Field(default=None, validation_alias="OPENAI_API_KEY")
    tavily_api_key: Optional[str] = Field(default=None, validation_alias="TAVILY_API_KEY")

    @property
    def token_limit(self) -> TokenLimit:
        """4o-family models take max_tokens; newer families take max_completion_tokens."""

        if "4o" in self.openai_model:
            return TokenLimit.MAX_TOKENS

        return TokenLimit.MAX_COMPLETION_TOKENS

    @property
    def token_limit_value(self) -> int:

        if self.token_limit is TokenLimit.MAX_TOKENS:
            return self.max_tokens

        return self.max_completion_tokens

    @property
    def poll_interval(self) -> float:
        """Poll cadence in seconds."""

        return self.poll_interval_ms / 1000.0


@lru_cache(maxsize=1)
def get_settings() -> Settings:

    return Settings()


def configure_logging(settings: Settings) -> Path:
    """
    Send log records to a daily-rotated file under `settings.log_dir`.
    Nothing goes to stdout so log lines never interleave with the terminal UI.
    Returns the log file path.
    """

    settings.log_dir.mkdir(parents=True, exist_ok=True)
    log_path = settings.log_dir / "app.log"

    handler = TimedRotatingFileHandler(log_path, when="midnight", backupCount=7, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    # The SDK's HTTP chatter is noise at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)

    return log_path
# EOF
