# backend/quizboard/core/config.py

import math
import os
from pathlib import Path
from typing import Mapping, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError

from .errors import ConfigError

DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_MODEL = "llama-3.3-70b-versatile"
PROMPTS_DIR = Path(__file__).resolve().parent.parent / "agents"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseModel):
    """Process-wide configuration, built once at startup and never mutated."""

    model_config = ConfigDict(frozen=True)

    api_key: SecretStr
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    timeout: float = Field(default=60.0, gt=0)
    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=0, le=65535)
    log_level: str = "DEBUG"
    cors_origins: Tuple[str, ...] = ("*",)
    prompts_dir: Path = PROMPTS_DIR

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        """Read settings from `env` (defaults to os.environ after loading .env)."""
        if env is None:
            load_dotenv()
            env = os.environ

        api_key = env.get("GROQ_API_KEY", "").strip()
        if not api_key:
            raise ConfigError("Missing GROQ_API_KEY in environment")

        try:
            timeout = float(env.get("UPSTREAM_TIMEOUT", "60"))
            port = int(env.get("PORT", "3000"))
        except ValueError as e:
            raise ConfigError(f"Invalid numeric setting: {e}") from e
        if not math.isfinite(timeout) or timeout <= 0:
            raise ConfigError("UPSTREAM_TIMEOUT must be a positive number")
        if not 0 <= port <= 65535:
            raise ConfigError(f"PORT out of range: {port}")

        log_level = env.get("LOG_LEVEL", "DEBUG").upper()
        if log_level not in LOG_LEVELS:
            raise ConfigError(f"Unknown LOG_LEVEL: {log_level}")

        origins = tuple(
            o.strip() for o in env.get("CORS_ORIGINS", "*").split(",") if o.strip()
        )

        try:
            return cls(
                api_key=api_key,
                base_url=env.get("GROQ_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
                model=env.get("GROQ_MODEL", DEFAULT_MODEL),
                timeout=timeout,
                host=env.get("HOST", "0.0.0.0"),
                port=port,
                log_level=log_level,
                cors_origins=origins or ("*",),
                prompts_dir=Path(env["PROMPTS_DIR"]) if env.get("PROMPTS_DIR") else PROMPTS_DIR,
            )
        except ValidationError as e:
            raise ConfigError(f"Invalid settings: {e}") from e
