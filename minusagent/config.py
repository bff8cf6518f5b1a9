"""
Runtime configuration.

Values come from a JSON file (MINUSAGENT_CONFIG, else ~/.minusagent/config.json) when one
exists, otherwise from environment variables. A `.env` file in the working directory is
loaded first, so either source can be kept there.

    {
      "agent": {"max_iterations": 10, "default_llm": "codestral-2508"},
      "llm": [{"model": "codestral-2508", "base_url": "...", "api_key": "..."}]
    }
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from minusagent.errors import ConfigError
from minusagent.logging_config import setup_logger

logger = setup_logger(__name__)

DEFAULT_BASE_URL = "https://codestral.mistral.ai/v1/chat/completions"
DEFAULT_MODEL = "codestral-2508"
DEFAULT_MAX_TOKENS = 4096
DEFAULT_MAX_ITERATIONS = 10
CONFIG_DIR = Path.home() / ".minusagent"


class AgentConfig(BaseModel):
    max_iterations: int = Field(default=DEFAULT_MAX_ITERATIONS, ge=1)
    default_llm: Optional[str] = None


class LLMConfig(BaseModel):
    model: str
    base_url: str = DEFAULT_BASE_URL
    api_key: str
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, ge=1)


class Config(BaseModel):
    agent: AgentConfig = Field(default_factory=AgentConfig)
    llm: List[LLMConfig] = Field(default_factory=list)

    def get_llm(self, model: Optional[str] = None) -> LLMConfig:
        if not self.llm:
            raise ConfigError("No LLM configured")
        name = model or self.agent.default_llm
        if name is None:
            return self.llm[0]
        for entry in self.llm:
            if entry.model == name:
                return entry
        raise ConfigError(f"Unknown model {name!r}; configured: {', '.join(e.model for e in self.llm)}")


def config_path() -> Path:
    return Path(os.getenv("MINUSAGENT_CONFIG", str(CONFIG_DIR / "config.json"))).expanduser()


def skills_dir() -> Path:
    return Path(os.getenv("MINUSAGENT_SKILLS_DIR", str(CONFIG_DIR / "skills"))).expanduser()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")


def from_file(path: Path) -> Config:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e


def from_env(model: Optional[str] = None) -> Config:
    """Single-model config from LLM_* variables; `model` overrides LLM_MODEL."""
    api_key = os.getenv("LLM_API_KEY", "").strip()
    if not api_key:
        raise ConfigError("LLM_API_KEY is not set (and no config file was found)")
    model = model or os.getenv("LLM_MODEL", DEFAULT_MODEL)
    try:
        return Config(
            agent=AgentConfig(
                max_iterations=_int_env("MINUSAGENT_MAX_ITERATIONS", DEFAULT_MAX_ITERATIONS),
                default_llm=model,
            ),
            llm=[
                LLMConfig(
                    model=model,
                    base_url=os.getenv("LLM_BASE_URL", DEFAULT_BASE_URL),
                    api_key=api_key,
                    max_tokens=_int_env("LLM_MAX_TOKENS", DEFAULT_MAX_TOKENS),
                )
            ],
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid environment configuration: {e}") from e


def load_config(model: Optional[str] = None) -> Config:
    load_dotenv()
    path = config_path()
    if path.is_file():
        logger.info(f"Loading configuration from {path}")
        return from_file(path)
    logger.info("No config file found; using environment variables")
    return from_env(model)
