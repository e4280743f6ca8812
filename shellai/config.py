"""
Configuration Management for shell-ai.

Module: shellai/config.py
"""

import logging
import os
from pathlib import Path
from typing import Any, List, Optional

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = ".shellai"

DEFAULT_ENABLED_TOOLS = [
    "file-read",
    "file-write",
    "file-edit",
    "file-search",
    "shell-exec",
    "directory-list",
    "current-directory",
    "web-search",
    "memory-add",
    "memory-retrieve",
    "memory-list",
    "memory-delete",
]


class SamplingOptions(BaseModel):
    """Sampling options for one phase of the agent loop."""

    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=2000, ge=1)


class ModelConfig(BaseModel):
    """Model service configuration."""

    provider: str = Field(default="ollama", pattern="^(ollama|openai|mock)$")
    base_url: Optional[str] = None  # None uses the provider default (http://localhost:11434 for ollama)
    current_model: str = "llama3.2"
    max_tokens: int = Field(default=4096, ge=1)  # upper bound for every phase
    request_timeout: float = Field(default=120.0, gt=0)


class AgentConfig(BaseModel):
    """Limits and sampling for the autonomous task loop."""

    max_iterations: int = Field(default=10, ge=1)
    history_window: int = Field(default=3, ge=0)
    max_recovery_attempts: int = Field(default=2, ge=0)
    max_result_chars: int = Field(default=4000, ge=100)
    planning: SamplingOptions = Field(default_factory=lambda: SamplingOptions(temperature=0.3, max_tokens=2000))
    reflection: SamplingOptions = Field(default_factory=lambda: SamplingOptions(temperature=0.4, max_tokens=1500))
    recovery: SamplingOptions = Field(default_factory=lambda: SamplingOptions(temperature=0.5, max_tokens=1000))
    synthesis: SamplingOptions = Field(default_factory=lambda: SamplingOptions(temperature=0.7, max_tokens=2000))


class DisplayConfig(BaseModel):
    """Terminal display configuration."""

    show_thinking: bool = True
    show_progress: bool = True


class Config(BaseModel):
    """shell-ai configuration."""

    model: ModelConfig = Field(default_factory=ModelConfig)
    agent: AgentConfig = Field(default_factory=AgentConfig)
    enabled_tools: List[str] = Field(default_factory=lambda: list(DEFAULT_ENABLED_TOOLS))
    working_directory: Optional[str] = None
    system_prompt: Optional[str] = None
    display: DisplayConfig = Field(default_factory=DisplayConfig)


def get_config_path(config_dir: str = DEFAULT_CONFIG_DIR) -> Path:
    """Get path to the configuration file."""
    return Path(config_dir) / "config.yaml"


def get_memory_path(config_dir: str = DEFAULT_CONFIG_DIR) -> Path:
    """Get path to the file backing the memory tools."""
    return Path(config_dir) / "memory.json"


def load_config(config_dir: str = DEFAULT_CONFIG_DIR) -> Config:
    """
    Load configuration from directory.

    Args:
        config_dir: Configuration directory path

    Returns:
        Loaded configuration (defaults when the file is missing or invalid)
    """
    config_path = get_config_path(config_dir)

    if not config_path.exists():
        return Config()

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
        return Config(**data)
    except Exception as e:
        logger.warning(f"Failed to load config from {config_path}: {e}")
        return Config()


def save_config(config: Config, config_dir: str = DEFAULT_CONFIG_DIR) -> None:
    """
    Save configuration to directory.

    Args:
        config: Configuration to save
        config_dir: Configuration directory path
    """
    config_path = Path(config_dir)
    config_path.mkdir(parents=True, exist_ok=True)

    with open(get_config_path(config_dir), "w") as f:
        yaml.dump(config.model_dump(exclude_none=True), f, default_flow_style=False)


def set_config_value(config: Config, key: str, raw_value: str) -> Config:
    """
    Return a copy of config with one dotted key changed.

    The value is parsed as YAML, so ``5``, ``true`` and ``[a, b]`` become
    an int, a bool and a list.

    Args:
        config: Current configuration
        key: Dotted key such as ``agent.max_iterations``
        raw_value: Value as typed on the command line

    Returns:
        Validated new configuration

    Raises:
        KeyError: If the key does not exist
        ValueError: If the value fails validation
    """
    data = config.model_dump()
    parts = key.split(".")
    target: Any = data
    for part in parts[:-1]:
        if not isinstance(target, dict) or part not in target:
            raise KeyError(key)
        target = target[part]
    if not isinstance(target, dict) or parts[-1] not in target:
        raise KeyError(key)

    target[parts[-1]] = yaml.safe_load(raw_value)
    return Config.model_validate(data)


def apply_env_overrides(config: Config) -> Config:
    """
    Apply SHELLAI_PROVIDER, SHELLAI_MODEL and OLLAMA_ENDPOINT on top of the file.

    OPENAI_API_KEY is read by the adapter factory itself.
    """
    model = config.model.model_copy()
    if os.getenv("SHELLAI_PROVIDER"):
        model.provider = os.environ["SHELLAI_PROVIDER"].lower()
    if os.getenv("SHELLAI_MODEL"):
        model.current_model = os.environ["SHELLAI_MODEL"]
    if os.getenv("OLLAMA_ENDPOINT") and model.provider == "ollama":
        model.base_url = os.environ["OLLAMA_ENDPOINT"]
    return config.model_copy(update={"model": ModelConfig.model_validate(model.model_dump())})
