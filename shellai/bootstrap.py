"""
Wiring of configuration, model adapter, tools and orchestrator.

Module: shellai/bootstrap.py
"""

import logging
from pathlib import Path
from typing import Optional

from adapters.llm import LLMAdapter, create_adapter

from .agent.model_service import ModelService
from .agent.notifications import NotificationSink
from .agent.orchestrator import TaskOrchestrator
from .config import Config
from .tools import MemoryStore, create_default_registry

logger = logging.getLogger(__name__)


def build_adapter(config: Config) -> LLMAdapter:
    """Create the model adapter named by the configuration."""
    return create_adapter(
        provider=config.model.provider,
        model=config.model.current_model,
        base_url=config.model.base_url,
    )


def build_orchestrator(
    config: Config,
    sink: Optional[NotificationSink] = None,
    adapter: Optional[LLMAdapter] = None,
    memory_path: Optional[Path] = None,
) -> TaskOrchestrator:
    """
    Build a ready-to-use orchestrator.

    Args:
        config: Loaded configuration
        sink: Notification sink for the caller
        adapter: Pre-built adapter (default: from config)
        memory_path: JSON file backing the memory tools (default: not persisted)

    Returns:
        Configured TaskOrchestrator
    """
    adapter = adapter or build_adapter(config)
    model_service = ModelService(
        adapter,
        request_timeout=config.model.request_timeout,
        system_prompt=config.system_prompt,
        max_tokens=config.model.max_tokens,
    )
    registry = create_default_registry(
        config.enabled_tools, config.working_directory, memory_store=MemoryStore(memory_path)
    )
    logger.info(f"Built orchestrator with {adapter.provider}/{adapter.model} and tools {registry.names()}")
    return TaskOrchestrator(model_service, registry, sink=sink, config=config.agent)
