"""Unified configuration loader.

A single configuration file (tasksched_config.yaml) holds the scheduler and
Gantt settings. Every section is optional.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from .scheduler.config import GanttConfig, SchedulingConfig

CONFIG_FILE_NAME = "tasksched_config.yaml"


class UnifiedConfig(BaseModel):
    """Unified configuration for scheduling and projection."""

    scheduler: SchedulingConfig = Field(default_factory=SchedulingConfig)
    gantt: GanttConfig = Field(default_factory=GanttConfig)


def load_unified_config(config_path: Path | str) -> UnifiedConfig:
    """Load unified configuration from YAML file.

    Args:
        config_path: Path to tasksched_config.yaml file

    Returns:
        UnifiedConfig with defaults for omitted sections

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open(encoding="utf-8") as f:
        data: Any = yaml.safe_load(f)

    if not data:
        raise ValueError("Empty configuration file")

    if not isinstance(data, dict):
        raise ValueError("Configuration must be a mapping at the root level")

    unknown = set(data) - set(UnifiedConfig.model_fields)  # type: ignore[arg-type]
    if unknown:
        raise ValueError(f"Unknown configuration sections: {', '.join(sorted(unknown))}")

    try:
        return UnifiedConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ValueError(f"Invalid configuration in {config_path}: {e}") from e
