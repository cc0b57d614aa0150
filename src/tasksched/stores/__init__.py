"""Task Store implementations."""

from .memory import InMemoryTaskStore
from .yaml_file import YamlFileTaskStore

__all__ = ["InMemoryTaskStore", "YamlFileTaskStore"]
