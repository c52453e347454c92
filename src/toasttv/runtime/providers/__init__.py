"""
Runtime configuration stores.

Provides implementations of RuntimeConfigStore for loading runtime
configuration from a JSON file or keeping it in memory.
"""

from .file_config_provider import InMemoryRuntimeConfigStore, JsonRuntimeConfigStore

__all__ = [
    "JsonRuntimeConfigStore",
    "InMemoryRuntimeConfigStore",
]
