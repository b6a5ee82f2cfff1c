"""Application configuration helpers."""

from __future__ import annotations

from .anthropic import AnthropicConfig, get_anthropic_config
from .env import env_list, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .gbif import GbifConfig, get_gbif_config
from .http_resilience import (
    CacheConfig,
    RateLimit,
    ResilienceConfig,
    RetryPolicy,
    payload_without_error,
)
from .pipeline import BatchConfig, RegistryConfig, get_registry_config, get_rules_dir
from .serpapi import SerpApiConfig, get_serpapi_config
from .storage import (
    DatabaseConfig,
    OutputConfig,
    SourceDirectories,
    StorageConfig,
    get_database_config,
    get_output_config,
    get_source_directories,
    get_storage_config,
)

__all__ = [
    "AnthropicConfig",
    "BatchConfig",
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "GbifConfig",
    "MissingConfigurationError",
    "OutputConfig",
    "RateLimit",
    "RegistryConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "SerpApiConfig",
    "SourceDirectories",
    "StorageConfig",
    "env_list",
    "get_anthropic_config",
    "get_database_config",
    "get_gbif_config",
    "get_output_config",
    "get_registry_config",
    "get_rules_dir",
    "get_serpapi_config",
    "get_source_directories",
    "get_storage_config",
    "optional_env_var",
    "payload_without_error",
    "require_env_vars",
]
