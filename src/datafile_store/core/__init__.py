"""Core data file store: entity, repository, storage and selection."""

from __future__ import annotations

from .config import (
    ConfigurationError,
    EnvironmentVariableError,
    InvalidConfigurationError,
    MainConfig,
    StoreConfig,
    load_main_config,
)
from .datafile import INCOMPLETE_FILE_APPENDIX, INCOMPLETE_FILE_SUFFIX, DataFile
from .metadata_cache import MetadataCache
from .repository import DataFileRepository
from .storage import capture_storage_information

__all__ = [
    "INCOMPLETE_FILE_APPENDIX",
    "INCOMPLETE_FILE_SUFFIX",
    "ConfigurationError",
    "DataFile",
    "DataFileRepository",
    "EnvironmentVariableError",
    "InvalidConfigurationError",
    "MainConfig",
    "MetadataCache",
    "StoreConfig",
    "capture_storage_information",
    "load_main_config",
]
