#!/usr/bin/env python3
"""
Configuration access for the web application.
"""

from functools import lru_cache

from core.config_loader import AppConfig, load_config


@lru_cache()
def get_config() -> AppConfig:
    """
    Get application configuration with caching.

    Loads from YAML file and applies environment variable overrides.
    Call get_config.cache_clear() to reload.

    Returns:
        AppConfig: The application configuration.
    """
    return load_config()