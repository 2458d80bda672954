"""
TBURN Engine Configuration

Loads all sections of config.toml at startup.
Environment variables override TOML values.
"""

from .loader import (
    EngineConfig,
    TierSection,
    EmissionConfig,
    NetworkConfig,
    LiveConfig,
    RegistryConfig,
    load_config,
)

__all__ = [
    "EngineConfig",
    "TierSection",
    "EmissionConfig",
    "NetworkConfig",
    "LiveConfig",
    "RegistryConfig",
    "load_config",
]
