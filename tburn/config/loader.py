"""
TBURN TOML Configuration Loader

Loads every section of config.toml once at startup and applies environment
variable overrides. Each section is a dataclass with from_dict / apply_env /
to_dict.

Environment variable mapping:
    [emission] base_emission_daily  → TBURN_BASE_EMISSION_DAILY
    [emission] burn_rate            → TBURN_BURN_RATE
    [network] total_supply          → TBURN_TOTAL_SUPPLY
    [network] token_price           → TBURN_TOKEN_PRICE
    [live] committee_size           → TBURN_COMMITTEE_SIZE
    [registry] url                  → TBURN_REGISTRY_URL
    ...
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import tomllib as tomli  # Python 3.11+
except ImportError:
    import tomli  # type: ignore[no-redef]

from ..constants import (
    ANNUAL_INFLATION_RATE,
    BASE_EMISSION_DAILY,
    BURN_RATE,
    CIRCULATING_SUPPLY,
    COMMITTEE_SIZE,
    GENESIS_SUPPLY,
    HALVING_PERIOD_YEARS,
    MAX_ACTIVITY_LOG_SIZE,
    MAX_EMISSION_MULTIPLIER,
    MAX_HALVING_EPOCHS,
    MIN_EMISSION_MULTIPLIER,
    TARGET_STAKE_RATIO,
    TBURN_CONFIG_PATH,
    TBURN_REGISTRY_URL,
)
from ..exceptions import ConfigurationError
from ..logger import get_logger
from ..validator.tiers import DEFAULT_TIER_CONFIGS, TierConfig, TierKey

logger = get_logger(__name__)


def _decimal(value: Any, name: str) -> Decimal:
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from None
    if not result.is_finite():
        raise ConfigurationError(f"{name} must be finite, got {value!r}")
    return result


def _env_decimal(var: str) -> Optional[Decimal]:
    if v := os.environ.get(var):
        return _decimal(v, var)
    return None


def _env_int(var: str) -> Optional[int]:
    if v := os.environ.get(var):
        try:
            return int(v)
        except ValueError:
            raise ConfigurationError(f"{var} must be an integer, got {v!r}") from None
    return None


# ---------------------------------------------------------------------------
# Section dataclasses
# ---------------------------------------------------------------------------


@dataclass
class TierSection:
    """[tiers.<name>] tables."""
    configs: Dict[TierKey, TierConfig] = field(default_factory=lambda: dict(DEFAULT_TIER_CONFIGS))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TierSection":
        configs = dict(DEFAULT_TIER_CONFIGS)
        for name, section in data.items():
            try:
                key = TierKey(name)
            except ValueError:
                raise ConfigurationError(f"Unknown tier in [tiers.{name}]") from None
            try:
                configs[key] = TierConfig.from_dict(key, section)
            except (ValueError, ArithmeticError, TypeError) as e:
                raise ConfigurationError(f"Invalid [tiers.{name}] section: {e}") from None
        return cls(configs=configs)

    def validate(self) -> None:
        total_share = sum(c.reward_pool_share for c in self.configs.values())
        if total_share > 1:
            raise ConfigurationError(f"Tier reward_pool_share values sum to {total_share}, exceeding 1")
        for config in self.configs.values():
            if config.max_validators < 0:
                raise ConfigurationError(f"{config.tier.value}: max_validators must be >= 0")
            low, high = config.apy_range
            if low > high:
                raise ConfigurationError(f"{config.tier.value}: apy_range min exceeds max")

    def to_dict(self) -> Dict[str, Any]:
        return {tier.value: config.to_dict() for tier, config in self.configs.items()}


@dataclass
class EmissionConfig:
    """[emission] section."""
    base_emission_daily: Decimal = BASE_EMISSION_DAILY
    burn_rate: Decimal = BURN_RATE
    target_stake_ratio: Decimal = TARGET_STAKE_RATIO
    min_multiplier: Decimal = MIN_EMISSION_MULTIPLIER
    max_multiplier: Decimal = MAX_EMISSION_MULTIPLIER
    halving_period_years: int = HALVING_PERIOD_YEARS
    max_epochs: int = MAX_HALVING_EPOCHS

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EmissionConfig":
        return cls(
            base_emission_daily=_decimal(data.get("base_emission_daily", BASE_EMISSION_DAILY), "base_emission_daily"),
            burn_rate=_decimal(data.get("burn_rate", BURN_RATE), "burn_rate"),
            target_stake_ratio=_decimal(data.get("target_stake_ratio", TARGET_STAKE_RATIO), "target_stake_ratio"),
            min_multiplier=_decimal(data.get("min_multiplier", MIN_EMISSION_MULTIPLIER), "min_multiplier"),
            max_multiplier=_decimal(data.get("max_multiplier", MAX_EMISSION_MULTIPLIER), "max_multiplier"),
            halving_period_years=int(data.get("halving_period_years", HALVING_PERIOD_YEARS)),
            max_epochs=int(data.get("max_epochs", MAX_HALVING_EPOCHS)),
        )

    def apply_env(self) -> None:
        if (v := _env_decimal("TBURN_BASE_EMISSION_DAILY")) is not None:
            self.base_emission_daily = v
        if (v := _env_decimal("TBURN_BURN_RATE")) is not None:
            self.burn_rate = v
        if (v := _env_decimal("TBURN_TARGET_STAKE_RATIO")) is not None:
            self.target_stake_ratio = v

    def validate(self) -> None:
        if self.base_emission_daily < 0:
            raise ConfigurationError("base_emission_daily must be >= 0")
        if not 0 <= self.burn_rate <= 1:
            raise ConfigurationError("burn_rate must be within [0, 1]")
        if self.target_stake_ratio < 0:
            raise ConfigurationError("target_stake_ratio must be >= 0")
        if self.min_multiplier > self.max_multiplier:
            raise ConfigurationError("min_multiplier exceeds max_multiplier")
        if self.halving_period_years < 1:
            raise ConfigurationError("halving_period_years must be >= 1")
        if self.max_epochs < 1:
            raise ConfigurationError("max_epochs must be >= 1")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_emission_daily": str(self.base_emission_daily),
            "burn_rate": str(self.burn_rate),
            "target_stake_ratio": str(self.target_stake_ratio),
            "min_multiplier": str(self.min_multiplier),
            "max_multiplier": str(self.max_multiplier),
            "halving_period_years": self.halving_period_years,
            "max_epochs": self.max_epochs,
        }


@dataclass
class NetworkConfig:
    """[network] section. Supply figures are in whole tokens."""
    total_supply: Decimal = GENESIS_SUPPLY
    circulating_supply: Decimal = CIRCULATING_SUPPLY
    annual_inflation_rate: Decimal = ANNUAL_INFLATION_RATE
    token_price: Decimal = Decimal("0")
    daily_fees: Decimal = Decimal("0")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NetworkConfig":
        return cls(
            total_supply=_decimal(data.get("total_supply", GENESIS_SUPPLY), "total_supply"),
            circulating_supply=_decimal(data.get("circulating_supply", CIRCULATING_SUPPLY), "circulating_supply"),
            annual_inflation_rate=_decimal(
                data.get("annual_inflation_rate", ANNUAL_INFLATION_RATE), "annual_inflation_rate"
            ),
            token_price=_decimal(data.get("token_price", 0), "token_price"),
            daily_fees=_decimal(data.get("daily_fees", 0), "daily_fees"),
        )

    def apply_env(self) -> None:
        if (v := _env_decimal("TBURN_TOTAL_SUPPLY")) is not None:
            self.total_supply = v
        if (v := _env_decimal("TBURN_CIRCULATING_SUPPLY")) is not None:
            self.circulating_supply = v
        if (v := _env_decimal("TBURN_TOKEN_PRICE")) is not None:
            self.token_price = v

    def validate(self) -> None:
        if self.total_supply < 0 or self.circulating_supply < 0:
            raise ConfigurationError("supply figures must be >= 0")
        if self.circulating_supply > self.total_supply:
            raise ConfigurationError("circulating_supply exceeds total_supply")
        if self.token_price < 0 or self.daily_fees < 0:
            raise ConfigurationError("token_price and daily_fees must be >= 0")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_supply": str(self.total_supply),
            "circulating_supply": str(self.circulating_supply),
            "annual_inflation_rate": str(self.annual_inflation_rate),
            "token_price": str(self.token_price),
            "daily_fees": str(self.daily_fees),
        }


@dataclass
class LiveConfig:
    """[live] section."""
    committee_size: int = COMMITTEE_SIZE
    activity_log_size: int = MAX_ACTIVITY_LOG_SIZE

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LiveConfig":
        return cls(
            committee_size=int(data.get("committee_size", COMMITTEE_SIZE)),
            activity_log_size=int(data.get("activity_log_size", MAX_ACTIVITY_LOG_SIZE)),
        )

    def apply_env(self) -> None:
        if (v := _env_int("TBURN_COMMITTEE_SIZE")) is not None:
            self.committee_size = v
        if (v := _env_int("TBURN_ACTIVITY_LOG_SIZE")) is not None:
            self.activity_log_size = v

    def validate(self) -> None:
        if self.committee_size < 0:
            raise ConfigurationError("committee_size must be >= 0")
        if self.activity_log_size < 1:
            raise ConfigurationError("activity_log_size must be >= 1")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "committee_size": self.committee_size,
            "activity_log_size": self.activity_log_size,
        }


@dataclass
class RegistryConfig:
    """[registry] section."""
    url: str = str(TBURN_REGISTRY_URL)
    timeout: float = 10.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RegistryConfig":
        return cls(
            url=data.get("url", str(TBURN_REGISTRY_URL)),
            timeout=float(data.get("timeout", 10.0)),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("TBURN_REGISTRY_URL"):
            self.url = v
        if v := os.environ.get("TBURN_REGISTRY_TIMEOUT"):
            try:
                self.timeout = float(v)
            except ValueError:
                raise ConfigurationError(f"TBURN_REGISTRY_TIMEOUT must be a number, got {v!r}") from None

    def validate(self) -> None:
        if not self.url.startswith(("http://", "https://")):
            raise ConfigurationError(f"Registry url must be http(s): {self.url!r}")
        if self.timeout <= 0:
            raise ConfigurationError("Registry timeout must be > 0")

    def to_dict(self) -> Dict[str, Any]:
        return {"url": self.url, "timeout": self.timeout}


# ---------------------------------------------------------------------------
# Engine configuration
# ---------------------------------------------------------------------------


@dataclass
class EngineConfig:
    """
    Unified engine configuration.

    Loaded once; environment variables override TOML values.
    """
    tiers: TierSection = field(default_factory=TierSection)
    emission: EmissionConfig = field(default_factory=EmissionConfig)
    network: NetworkConfig = field(default_factory=NetworkConfig)
    live: LiveConfig = field(default_factory=LiveConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        """Create EngineConfig from a parsed TOML dict."""
        try:
            return cls(
                tiers=TierSection.from_dict(data.get("tiers", {})),
                emission=EmissionConfig.from_dict(data.get("emission", {})),
                network=NetworkConfig.from_dict(data.get("network", {})),
                live=LiveConfig.from_dict(data.get("live", {})),
                registry=RegistryConfig.from_dict(data.get("registry", {})),
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration value: {e}") from None

    @classmethod
    def from_file(cls, config_path: str) -> "EngineConfig":
        """
        Load configuration from a TOML file.

        A missing file yields the defaults (with env overrides).

        Raises:
            ConfigurationError: unreadable TOML or invalid values
        """
        path = Path(config_path)
        if not path.exists():
            logger.warning(f"Config file not found: {config_path}, using defaults")
            cfg = cls()
            cfg.apply_env()
            return cfg

        try:
            with open(path, "rb") as f:
                raw = tomli.load(f)
        except tomli.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML in {config_path}: {e}") from None

        cfg = cls.from_dict(raw)
        cfg.apply_env()
        logger.debug(f"Loaded configuration from {config_path}")
        return cfg

    def apply_env(self) -> None:
        """Apply environment variable overrides to all sections."""
        self.emission.apply_env()
        self.network.apply_env()
        self.live.apply_env()
        self.registry.apply_env()

    def validate(self) -> bool:
        """
        Validate all configuration sections.

        Raises:
            ConfigurationError: on invalid config
        """
        self.tiers.validate()
        self.emission.validate()
        self.network.validate()
        self.live.validate()
        self.registry.validate()
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict (for diagnostics, NOT for re-creating TOML)."""
        return {
            "tiers": self.tiers.to_dict(),
            "emission": self.emission.to_dict(),
            "network": self.network.to_dict(),
            "live": self.live.to_dict(),
            "registry": self.registry.to_dict(),
        }


# -----------------------------------------------------------------------
# Convenience function
# -----------------------------------------------------------------------

def load_config(path: Optional[str] = None) -> EngineConfig:
    """
    Load and validate engine configuration.

    Resolution order:
        1. Explicit *path* argument
        2. TBURN_CONFIG env var
        3. TBURN_CONFIG_PATH from .env (default ./config.toml)
        4. Defaults (with env overrides)
    """
    if path is None:
        path = os.environ.get("TBURN_CONFIG", str(TBURN_CONFIG_PATH))

    cfg = EngineConfig.from_file(path)
    cfg.validate()
    return cfg
