"""
TBURN Configuration Loader Tests
"""

import pytest
from decimal import Decimal

from tburn.config import EngineConfig, load_config
from tburn.constants import COMMITTEE_SIZE
from tburn.exceptions import ConfigurationError
from tburn.validator import TierKey


CONFIG_TOML = """
[tiers.genesis]
max_validators = 60
target_apy = "21"

[tiers.community.apy_range]
min = 10
max = 14

[emission]
base_emission_daily = 400000
burn_rate = "0.6"

[network]
total_supply = 10000000000
token_price = "0.5"

[live]
committee_size = 15

[registry]
url = "https://registry.example.org/api/validators"
timeout = 5
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("TBURN_CONFIG", "TBURN_BURN_RATE", "TBURN_COMMITTEE_SIZE",
                "TBURN_REGISTRY_URL", "TBURN_TOKEN_PRICE", "TBURN_BASE_EMISSION_DAILY"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(CONFIG_TOML)
    return path


class TestLoadConfig:
    """Test TOML loading and env overrides."""

    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_config(str(tmp_path / "missing.toml"))
        assert config.live.committee_size == COMMITTEE_SIZE
        assert config.tiers.configs[TierKey.GENESIS].max_validators == 50

    def test_sections(self, config_file):
        config = load_config(str(config_file))
        genesis = config.tiers.configs[TierKey.GENESIS]
        assert genesis.max_validators == 60
        assert genesis.target_apy == Decimal(21)
        # Unlisted values keep defaults
        assert genesis.reward_pool_share == Decimal("0.40")
        assert config.tiers.configs[TierKey.COMMUNITY].apy_range == (Decimal(10), Decimal(14))
        assert config.emission.base_emission_daily == Decimal(400_000)
        assert config.emission.burn_rate == Decimal("0.6")
        assert config.network.token_price == Decimal("0.5")
        assert config.live.committee_size == 15
        assert config.registry.url == "https://registry.example.org/api/validators"
        assert config.registry.timeout == 5.0

    def test_env_overrides_toml(self, config_file, monkeypatch):
        monkeypatch.setenv("TBURN_BURN_RATE", "0.25")
        monkeypatch.setenv("TBURN_COMMITTEE_SIZE", "7")
        monkeypatch.setenv("TBURN_REGISTRY_URL", "http://localhost:9000/validators")
        config = load_config(str(config_file))
        assert config.emission.burn_rate == Decimal("0.25")
        assert config.live.committee_size == 7
        assert config.registry.url == "http://localhost:9000/validators"

    def test_config_path_from_env(self, config_file, monkeypatch):
        monkeypatch.setenv("TBURN_CONFIG", str(config_file))
        assert load_config().live.committee_size == 15

    def test_invalid_toml(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("[emission\nburn_rate = ")
        with pytest.raises(ConfigurationError):
            load_config(str(path))

    def test_invalid_env_value(self, config_file, monkeypatch):
        monkeypatch.setenv("TBURN_COMMITTEE_SIZE", "many")
        with pytest.raises(ConfigurationError):
            load_config(str(config_file))


class TestValidation:
    """Test section validation."""

    @pytest.mark.parametrize("data", [
        {"emission": {"burn_rate": 2}},
        {"emission": {"min_multiplier": 2, "max_multiplier": 1}},
        {"network": {"total_supply": 10, "circulating_supply": 20}},
        {"live": {"committee_size": -1}},
        {"registry": {"url": "ftp://registry"}},
        {"tiers": {"genesis": {"reward_pool_share": "0.9"}}},
    ])
    def test_invalid_values(self, data):
        with pytest.raises(ConfigurationError):
            EngineConfig.from_dict(data).validate()

    def test_unknown_tier(self):
        with pytest.raises(ConfigurationError):
            EngineConfig.from_dict({"tiers": {"platinum": {}}})

    def test_non_numeric(self):
        with pytest.raises(ConfigurationError):
            EngineConfig.from_dict({"emission": {"burn_rate": "lots"}})

    def test_to_dict(self):
        data = EngineConfig().to_dict()
        assert data["live"]["committee_size"] == COMMITTEE_SIZE
        assert data["tiers"]["genesis"]["max_validators"] == 50
        assert data["emission"]["burn_rate"] == "0.70"
