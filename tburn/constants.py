"""
TBURN Engine Constants

This module consolidates the protocol constants used by the ranking and
tokenomics engine together with the environment-driven logger settings.
Constants are organized by category for easy reference and maintenance.
"""
import ast
import re
from decimal import Decimal
from dotenv import dotenv_values

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================
# Load environment variables once at module import
_config = dotenv_values(".env")

ENGINE_DEFAULTS = {
    'TBURN_CONFIG_PATH':               'config.toml',
    'TBURN_REGISTRY_URL':              'http://127.0.0.1:5000/api/validators',
}

LOGGER_DEFAULTS = {
    'LOG_LEVEL':                       'INFO',
    'LOG_FORMAT':                      '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    'LOG_DATE_FORMAT':                 '%Y-%m-%dT%H:%M:%S',
    'LOG_CONSOLE_HIGHLIGHTING':        'True',
    'LOG_FILE_OUTPUT':                 'False',
    'LOG_INCLUDE_RESPONSE_CONTENT':    'False',
}

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024 # 10MB
LOG_MAX_PATH_LENGTH = 320  # Maximum URL length to log (truncates longer URLs)
LOG_BACKUP_COUNT = 5


# ==================================================================================
# TOKEN UNITS
# ==================================================================================
ENGINE_VERSION = '1.0.0'
TOKEN_SYMBOL = 'TBURN'
DECIMALS = 18
WEI_PER_TOKEN = 10 ** DECIMALS  # Base units per whole token
DISPLAY_PRECISION = 2  # Default decimals for display strings

# Scaled percentage fields (commission, apy, uptime, scores) are stored x100
PERCENT_SCALE = 100
FRACTION_SCALE = 10_000


# ==================================================================================
# RANKING AND COMMITTEE
# ==================================================================================
COMMITTEE_SIZE = 21  # Top-N validators by voting power form the committee


# ==================================================================================
# TIER THRESHOLDS (direct stake, whole tokens)
# ==================================================================================
GENESIS_TIER_MIN_STAKE = 1_000_000
PIONEER_TIER_MIN_STAKE = 500_000
STANDARD_TIER_MIN_STAKE = 200_000
COMMUNITY_TIER_MIN_STAKE = 100_000  # Registration minimum, not a classification bound


# ==================================================================================
# MONETARY POLICY PARAMETERS
# ==================================================================================
GENESIS_SUPPLY = Decimal(10_000_000_000)     # 10B TBURN
CIRCULATING_SUPPLY = Decimal(7_000_000_000)  # 7B TBURN
TARGET_STAKED_SUPPLY = Decimal(3_200_000_000)

BASE_EMISSION_DAILY = Decimal(500_000)
BURN_RATE = Decimal("0.70")  # Share of fees burned
TARGET_STAKE_RATIO = Decimal("0.32")
MAX_EMISSION_MULTIPLIER = Decimal("1.15")
MIN_EMISSION_MULTIPLIER = Decimal("0.85")
ANNUAL_INFLATION_RATE = Decimal("-0.0153")  # Net deflation target

HALVING_PERIOD_YEARS = 4
MAX_HALVING_EPOCHS = 5  # 100%, 50%, 25%, 12.5%, 6.25% over 20 years

DAYS_PER_YEAR = 365
DAYS_PER_MONTH = 30

# Byzantine threshold used for attack cost estimates
ATTACK_STAKE_FRACTION = Decimal("0.33")
SECURITY_TARGET_VALIDATORS = 125
SECURITY_DECENTRALIZED_VALIDATORS = 100


# ==================================================================================
# LIVE UPDATES
# ==================================================================================
MAX_ACTIVITY_LOG_SIZE = 500  # Voting activity entries kept by the reducer


# ==================================================================================
# VALIDATION PATTERNS
# ==================================================================================
# 20-byte identifiers rendered as 0x-prefixed hex
VALID_ADDRESS_PATTERN = re.compile(r'^0x[0-9a-fA-F]{40}$')
VALID_DECIMAL_PATTERN = re.compile(r'^[0-9]+$')
VALID_HEX_AMOUNT_PATTERN = re.compile(r'^0x[0-9a-fA-F]+$')


# ==================================================================================
# CONFIGURATION WRAPPERS
# ==================================================================================
class ConfigString(str):
    """
    String subclass that stores a default value.
    """
    def __new__(cls, value, default):
        obj = str.__new__(cls, value)
        obj._default = default
        return obj

    def default(self):
        return self._default

class ConfigBool(int):
    """
    Int subclass acting as a boolean that stores a default value.
    """
    def __new__(cls, value, default):
        obj = int.__new__(cls, bool(value))
        obj._default = default
        return obj

    def default(self):
        return self._default

    def __repr__(self):
        return str(bool(self))

    def __str__(self):
        return str(bool(self))

    def __eq__(self, other):
        return bool(self) == other

    __hash__ = int.__hash__


# ==================================================================================
# DYNAMIC CONFIGURATION LOADING
# ==================================================================================
DEFAULTS = ENGINE_DEFAULTS | LOGGER_DEFAULTS
namespace = globals()

def parse_bool(v):
    """
    Convert "True"/"False" (any casing, with surrounding whitespace) into bool.
    Avoids exceptions by only calling ast.literal_eval for known literals.
    """
    if not isinstance(v, str):
        return v
    s = v.strip()
    if not s:
        return v
    if s.casefold() in {"true", "false"}:
        return ast.literal_eval(s.title())
    return v

for key, default_raw in DEFAULTS.items():
    # dotenv_values returns strings or None. None is treated as missing.
    raw = _config.get(key)
    value_raw = default_raw if raw is None else raw

    value = parse_bool(value_raw)
    default_val = parse_bool(default_raw)

    if isinstance(value, bool):
        namespace[key] = ConfigBool(value, default_val)
    else:
        namespace[key] = ConfigString(value_raw, default_val)
