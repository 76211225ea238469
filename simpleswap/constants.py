"""
SimpleSwap Constants

Protocol constants plus the handful of settings that may be overridden from
a local ``.env`` file. Values read from ``.env`` are parsed once at import.
"""
from dotenv import dotenv_values

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================
_env = dotenv_values(".env")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def env_str(key: str, default: str) -> str:
    value = _env.get(key)
    if value is None or not value.strip():
        return default
    return value.strip()


def env_bool(key: str, default: bool) -> bool:
    """Read a yes/no flag; anything unrecognised keeps *default*."""
    value = env_str(key, "").casefold()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    return default


def env_int(key: str, default: int) -> int:
    value = env_str(key, "")
    return int(value) if value.lstrip("-").isdigit() else default


# -- logging ------------------------------------------------------------------
DEFAULT_LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'
DEFAULT_LOG_DATE_FORMAT = '%Y-%m-%dT%H:%M:%S'

LOG_LEVEL = env_str('LOG_LEVEL', 'INFO').upper()
LOG_FORMAT = env_str('LOG_FORMAT', DEFAULT_LOG_FORMAT)
LOG_DATE_FORMAT = env_str('LOG_DATE_FORMAT', DEFAULT_LOG_DATE_FORMAT)
LOG_CONSOLE_HIGHLIGHTING = env_bool('LOG_CONSOLE_HIGHLIGHTING', True)
LOG_FILE_OUTPUT = env_bool('LOG_FILE_OUTPUT', False)

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024 # 10MB
LOG_BACKUP_COUNT = 5


# ==================================================================================
# PRICING CONSTANTS
# ==================================================================================
# WARNING: changing the fee constants changes every quote the engine produces.
# 0.3% of every input is retained by the pool.
FEE_NUMERATOR = 997
FEE_DENOMINATOR = 1000

# Fixed-point unit for prices: one whole unit of an 18-decimal asset.
PRICE_DECIMALS = 18
PRICE_SCALE = 10 ** PRICE_DECIMALS

# A swap path names exactly the input and the output asset.
SWAP_PATH_LENGTH = 2


# ==================================================================================
# ADDRESSES
# ==================================================================================
ZERO_ADDRESS = '0x0000000000000000000000000000000000000000'
ADDRESS_SIZE = 20  # bytes


# ==================================================================================
# ENGINE DEFAULTS
# ==================================================================================
# Account that holds every pool's reserves.
DEFAULT_CUSTODY_ADDRESS = env_str(
    'SIMPLESWAP_CUSTODY_ADDRESS', '0x5117e9a5a9e0a4c1a1f5e6d1e5c0f0da2a0c0de1'
)
DEFAULT_PRICE_DECIMALS = env_int('SIMPLESWAP_PRICE_DECIMALS', PRICE_DECIMALS)
