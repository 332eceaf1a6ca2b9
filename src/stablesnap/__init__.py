from .checksum_cache import get_checksum_address
from .config import settings
from .connection import get_async_web3_from_config
from .version import __version__

# isort: split

from .logging import logger
from .multicall import ChunkFailurePolicy, MulticallExecutor
from .registry import PoolRegistry, StableswapPool, TokenInfo, load_registry, parse_registry
from .stableswap import (
    SNAPSHOT_SCHEMA_V1,
    SnapshotFetchResult,
    StableswapPoolSnapshot,
    calculate_estimated_swap_output,
    calculate_swap_price,
    encode_pool_calls,
    fetch_pool_snapshots,
)

from . import cli, exceptions, multicall, registry, stableswap

__all__ = (
    "SNAPSHOT_SCHEMA_V1",
    "ChunkFailurePolicy",
    "MulticallExecutor",
    "PoolRegistry",
    "SnapshotFetchResult",
    "StableswapPool",
    "StableswapPoolSnapshot",
    "TokenInfo",
    "__version__",
    "calculate_estimated_swap_output",
    "calculate_swap_price",
    "cli",
    "encode_pool_calls",
    "exceptions",
    "fetch_pool_snapshots",
    "get_async_web3_from_config",
    "get_checksum_address",
    "load_registry",
    "logger",
    "multicall",
    "parse_registry",
    "registry",
    "settings",
    "stableswap",
)
