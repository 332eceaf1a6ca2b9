from stablesnap.exceptions.base import (
    InvariantViolation,
    StablesnapError,
    StablesnapValueError,
)
from stablesnap.exceptions.connection import StablesnapConnectionError, Web3ConnectionTimeout
from stablesnap.exceptions.decoding import DecodingError, MalformedReturnData, MissingReturnData
from stablesnap.exceptions.encoding import InvalidAddress, UnknownOperation
from stablesnap.exceptions.liquidity_pool import (
    LiquidityPoolError,
    PoolSnapshotError,
    PricingError,
    ReserveCountMismatch,
)
from stablesnap.exceptions.multicall import (
    ChunkExecutionFailure,
    DeadlineExceeded,
    MulticallError,
    TransportFailure,
)
from stablesnap.exceptions.registry import RegistryError

from . import connection, decoding, encoding, liquidity_pool, multicall, registry

__all__ = (
    "ChunkExecutionFailure",
    "DeadlineExceeded",
    "DecodingError",
    "InvalidAddress",
    "InvariantViolation",
    "LiquidityPoolError",
    "MalformedReturnData",
    "MissingReturnData",
    "MulticallError",
    "PoolSnapshotError",
    "PricingError",
    "RegistryError",
    "ReserveCountMismatch",
    "StablesnapConnectionError",
    "StablesnapError",
    "StablesnapValueError",
    "TransportFailure",
    "UnknownOperation",
    "Web3ConnectionTimeout",
    "connection",
    "decoding",
    "encoding",
    "liquidity_pool",
    "multicall",
    "registry",
)
