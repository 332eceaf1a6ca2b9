from .decoder import decode_result, decode_results
from .encoder import CallDescriptor, encode_call, encode_pool_calls
from .operations import OPERATIONS, ContractKind, ContractOperation, get_operation
from .pipeline import PoolFetchFailure, SnapshotFetchResult, fetch_pool_snapshots
from .pricing import calculate_estimated_swap_output, calculate_swap_price
from .reassembler import assemble_snapshot, assemble_snapshots
from .schema import SNAPSHOT_SCHEMA_V1, SnapshotField, SnapshotSchema
from .types import StableswapFees, StableswapPoolSnapshot, SwapOutput

__all__ = (
    "OPERATIONS",
    "SNAPSHOT_SCHEMA_V1",
    "CallDescriptor",
    "ContractKind",
    "ContractOperation",
    "PoolFetchFailure",
    "SnapshotFetchResult",
    "SnapshotField",
    "SnapshotSchema",
    "StableswapFees",
    "StableswapPoolSnapshot",
    "SwapOutput",
    "assemble_snapshot",
    "assemble_snapshots",
    "calculate_estimated_swap_output",
    "calculate_swap_price",
    "decode_result",
    "decode_results",
    "encode_call",
    "encode_pool_calls",
    "fetch_pool_snapshots",
    "get_operation",
)
