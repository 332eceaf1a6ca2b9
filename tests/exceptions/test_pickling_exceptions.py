import pickle

import pytest

from stablesnap.exceptions import (
    ChunkExecutionFailure,
    DeadlineExceeded,
    InvalidAddress,
    InvariantViolation,
    MalformedReturnData,
    MissingReturnData,
    PoolSnapshotError,
    PricingError,
    RegistryError,
    ReserveCountMismatch,
    TransportFailure,
    UnknownOperation,
    Web3ConnectionTimeout,
)


@pytest.mark.parametrize(
    ("exception", "attributes"),
    [
        (InvariantViolation("5 results for 4 calls"), {"detail": "5 results for 4 calls"}),
        (InvalidAddress("0x1234"), {"address": "0x1234"}),
        (UnknownOperation("getVirtualPrice"), {"operation": "getVirtualPrice"}),
        (TransportFailure("connection reset"), {"error": "connection reset"}),
        (
            ChunkExecutionFailure(chunk_index=1, start=7, end=14, reason="reverted"),
            {"chunk_index": 1, "start": 7, "end": 14, "reason": "reverted"},
        ),
        (DeadlineExceeded(2.5), {"deadline": 2.5}),
        (MissingReturnData("getA"), {"operation": "getA"}),
        (
            MalformedReturnData("getBalances", "insufficient data"),
            {"operation": "getBalances", "error": "insufficient data"},
        ),
        (
            ReserveCountMismatch(pool="cUSD/USDC", expected=2, actual=3),
            {"pool": "cUSD/USDC", "expected": 2, "actual": 3},
        ),
        (
            PoolSnapshotError(stage="decoding", pools=["a", "b"], reason="missing"),
            {"stage": "decoding", "pools": ("a", "b"), "reason": "missing"},
        ),
        (PricingError(message="D calculation did not converge."), {}),
        (RegistryError(message="Registry is not valid TOML"), {}),
        (Web3ConnectionTimeout(10), {"timeout_seconds": 10}),
    ],
)
def test_exception_pickling(exception: Exception, attributes: dict):
    """
    Test that exceptions carrying extra attributes survive a pickle round trip with their type,
    message and attributes intact.
    """

    unpickled_exception = pickle.loads(pickle.dumps(exception))

    assert type(unpickled_exception) is type(exception)
    assert unpickled_exception.message == exception.message
    assert str(unpickled_exception) == str(exception)
    for name, value in attributes.items():
        assert getattr(unpickled_exception, name) == value


def test_chunk_execution_failure_message():
    exception = ChunkExecutionFailure(chunk_index=1, start=7, end=14, reason="reverted")
    assert exception.message == "Chunk 1 (calls 7-13) failed: reverted"
