import eth_abi.abi
import pytest
from hexbytes import HexBytes

from stablesnap.exceptions import InvariantViolation, MalformedReturnData, MissingReturnData
from stablesnap.stableswap.decoder import decode_result, decode_results
from stablesnap.stableswap.encoder import encode_pool_calls
from stablesnap.stableswap.operations import (
    GET_A,
    GET_BALANCES,
    PAUSED,
    SWAP_STORAGE,
    TOTAL_SUPPLY,
    AmplificationFactor,
    LpTotalSupply,
    PausedFlag,
    PoolBalances,
    SwapFees,
)

from .conftest import make_pool, pool_responses


def test_decode_each_operation():
    assert decode_result(eth_abi.abi.encode(["uint256"], [200]), GET_A) == AmplificationFactor(200)
    assert decode_result(eth_abi.abi.encode(["bool"], [True]), PAUSED) == PausedFlag(True)
    assert decode_result(
        HexBytes(eth_abi.abi.encode(["uint256[]"], [[1, 2]])), GET_BALANCES
    ) == PoolBalances((1, 2))
    assert decode_result(eth_abi.abi.encode(["uint256"], [10**24]), TOTAL_SUPPLY) == (
        LpTotalSupply(10**24)
    )

    lp_token = make_pool(0).lp_token.address
    fees = decode_result(
        eth_abi.abi.encode(
            list(SWAP_STORAGE.return_types),
            [100, 200, 1, 2, 4_000_000, 5_000_000_000, 3, 4, lp_token.lower()],
        ),
        SWAP_STORAGE,
    )
    assert fees == SwapFees(
        initial_a=100,
        future_a=200,
        initial_a_time=1,
        future_a_time=2,
        swap_fee=4_000_000,
        admin_fee=5_000_000_000,
        default_deposit_fee=3,
        default_withdraw_fee=4,
        lp_token=lp_token,
    )


def test_absent_data_is_never_defaulted():
    with pytest.raises(MissingReturnData) as exc_info:
        decode_result(None, GET_A)
    assert exc_info.value.operation == "getA"
    assert not isinstance(exc_info.value, MalformedReturnData)


@pytest.mark.parametrize(
    ("raw", "operation"),
    [
        (b"", GET_A),
        (b"\x00" * 16, TOTAL_SUPPLY),
        (eth_abi.abi.encode(["uint256"], [1]), GET_BALANCES),
    ],
)
def test_malformed_data(raw: bytes, operation):
    with pytest.raises(MalformedReturnData) as exc_info:
        decode_result(raw, operation)

    # Malformed data is a kind of missing data
    assert isinstance(exc_info.value, MissingReturnData)
    assert exc_info.value.operation == operation.name


def test_decode_results():
    pool = make_pool(0)
    calls = encode_pool_calls([pool])
    responses = pool_responses(pool, amp=150, paused=True)
    raw_results = [responses[(call.target, call.payload)] for call in calls]

    decoded = decode_results(raw_results, calls)
    assert [type(field) for field in decoded] == [
        AmplificationFactor,
        SwapFees,
        PausedFlag,
        PoolBalances,
        LpTotalSupply,
    ]
    assert decoded[0] == AmplificationFactor(150)
    assert decoded[2] == PausedFlag(True)

    with pytest.raises(InvariantViolation):
        decode_results(raw_results[:4], calls)
