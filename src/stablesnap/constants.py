__all__ = (
    "CELO_MAINNET_CHAIN_ID",
    "CELO_MAINNET_RPC",
    "FEE_DENOMINATOR",
    "MULTICALL3_ADDRESS",
    "POOL_PRECISION_DECIMALS",
)

from eth_typing import ChecksumAddress

from stablesnap.checksum_cache import get_checksum_address

CELO_MAINNET_CHAIN_ID = 42220
CELO_MAINNET_RPC = "https://forno.celo.org"

# Multicall3 implements aggregate and tryAggregate at the same address on most EVM chains
MULTICALL3_ADDRESS: ChecksumAddress = get_checksum_address(
    "0xcA11bde05977b3631167028862bE2a173976CA11"
)

# Swap fees are stored with 10 decimals of precision
FEE_DENOMINATOR = 10**10

# Pool math operates on balances scaled to this many decimals
POOL_PRECISION_DECIMALS = 18
