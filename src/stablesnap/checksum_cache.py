import functools
from typing import Any

from cchecksum import to_checksum_address
from eth_typing import ChecksumAddress, HexAddress
from eth_utils.address import is_address

from stablesnap.exceptions import InvalidAddress


@functools.lru_cache(maxsize=512)
def get_checksum_address(address: HexAddress | bytes) -> ChecksumAddress:
    return to_checksum_address(address)


def validate_address(address: Any) -> ChecksumAddress:
    """
    Return the checksummed form of a valid address. Mixed-case input must carry a correct EIP-55
    checksum, and anything else raises `InvalidAddress`.
    """

    if not isinstance(address, str) or not is_address(address):
        raise InvalidAddress(address)
    return get_checksum_address(address)
