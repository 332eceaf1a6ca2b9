from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import eth_abi.abi
from eth_utils.crypto import keccak
from web3 import AsyncBaseProvider, AsyncWeb3
from web3.types import BlockIdentifier

from stablesnap.exceptions import StablesnapValueError
from stablesnap.types.aliases import BlockNumber


def function_selector(function_prototype: str) -> bytes:
    """
    Return the 4-byte selector for a function prototype, e.g. 'getA()'.
    """

    return keccak(text=function_prototype)[:4]


def encode_function_calldata(
    function_prototype: str, function_arguments: Sequence[Any] | None
) -> bytes:
    """
    Encode the calldata to execute a call to the given function prototype, with ordered arguments.
    The resulting bytes array will include the 4-byte function selector, followed by the
    ABI-encoded arguments.
    """

    if function_arguments is None:
        function_arguments = ()

    return function_selector(function_prototype) + eth_abi.abi.encode(
        types=extract_argument_types_from_function_prototype(function_prototype),
        args=function_arguments,
    )


def extract_argument_types_from_function_prototype(function_prototype: str) -> list[str]:
    """
    Extract the argument types from the function prototype.

    e.g. the argument types for the prototype 'function(address,uint256)' are ['address','uint256'],
    and for 'tryAggregate(bool,(address,bytes)[])' they are ['bool','(address,bytes)[]']
    """

    function_args = function_prototype[
        function_prototype.find("(") + 1 : function_prototype.rfind(")")
    ]
    if not function_args:
        return []

    # Split on top-level commas only, so tuple types stay intact
    argument_types: list[str] = []
    depth = 0
    current = ""
    for char in function_args:
        if char == "," and depth == 0:
            argument_types.append(current)
            current = ""
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        current += char
    argument_types.append(current)

    return argument_types


async def get_number_for_block_identifier_async(
    identifier: BlockIdentifier | None,
    w3: AsyncWeb3[AsyncBaseProvider],
) -> BlockNumber:
    match identifier:
        case None:
            return await w3.eth.get_block_number()
        case int() as block_number_as_int:
            return BlockNumber(block_number_as_int)
        case "latest" | "earliest" | "pending" | "safe" | "finalized" as block_tag:
            block = await w3.eth.get_block(block_tag)
            block_number = block.get("number")
            if TYPE_CHECKING:
                assert block_number is not None
            return block_number
        case str() as block_number_as_str:
            try:
                return BlockNumber(int(block_number_as_str, 16))
            except ValueError:
                raise StablesnapValueError(
                    message=f"Invalid block identifier {identifier!r}"
                ) from None
        case bytes() as block_number_as_bytes:
            return BlockNumber(int.from_bytes(block_number_as_bytes, byteorder="big"))
        case _:
            raise StablesnapValueError(message=f"Invalid block identifier {identifier!r}")
