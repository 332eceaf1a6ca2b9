"""
Call encoding exceptions for the stablesnap package.
"""

from typing import Any

from stablesnap.exceptions.base import StablesnapValueError


class InvalidAddress(StablesnapValueError):
    """
    Raised when an address is not a valid 20-byte hex address, or carries a bad EIP-55 checksum.
    """

    def __init__(self, address: Any) -> None:
        self.address = address
        super().__init__(message=f"Invalid address {address!r}.")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.address,)


class UnknownOperation(StablesnapValueError):
    """
    Raised when a read operation name is not part of the operation table.
    """

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(message=f"Unknown contract operation {operation!r}.")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.operation,)
