from typing import Any

from stablesnap.exceptions.base import StablesnapError


class DecodingError(StablesnapError):
    """
    Base exception for return data decoding errors.
    """


class MissingReturnData(DecodingError):
    """
    Raised when the return data for a call is absent. Absent data is never decoded as a default
    value.
    """

    def __init__(self, operation: str, message: str | None = None) -> None:
        self.operation = operation
        super().__init__(message=message or f"Return data not found for {operation}.")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.operation, self.message)


class MalformedReturnData(MissingReturnData):
    """
    Raised when the return data is present but cannot be decoded under the operation's return
    types.
    """

    def __init__(self, operation: str, error: str) -> None:
        self.error = error
        super().__init__(
            operation=operation,
            message=f"Malformed return data for {operation}: {error}",
        )

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.operation, self.error)
