"""
Batched call execution exceptions for the stablesnap package.

This module contains exceptions raised while executing chunks of calls through an aggregator
contract: transport failures, failed chunks, and overall deadline expiry.
"""

from typing import Any

from stablesnap.exceptions.base import StablesnapError


class MulticallError(StablesnapError):
    """
    Base exception for batched call execution errors.
    """


class TransportFailure(MulticallError):
    """
    Raised when the RPC endpoint cannot be reached, or the request times out. This is the only
    error category that is retried.
    """

    def __init__(self, error: str) -> None:
        self.error = error
        super().__init__(message=f"Transport failure: {error}")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.error,)


class ChunkExecutionFailure(MulticallError):
    """
    Raised when the aggregate call for one chunk reverts, returns malformed data, or exhausts its
    transport retries. Only the calls in `[start, end)` are affected.
    """

    def __init__(self, chunk_index: int, start: int, end: int, reason: str) -> None:
        """
        Args:
            chunk_index: Zero-based index of the failed chunk
            start: Position of the first call in the chunk, inclusive
            end: Position of the last call in the chunk, exclusive
            reason: A description of the failure
        """
        self.chunk_index = chunk_index
        self.start = start
        self.end = end
        self.reason = reason
        super().__init__(
            message=f"Chunk {chunk_index} (calls {start}-{end - 1}) failed: {reason}"
        )

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.chunk_index, self.start, self.end, self.reason)


class DeadlineExceeded(MulticallError):
    """
    Raised when the chunks of a batch did not all complete before the deadline.
    """

    def __init__(self, deadline: float) -> None:
        self.deadline = deadline
        super().__init__(message=f"Batch execution did not complete within {deadline} seconds.")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.deadline,)
