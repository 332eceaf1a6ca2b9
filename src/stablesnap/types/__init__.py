from .abstract import AbstractPoolState
from .aliases import BlockNumber, ChainId

__all__ = (
    "AbstractPoolState",
    "BlockNumber",
    "ChainId",
)
