"""
The field schema of a pool snapshot.

The call encoder emits calls in schema position order, and the reassembler maps each window of
decoded results back onto snapshot attributes by the same positions. Any change to the fields or
their order must bump the version.
"""

from dataclasses import dataclass

from stablesnap.exceptions import InvariantViolation
from stablesnap.stableswap.operations import (
    GET_A,
    GET_BALANCES,
    PAUSED,
    SWAP_STORAGE,
    TOTAL_SUPPLY,
    ContractOperation,
)


@dataclass(slots=True, frozen=True)
class SnapshotField:
    position: int
    attribute: str
    operation: ContractOperation


@dataclass(slots=True, frozen=True)
class SnapshotSchema:
    version: int
    fields: tuple[SnapshotField, ...]

    def __post_init__(self) -> None:
        positions = [field.position for field in self.fields]
        if positions != list(range(len(self.fields))):
            raise InvariantViolation(
                f"schema v{self.version} positions {positions} are not contiguous"
            )

    @property
    def fields_per_entity(self) -> int:
        return len(self.fields)


SNAPSHOT_SCHEMA_V1 = SnapshotSchema(
    version=1,
    fields=(
        SnapshotField(position=0, attribute="amplification_factor", operation=GET_A),
        SnapshotField(position=1, attribute="fees", operation=SWAP_STORAGE),
        SnapshotField(position=2, attribute="paused", operation=PAUSED),
        SnapshotField(position=3, attribute="reserves", operation=GET_BALANCES),
        SnapshotField(position=4, attribute="lp_total_supply", operation=TOTAL_SUPPLY),
    ),
)
