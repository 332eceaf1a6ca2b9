from typing import TypeAlias

import eth_typing

BlockNumber: TypeAlias = eth_typing.BlockNumber
ChainId: TypeAlias = int
