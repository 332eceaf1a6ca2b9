"""
A static, versioned registry of stableswap pools for one chain.

The registry is a TOML document:

```
version = "1.0.0"
chain_id = 42220

[[pools]]
name = "cUSD/USDC"
address = "0x..."
lp_token = { address = "0x...", symbol = "MOB-LP", decimals = 18 }
tokens = [
    { address = "0x...", symbol = "cUSD", decimals = 18 },
    { address = "0x...", symbol = "USDC", decimals = 6 },
]
```

Addresses are stored exactly as written. They are validated when calls are encoded, so a bad
address fails the run instead of being skipped.
"""

import tomllib
from dataclasses import dataclass
from pathlib import Path

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from stablesnap.constants import POOL_PRECISION_DECIMALS
from stablesnap.exceptions import RegistryError
from stablesnap.logging import logger
from stablesnap.types.aliases import ChainId


@dataclass(slots=True, frozen=True)
class TokenInfo:
    address: str
    symbol: str
    decimals: int


@dataclass(slots=True, frozen=True)
class StableswapPool:
    name: str
    address: str
    lp_token: TokenInfo
    tokens: tuple[TokenInfo, TokenInfo]


@dataclass(slots=True, frozen=True)
class PoolRegistry:
    version: str
    chain_id: ChainId
    pools: tuple[StableswapPool, ...]


class _TokenModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    address: str
    symbol: str
    decimals: int = Field(ge=0, le=POOL_PRECISION_DECIMALS)


class _PoolModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    address: str
    lp_token: _TokenModel
    tokens: list[_TokenModel] = Field(min_length=2, max_length=2)


class _RegistryModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    version: str
    chain_id: ChainId
    pools: list[_PoolModel]


def _token_from_model(model: _TokenModel) -> TokenInfo:
    return TokenInfo(address=model.address, symbol=model.symbol, decimals=model.decimals)


def parse_registry(document: str) -> PoolRegistry:
    """
    Build a `PoolRegistry` from a TOML document.
    """

    try:
        model = _RegistryModel.model_validate(tomllib.loads(document))
    except tomllib.TOMLDecodeError as exc:
        raise RegistryError(message=f"Registry is not valid TOML: {exc}") from exc
    except pydantic.ValidationError as exc:
        raise RegistryError(message=f"Registry failed validation: {exc}") from exc

    return PoolRegistry(
        version=model.version,
        chain_id=model.chain_id,
        pools=tuple(
            StableswapPool(
                name=pool.name,
                address=pool.address,
                lp_token=_token_from_model(pool.lp_token),
                tokens=(
                    _token_from_model(pool.tokens[0]),
                    _token_from_model(pool.tokens[1]),
                ),
            )
            for pool in model.pools
        ),
    )


def load_registry(path: Path) -> PoolRegistry:
    try:
        document = path.expanduser().read_text()
    except OSError as exc:
        raise RegistryError(message=f"Could not read registry at {path}: {exc}") from exc

    registry = parse_registry(document)
    logger.debug(
        f"Loaded registry version {registry.version} with {len(registry.pools)} pools "
        f"for chain {registry.chain_id}"
    )
    return registry
