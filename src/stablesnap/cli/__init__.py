import asyncio
import math
from fractions import Fraction
from pathlib import Path

import click
from pydantic import TypeAdapter

from stablesnap.config import settings, settings_to_toml
from stablesnap.connection import get_async_web3_from_config
from stablesnap.constants import CELO_MAINNET_CHAIN_ID
from stablesnap.exceptions import PoolSnapshotError, PricingError, StablesnapError
from stablesnap.logging import logger
from stablesnap.multicall import MulticallExecutor
from stablesnap.registry import StableswapPool, load_registry
from stablesnap.stableswap.pipeline import SnapshotFetchResult, fetch_pool_snapshots
from stablesnap.stableswap.pricing import calculate_estimated_swap_output, calculate_swap_price
from stablesnap.stableswap.types import StableswapPoolSnapshot

SAMPLE_SWAP_AMOUNT = 10_000


@click.group()
@click.version_option()
def cli() -> None: ...


@cli.group()
def config() -> None:
    """
    Configuration commands
    """


@config.command("show")
@click.option(
    "--json",
    "output_format",
    flag_value="json",
    type=str,
    help="Show configuration in JSON format",
)
@click.option(
    "--toml",
    "output_format",
    flag_value="toml",
    type=str,
    help="Show configuration in TOML format (default)",
    default=True,
)
def config_show(output_format: str) -> None:
    """
    Display the current configuration in JSON or TOML (default) format.
    """

    match output_format:
        case "json":
            click.echo(
                TypeAdapter(dict).dump_json(
                    settings.model_dump(),
                    indent=2,
                ),
            )
        case "toml":
            click.echo(settings_to_toml(settings))
        case _:
            ...


def format_significant(value: Fraction | float, digits: int = 4) -> str:
    """
    Format a value rounded to `digits` significant figures, with comma-separated thousands.
    """

    value = float(value)
    if value == 0:
        return "0"

    rounded = round(value, digits - 1 - math.floor(math.log10(abs(value))))
    if rounded == int(rounded):
        return f"{int(rounded):,}"
    return f"{rounded:,}"


def describe_pool(pool: StableswapPool, snapshot: StableswapPoolSnapshot) -> str:
    token0, token1 = pool.tokens
    try:
        price = calculate_swap_price(snapshot, pool)
        sample_output = calculate_estimated_swap_output(
            snapshot=snapshot,
            pool=pool,
            amount_in=SAMPLE_SWAP_AMOUNT * 10**token1.decimals,
            token_in_index=1,
        )
    except PricingError as exc:
        raise PoolSnapshotError(
            stage="pricing",
            pools=[pool.name],
            reason=exc.message or str(exc),
        ) from exc
    output_amount = Fraction(sample_output.output_amount, 10**token0.decimals)
    return (
        f"{pool.name} pool has price {format_significant(price)} {token1.symbol} per "
        f"{token0.symbol} | {SAMPLE_SWAP_AMOUNT:,} {token1.symbol} -> "
        f"{format_significant(output_amount)} {token0.symbol}"
    )


async def _fetch(
    *,
    registry_path: Path,
    chain_id: int,
    chunk_size: int | None,
    block: int | None,
    allow_incomplete: bool,
    deadline: float | None,
) -> SnapshotFetchResult:
    registry = load_registry(registry_path)
    if registry.chain_id != chain_id:
        raise click.ClickException(
            f"Registry {registry_path} is for chain {registry.chain_id}, not chain {chain_id}."
        )

    aggregator = settings.aggregators.get(chain_id)
    if aggregator is None:
        raise click.ClickException(f"No aggregator address is configured for chain {chain_id}.")

    w3 = await get_async_web3_from_config(chain_id=chain_id)
    executor = MulticallExecutor(
        w3,
        aggregator,
        max_chunk_size=chunk_size or settings.multicall.max_chunk_size,
        max_retries=settings.multicall.max_retries,
        retry_backoff=settings.multicall.retry_backoff,
        deadline=deadline or settings.multicall.deadline,
    )
    return await fetch_pool_snapshots(
        registry.pools,
        executor,
        block_identifier=block,
        allow_incomplete=allow_incomplete,
    )


@cli.command("fetch")
@click.option(
    "--registry",
    "registry_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to the pool registry (TOML). Defaults to the registry in the config file.",
)
@click.option(
    "--chain-id",
    type=int,
    default=CELO_MAINNET_CHAIN_ID,
    show_default=True,
    help="Chain ID of the pools",
)
@click.option(
    "--chunk-size",
    type=click.IntRange(min=1),
    help="Maximum number of calls per aggregate call",
)
@click.option(
    "--block",
    type=click.IntRange(min=0),
    help="Block number to read at (default: latest)",
)
@click.option(
    "--allow-incomplete",
    is_flag=True,
    help="Report pools with missing data instead of failing the run",
)
@click.option(
    "--deadline",
    type=click.FloatRange(min=0, min_open=True),
    help="Abandon the fetch after this many seconds",
)
def fetch(
    *,
    registry_path: Path | None,
    chain_id: int,
    chunk_size: int | None,
    block: int | None,
    allow_incomplete: bool,
    deadline: float | None,
) -> None:
    """
    Fetch a snapshot of every pool in the registry and print its price.
    """

    if registry_path is None:
        registry_path = settings.registry
    if registry_path is None:
        raise click.UsageError("No registry given, and none is set in the config file.")

    try:
        result = asyncio.run(
            _fetch(
                registry_path=registry_path,
                chain_id=chain_id,
                chunk_size=chunk_size,
                block=block,
                allow_incomplete=allow_incomplete,
                deadline=deadline,
            )
        )
        lines = [describe_pool(pool, snapshot) for pool, snapshot in result]
    except StablesnapError as exc:
        raise click.ClickException(exc.message or str(exc)) from exc

    for line in lines:
        click.echo(line)

    for failure in result.failures:
        logger.warning(f"No snapshot for {failure.pool.name}: {failure.error.message}")
