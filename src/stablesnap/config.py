import tomllib
from pathlib import Path
from typing import Annotated

import tomlkit
from pydantic import BaseModel, Field, HttpUrl, PlainSerializer, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from stablesnap.checksum_cache import validate_address
from stablesnap.constants import CELO_MAINNET_CHAIN_ID, CELO_MAINNET_RPC, MULTICALL3_ADDRESS
from stablesnap.logging import logger
from stablesnap.types.aliases import ChainId

CONFIG_DIR = Path.home() / ".config" / "stablesnap"
CONFIG_FILE = CONFIG_DIR / "config.toml"


class MulticallSettings(BaseModel):
    max_chunk_size: int = Field(default=100, ge=1)
    max_retries: int = Field(default=3, ge=1)
    retry_backoff: float = Field(default=0.5, ge=0)
    deadline: float | None = Field(default=None, gt=0)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="STABLESNAP_",
        env_nested_delimiter="__",
    )

    # Serialize the path as a string representation of the absolute path
    registry: (
        Annotated[
            Path,
            PlainSerializer(lambda path: str(path.absolute()), return_type=str),
        ]
        | None
    ) = None

    rpc: dict[
        ChainId,
        Annotated[HttpUrl, PlainSerializer(str, return_type=str)],
    ] = Field(default_factory=lambda: {CELO_MAINNET_CHAIN_ID: HttpUrl(CELO_MAINNET_RPC)})
    aggregators: dict[ChainId, str] = Field(
        default_factory=lambda: {CELO_MAINNET_CHAIN_ID: MULTICALL3_ADDRESS}
    )
    multicall: MulticallSettings = Field(default_factory=MulticallSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment variables override values read from the config file
        return env_settings, init_settings

    @field_validator("aggregators", mode="after")
    def validate_aggregators(
        cls,  # noqa: N805
        aggregators: dict[ChainId, str],
    ) -> dict[ChainId, str]:
        """
        Checksum the aggregator addresses, rejecting any that are invalid.
        """

        return {
            chain_id: validate_address(address) for chain_id, address in aggregators.items()
        }

    @field_validator("registry", mode="after")
    def validate_registry_path(
        cls,  # noqa: N805
        path: Path | None,
    ) -> Path | None:
        return path.expanduser().absolute() if path is not None else None


def load_config_from_file(config_path: Path) -> Settings:
    return Settings(
        **tomllib.loads(
            config_path.read_text(),
        ),
    )


def settings_to_toml(config: Settings) -> str:
    # TOML tables require string keys
    document = config.model_dump(exclude_none=True)
    document["rpc"] = {str(chain_id): url for chain_id, url in document["rpc"].items()}
    document["aggregators"] = {
        str(chain_id): address for chain_id, address in document["aggregators"].items()
    }
    return tomlkit.dumps(document)


def save_config_to_file(config: Settings, config_path: Path = CONFIG_FILE) -> None:
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(settings_to_toml(config))
    logger.info(f"Saved configuration to {config_path}.")


if CONFIG_FILE.exists():
    settings = load_config_from_file(CONFIG_FILE)
    logger.debug(f"Loaded configuration from {CONFIG_FILE}.")
else:
    settings = Settings()
