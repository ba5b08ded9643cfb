import tomllib
from pathlib import Path

import tomlkit
from pydantic import BaseModel, NonNegativeFloat, PositiveFloat, PositiveInt, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ammkit.logging import logger

CONFIG_DIR = Path.home() / ".config" / "ammkit"
CONFIG_FILE = CONFIG_DIR / "config.toml"

STABLECOIN_SYMBOLS = frozenset({"USDC", "USDT", "DAI"})


class SyncSettings(BaseModel):
    v2_batch_size: PositiveInt = 100
    v3_batch_size: PositiveInt = 5
    # Attempts per batch, including the first
    retries: PositiveInt = 1
    # Base delay in seconds between attempts, grown exponentially with random jitter
    retry_wait: NonNegativeFloat = 0.5
    # Seconds allowed for each attempt, unlimited if unset
    batch_timeout: PositiveFloat | None = None
    concurrency: PositiveInt = 1


class LiquiditySettings(BaseModel):
    """
    Minimum base-side balances, in whole token units, for a pool to count as sufficiently liquid.
    Thresholds are keyed by base token symbol; stablecoins share the "STABLE" entry.
    """

    default: dict[str, int] = {
        "WETH": 20,
        "WBNB": 200,
        "STABLE": 40_000,
    }
    v4: dict[str, int] = {
        "WETH": 200,
        "WBNB": 2_000,
        "STABLE": 4_000_000,
    }

    @field_validator("default", "v4", mode="after")
    def validate_thresholds(
        cls,  # noqa: N805
        thresholds: dict[str, int],
    ) -> dict[str, int]:
        """
        Normalize symbols to upper case and reject negative thresholds.
        """

        if any(value < 0 for value in thresholds.values()):
            raise ValueError("Liquidity thresholds must be non-negative")
        return {symbol.upper(): value for symbol, value in thresholds.items()}

    def threshold(self, symbol: str, *, v4: bool = False) -> int | None:
        """
        Look up the threshold for a base token symbol. The native currency shares the threshold of
        its wrapped token.
        """

        symbol = symbol.upper()
        match symbol:
            case "ETH":
                symbol = "WETH"
            case "BNB":
                symbol = "WBNB"
            case _ if symbol in STABLECOIN_SYMBOLS:
                symbol = "STABLE"

        return (self.v4 if v4 else self.default).get(symbol)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="AMMKIT_",
        env_nested_delimiter="__",
    )

    sync: SyncSettings = SyncSettings()
    liquidity: LiquiditySettings = LiquiditySettings()


def load_config_from_file(config_path: Path) -> Settings:
    return Settings.model_validate(
        tomllib.loads(
            config_path.read_text(),
        ),
    )


def save_config_to_file(config: Settings, config_path: Path = CONFIG_FILE) -> None:
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(
        tomlkit.dumps(
            config.model_dump(exclude_none=True),
        ),
    )
    logger.info(f"Saved configuration to {config_path}.")


if CONFIG_FILE.exists():
    settings = load_config_from_file(CONFIG_FILE)
else:
    settings = Settings()
