from typing import TYPE_CHECKING

from ammkit.erc20 import is_base_currency
from ammkit.exceptions import AmmError
from ammkit.logging import logger
from ammkit.types.aliases import Address, ChainId, UsdPrice

if TYPE_CHECKING:
    from ammkit.config import Settings
    from ammkit.registry import PoolRegistry


def calculate_prices(
    registry: "PoolRegistry",
    chain_id: ChainId | None = None,
    *,
    settings: "Settings | None" = None,
) -> dict[tuple[ChainId, Address], UsdPrice]:
    """
    Derive the USD price of every non-base token held by a sufficiently liquid pool, from the cached
    price of the pool's base currency. The prices are written to the registry cache and returned.

    Pools pairing two base currencies are skipped, since their prices come from the provider. Pools
    that cannot be priced are skipped, and never produce a zero price.

    Each call is a single pass, and should be repeated after every synchronization.
    """

    prices: dict[tuple[ChainId, Address], UsdPrice] = {}

    for pool in registry.sufficient_liquidity_pools(chain_id, settings):
        if is_base_currency(pool.token0) and is_base_currency(pool.token1):
            continue

        base_token = pool.base_token
        quote_token = pool.quote_token

        base_usd_price = registry.get_token_price(pool.chain_id, base_token.address)
        if not base_usd_price:
            logger.debug(f"Skipping {pool}: no USD price for {base_token}")
            continue

        try:
            price = pool.quote_price(base_usd_price)
        except AmmError as exc:
            logger.debug(f"Skipping {pool}: {exc}")
            continue

        prices[(pool.chain_id, quote_token.address)] = price

    registry.set_token_prices(prices)
    logger.debug(f"Calculated {len(prices)} token prices")
    return prices
