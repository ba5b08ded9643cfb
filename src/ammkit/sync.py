"""
Concurrent, batched synchronization of pool state through an injected data provider.
"""

import asyncio
import itertools
from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING, Protocol

import tenacity
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential_jitter

from ammkit.config import settings as default_settings
from ammkit.erc20 import Erc20Token, is_base_currency
from ammkit.exceptions import AmmValueError, BatchFetchError, SyncFailed
from ammkit.logging import logger
from ammkit.prices import calculate_prices
from ammkit.types.aliases import Address, ChainId, UsdPrice
from ammkit.uniswap import UniswapV2Pool, UniswapV2PoolState, UniswapV3Pool, UniswapV3PoolState

if TYPE_CHECKING:
    from ammkit.config import Settings
    from ammkit.registry import PoolRegistry


class PoolStateProvider(Protocol):
    """
    A source of on-chain pool data, e.g. a batched RPC or multicall client.
    """

    async def fetch_v2_states(
        self, chain_id: ChainId, addresses: Sequence[Address]
    ) -> list[UniswapV2PoolState]: ...

    async def fetch_v3_states(
        self, chain_id: ChainId, pools: Sequence[UniswapV3Pool]
    ) -> list[UniswapV3PoolState]: ...

    async def fetch_base_token_usd_price(
        self, chain_id: ChainId, token: Erc20Token
    ) -> UsdPrice: ...


async def _fetch_batch[T: (UniswapV2PoolState, UniswapV3PoolState)](
    kind: str,
    fetch: Callable[[], Awaitable[list[T]]],
    addresses: set[str],
    semaphore: asyncio.Semaphore,
    settings: "Settings",
) -> list[T] | None:
    """
    Fetch one batch, retrying failed attempts. Returns None if every attempt fails.

    Snapshots are only accepted for the pools requested in the batch.
    """

    retrier = AsyncRetrying(
        stop=stop_after_attempt(settings.sync.retries),
        wait=wait_exponential_jitter(
            multiplier=settings.sync.retry_wait,
            max=30,
            jitter=settings.sync.retry_wait,
        ),
    )

    try:
        async for attempt in retrier:
            with attempt:
                async with semaphore, asyncio.timeout(settings.sync.batch_timeout):
                    states = await fetch()
    except tenacity.RetryError as exc:
        error = BatchFetchError(
            kind=kind,
            batch_size=len(addresses),
            attempts=exc.last_attempt.attempt_number,
        )
        logger.warning(f"{error.message} Last error: {exc.last_attempt.exception()!r}")
        return None

    matched: list[T] = []
    for state in states:
        if state.address.lower() in addresses:
            matched.append(state)
        else:
            logger.debug(f"Discarding {kind} state for unrequested pool {state.address}")
    return matched


async def fetch_state(
    provider: PoolStateProvider,
    chain_id: ChainId,
    concurrency: int,
    v2_pools: Sequence[UniswapV2Pool],
    v3_pools: Sequence[UniswapV3Pool],
    *,
    settings: "Settings | None" = None,
) -> tuple[list[UniswapV2PoolState], list[UniswapV3PoolState]]:
    """
    Fetch the state of the given pools in batches, with at most `concurrency` batches of either
    kind in flight at once.

    A batch that fails after all retries is logged and left out of the results. `SyncFailed` is
    raised only if every batch fails.
    """

    if concurrency < 1:
        raise AmmValueError(message=f"Concurrency must be at least 1, got {concurrency}.")

    if settings is None:
        settings = default_settings

    semaphore = asyncio.Semaphore(concurrency)

    v2_batches = list(itertools.batched(v2_pools, settings.sync.v2_batch_size))
    v3_batches = list(itertools.batched(v3_pools, settings.sync.v3_batch_size))

    def v2_fetcher(addresses: list[Address]) -> Callable[[], Awaitable[list[UniswapV2PoolState]]]:
        return lambda: provider.fetch_v2_states(chain_id, addresses)

    def v3_fetcher(
        pools: Sequence[UniswapV3Pool],
    ) -> Callable[[], Awaitable[list[UniswapV3PoolState]]]:
        return lambda: provider.fetch_v3_states(chain_id, pools)

    v2_results, v3_results = await asyncio.gather(
        asyncio.gather(
            *(
                _fetch_batch(
                    kind="V2",
                    fetch=v2_fetcher([pool.address for pool in batch]),
                    addresses={pool.address.lower() for pool in batch},
                    semaphore=semaphore,
                    settings=settings,
                )
                for batch in v2_batches
            )
        ),
        asyncio.gather(
            *(
                _fetch_batch(
                    kind="V3",
                    fetch=v3_fetcher(batch),
                    addresses={pool.address.lower() for pool in batch},
                    semaphore=semaphore,
                    settings=settings,
                )
                for batch in v3_batches
            )
        ),
    )

    total_batches = len(v2_batches) + len(v3_batches)
    failed_batches = sum(result is None for result in (*v2_results, *v3_results))
    if total_batches and failed_batches == total_batches:
        raise SyncFailed(chain_id=chain_id, batches=total_batches)

    v2_states = [state for result in v2_results if result is not None for state in result]
    v3_states = [state for result in v3_results if result is not None for state in result]

    logger.debug(
        f"Chain {chain_id}: fetched {len(v2_states)} V2 and {len(v3_states)} V3 states, "
        f"{failed_batches}/{total_batches} batches failed"
    )
    return v2_states, v3_states


async def synchronize(
    provider: PoolStateProvider,
    registry: "PoolRegistry",
    chain_id: ChainId,
    concurrency: int,
    *,
    settings: "Settings | None" = None,
) -> int:
    """
    Fetch fresh state for every pool registered on the chain and apply it to the registry in one
    step. Pools in failed batches keep their previous state.

    Returns the number of pools updated.
    """

    pools = registry.get_pools_for_chain(chain_id)
    v2_pools = [pool for pool in pools if isinstance(pool, UniswapV2Pool)]
    v3_pools = [pool for pool in pools if isinstance(pool, UniswapV3Pool)]

    v2_states, v3_states = await fetch_state(
        provider,
        chain_id,
        concurrency,
        v2_pools,
        v3_pools,
        settings=settings,
    )
    updated = registry.update_states(chain_id, v2_states, v3_states)

    logger.info(f"Chain {chain_id}: synchronized {updated}/{len(pools)} pools")
    return updated


async def update_base_token_prices(
    provider: PoolStateProvider,
    registry: "PoolRegistry",
    chain_id: ChainId,
) -> dict[tuple[ChainId, Address], UsdPrice]:
    """
    Fetch the USD price of every base currency held by a registered pool on the chain, and store
    the prices in the registry. Tokens whose price cannot be fetched are skipped.
    """

    base_tokens = sorted(
        {
            token
            for pool in registry.get_pools_for_chain(chain_id)
            for token in pool.tokens
            if is_base_currency(token)
        }
    )

    results = await asyncio.gather(
        *(provider.fetch_base_token_usd_price(chain_id, token) for token in base_tokens),
        return_exceptions=True,
    )

    prices: dict[tuple[ChainId, Address], UsdPrice] = {}
    for token, result in zip(base_tokens, results, strict=True):
        match result:
            case Exception():
                logger.warning(
                    f"Could not fetch the USD price of {token} ({token.address}): {result!r}"
                )
            case BaseException():
                raise result
            case _:
                prices[(chain_id, token.address)] = result

    registry.set_token_prices(prices)
    return prices


async def update(
    provider: PoolStateProvider,
    registry: "PoolRegistry",
    chain_id: ChainId,
    concurrency: int,
    *,
    settings: "Settings | None" = None,
) -> dict[tuple[ChainId, Address], UsdPrice]:
    """
    Run a full update pass for a chain: synchronize pool state, refresh base token prices, then
    derive the prices of all other tokens.
    """

    await synchronize(provider, registry, chain_id, concurrency, settings=settings)
    await update_base_token_prices(provider, registry, chain_id)
    return calculate_prices(registry, chain_id, settings=settings)
