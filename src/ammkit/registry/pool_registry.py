from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any, Self

import ujson

from ammkit.erc20 import Erc20Token
from ammkit.exceptions import AmmValueError, PoolNotFound
from ammkit.functions import get_checksum_address
from ammkit.logging import logger
from ammkit.registry.lock import ReaderWriterLock
from ammkit.registry.serialization import key_to_str, pool_from_dict, pool_to_dict
from ammkit.types.aliases import Address, ChainId, UsdPrice
from ammkit.uniswap import (
    AnyUniswapPool,
    DexKind,
    PoolVersion,
    UniswapV2PoolState,
    UniswapV3PoolState,
)
from ammkit.uniswap.abstract_pool import AbstractUniswapPool, PoolKey

if TYPE_CHECKING:
    from eth_typing import ChecksumAddress

    from ammkit.config import Settings

type TokenPriceKey = tuple[ChainId, "ChecksumAddress"]

REGISTRY_FORMAT_VERSION = 1


def _address(token: Erc20Token | Address) -> "ChecksumAddress":
    match token:
        case Erc20Token():
            return token.address
        case str():
            return get_checksum_address(token)


class PoolRegistry:
    """
    A thread-safe collection of pools, partitioned by pool version and keyed by
    (chain ID, exchange, fee, token0, token1). Hook-capable pools extend the key with the hook
    address and tick spacing.

    The registry also holds the USD token price cache populated by the price calculator.

    Every read observes a single consistent snapshot and returns a new list or dict, so results
    may be used freely while the registry is updated by other threads.
    """

    def __init__(self) -> None:
        self._lock = ReaderWriterLock()
        self._pools: dict[PoolVersion, dict[PoolKey, AnyUniswapPool]] = {
            version: {} for version in PoolVersion
        }
        self._pools_by_address: dict[tuple[ChainId, str], AnyUniswapPool] = {}
        self._token_prices: dict[TokenPriceKey, UsdPrice] = {}

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._pools_by_address)

    def __contains__(self, pool: object) -> bool:
        with self._lock.read():
            match pool:
                case tuple():
                    return any(pool in pools for pools in self._pools.values())
                case AbstractUniswapPool():
                    return self._pools[pool.dex.version].get(pool.key) is pool
                case _:
                    return False

    @staticmethod
    def _version_for_key(key: PoolKey) -> PoolVersion:
        try:
            _, dex, *_ = key
            return DexKind(dex).version
        except (ValueError, TypeError):
            raise AmmValueError(message=f"Invalid pool key {key}.") from None

    def _insert(self, pool: AnyUniswapPool) -> None:
        pools = self._pools[pool.dex.version]
        old_pool = pools.get(pool.key)
        if old_pool is not None:
            self._pools_by_address.pop((old_pool.chain_id, old_pool.address.lower()), None)
        pools[pool.key] = pool
        self._pools_by_address[(pool.chain_id, pool.address.lower())] = pool

    def _delete(self, version: PoolVersion, key: PoolKey) -> AnyUniswapPool:
        try:
            pool = self._pools[version].pop(key)
        except KeyError:
            raise PoolNotFound(key=key) from None
        self._pools_by_address.pop((pool.chain_id, pool.address.lower()), None)
        return pool

    def add_pools(self, pools: Iterable[AnyUniswapPool]) -> None:
        """
        Insert or replace pools. A pool with the same key as a registered pool replaces it.
        """

        pools = list(pools)
        with self._lock.write():
            for pool in pools:
                self._insert(pool)
                logger.debug(f"Registered pool {pool.address} with key {key_to_str(pool.key)}")

    def remove_pool(self, pool_or_key: AnyUniswapPool | PoolKey) -> AnyUniswapPool:
        match pool_or_key:
            case tuple():
                key = pool_or_key
                version = self._version_for_key(key)
            case _:
                key = pool_or_key.key
                version = pool_or_key.dex.version

        with self._lock.write():
            pool = self._delete(version, key)
        logger.debug(f"Removed pool {pool.address} with key {key_to_str(key)}")
        return pool

    def cleanup(self, settings: "Settings | None" = None) -> int:
        """
        Remove all pools that do not meet the minimum liquidity requirement.

        Returns the number of pools removed.
        """

        with self._lock.write():
            doomed = [
                (version, key)
                for version, pools in self._pools.items()
                for key, pool in pools.items()
                if not pool.has_sufficient_liquidity(settings)
            ]
            for version, key in doomed:
                pool = self._delete(version, key)
                logger.debug(f"Removed pool {pool.address} with insufficient liquidity")

        return len(doomed)

    def get_pool(
        self,
        kind: PoolVersion,
        chain_id: ChainId,
        token_a: Erc20Token | Address,
        token_b: Erc20Token | Address,
        fee: int | None = None,
        dex: DexKind | None = None,
    ) -> AnyUniswapPool | None:
        """
        Find a pool of the given kind holding both tokens, in either order. When the fee or exchange
        is not specified, the first matching pool is returned.
        """

        address_a = _address(token_a)
        address_b = _address(token_b)
        token0, token1 = sorted((address_a, address_b), key=lambda address: int(address, 16))

        with self._lock.read():
            pools = self._pools[kind]

            if fee is not None and dex is not None and kind is not PoolVersion.V4:
                return pools.get((chain_id, dex, fee, token0, token1))

            for key, pool in pools.items():
                key_chain_id, key_dex, key_fee, key_token0, key_token1, *_ = key
                if (
                    key_chain_id == chain_id
                    and key_token0 == token0
                    and key_token1 == token1
                    and (fee is None or key_fee == fee)
                    and (dex is None or key_dex == dex)
                ):
                    return pool
        return None

    def get_pool_by_address(self, chain_id: ChainId, address: Address) -> AnyUniswapPool | None:
        """
        Find a pool by its contract address, or its pool ID for hook-capable pools.
        """

        with self._lock.read():
            return self._pools_by_address.get((chain_id, address.lower()))

    def get_pools_from_token(self, token: Erc20Token) -> list[AnyUniswapPool]:
        with self._lock.read():
            return [
                pool
                for pool in self._pools_by_address.values()
                if pool.chain_id == token.chain_id and token in pool.tokens
            ]

    def get_pools_from_pair(
        self, token_a: Erc20Token, token_b: Erc20Token
    ) -> list[AnyUniswapPool]:
        with self._lock.read():
            return [
                pool
                for pool in self._pools_by_address.values()
                if pool.chain_id == token_a.chain_id
                and token_a in pool.tokens
                and token_b in pool.tokens
            ]

    def get_pools_for_chain(
        self, chain_id: ChainId, kind: PoolVersion | None = None
    ) -> list[AnyUniswapPool]:
        with self._lock.read():
            return [
                pool
                for version, pools in self._pools.items()
                if kind is None or version is kind
                for pool in pools.values()
                if pool.chain_id == chain_id
            ]

    def all_pools(self) -> list[AnyUniswapPool]:
        with self._lock.read():
            return [pool for pools in self._pools.values() for pool in pools.values()]

    def sufficient_liquidity_pools(
        self,
        chain_id: ChainId | None = None,
        settings: "Settings | None" = None,
    ) -> list[AnyUniswapPool]:
        with self._lock.read():
            return [
                pool
                for pools in self._pools.values()
                for pool in pools.values()
                if (chain_id is None or pool.chain_id == chain_id)
                and pool.has_sufficient_liquidity(settings)
            ]

    def update_states(
        self,
        chain_id: ChainId,
        v2_states: Sequence[UniswapV2PoolState],
        v3_states: Sequence[UniswapV3PoolState],
    ) -> int:
        """
        Apply fetched snapshots to the registered pools in a single step, matching each snapshot
        to its pool by address. Snapshots for unknown pools are ignored.

        All snapshots are checked before any is applied, so a bad snapshot leaves every pool
        unchanged. Returns the number of pools updated.
        """

        with self._lock.write():
            updates: list[tuple[AnyUniswapPool, UniswapV2PoolState | UniswapV3PoolState]] = []
            for state in (*v2_states, *v3_states):
                pool = self._pools_by_address.get((chain_id, state.address.lower()))
                if pool is None:
                    logger.debug(f"Ignoring state for unknown pool {state.address}")
                    continue
                pool.check_state(state)
                updates.append((pool, state))

            for pool, state in updates:
                pool.update_state(state)

        return len(updates)

    def get_token_price(self, chain_id: ChainId, address: Address) -> UsdPrice | None:
        with self._lock.read():
            return self._token_prices.get((chain_id, get_checksum_address(address)))

    def set_token_price(self, chain_id: ChainId, address: Address, price: UsdPrice) -> None:
        with self._lock.write():
            self._token_prices[(chain_id, get_checksum_address(address))] = price

    def set_token_prices(self, prices: Mapping[tuple[ChainId, Address], UsdPrice]) -> None:
        with self._lock.write():
            self._token_prices.update(
                {
                    (chain_id, get_checksum_address(address)): price
                    for (chain_id, address), price in prices.items()
                }
            )

    def token_prices(self) -> dict[TokenPriceKey, UsdPrice]:
        with self._lock.read():
            return dict(self._token_prices)

    def reset_token_prices(self) -> None:
        with self._lock.write():
            self._token_prices.clear()

    def to_dict(self) -> dict[str, Any]:
        with self._lock.read():
            return {
                "version": REGISTRY_FORMAT_VERSION,
                "pools": {
                    version.name: {
                        key_to_str(key): pool_to_dict(pool) for key, pool in pools.items()
                    }
                    for version, pools in self._pools.items()
                },
                "token_prices": {
                    f"{chain_id}:{address}": price
                    for (chain_id, address), price in self._token_prices.items()
                },
            }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        if data.get("version") != REGISTRY_FORMAT_VERSION:
            raise AmmValueError(message=f"Unsupported registry format {data.get('version')!r}.")

        registry = cls()
        registry.add_pools(
            pool_from_dict(pool_data)
            for pools in data["pools"].values()
            for pool_data in pools.values()
        )
        prices: dict[tuple[ChainId, Address], UsdPrice] = {}
        for key, price in data.get("token_prices", {}).items():
            chain_id, address = key.split(":")
            prices[(int(chain_id), address)] = price
        registry.set_token_prices(prices)
        return registry

    def to_json(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(ujson.dumps(self.to_dict(), indent=2))
        logger.info(f"Saved {len(self)} pools to {path}")

    @classmethod
    def from_json(cls, path: Path) -> Self:
        registry = cls.from_dict(ujson.loads(path.read_text()))
        logger.info(f"Loaded {len(registry)} pools from {path}")
        return registry
