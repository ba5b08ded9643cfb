from enum import Enum
from typing import ClassVar

import eth_abi.abi
from eth_typing import ChecksumAddress
from eth_utils.crypto import keccak

from ammkit.constants import ZERO_ADDRESS
from ammkit.erc20 import Erc20Token
from ammkit.exceptions import UnsupportedHooks
from ammkit.functions import get_checksum_address
from ammkit.types.aliases import ChainId
from ammkit.uniswap.abstract_pool import PoolKey
from ammkit.uniswap.types import DexKind, FeeAmount, PoolVersion
from ammkit.uniswap.v3_liquidity_pool import UniswapV3Pool
from ammkit.uniswap.v3_types import UniswapV3PoolState

# Pools using this fee value read the fee from the hook contract on each swap
DYNAMIC_FEE_FLAG = 0x800000


class Hooks(Enum):
    # ref: https://github.com/Uniswap/v4-core/blob/main/src/libraries/Hooks.sol
    BEFORE_INITIALIZE = 1 << 13
    AFTER_INITIALIZE = 1 << 12
    BEFORE_ADD_LIQUIDITY = 1 << 11
    AFTER_ADD_LIQUIDITY = 1 << 10
    BEFORE_REMOVE_LIQUIDITY = 1 << 9
    AFTER_REMOVE_LIQUIDITY = 1 << 8
    BEFORE_SWAP = 1 << 7
    AFTER_SWAP = 1 << 6
    BEFORE_DONATE = 1 << 5
    AFTER_DONATE = 1 << 4
    BEFORE_SWAP_RETURNS_DELTA = 1 << 3
    AFTER_SWAP_RETURNS_DELTA = 1 << 2
    AFTER_ADD_LIQUIDITY_RETURNS_DELTA = 1 << 1
    AFTER_REMOVE_LIQUIDITY_RETURNS_DELTA = 1 << 0


SWAP_ALTERING_HOOKS = frozenset(
    {
        Hooks.BEFORE_SWAP,
        Hooks.AFTER_SWAP,
        Hooks.BEFORE_SWAP_RETURNS_DELTA,
        Hooks.AFTER_SWAP_RETURNS_DELTA,
    }
)


def get_active_hooks(hooks: str) -> frozenset[Hooks]:
    """
    Decode the permissions encoded in the lowest 14 bits of a hook contract address.
    """

    permissions = int(hooks, 16)
    return frozenset(hook for hook in Hooks if permissions & hook.value)


def generate_pool_id(
    currency0: str,
    currency1: str,
    fee: int,
    tick_spacing: int,
    hooks: str,
) -> str:
    """
    Calculate the pool ID, the hash of the ABI-encoded pool key.

    ref: https://github.com/Uniswap/v4-core/blob/main/src/types/PoolId.sol
    """

    return "0x" + (
        keccak(
            eth_abi.abi.encode(
                types=("address", "address", "uint24", "int24", "address"),
                args=(currency0, currency1, fee, tick_spacing, hooks),
            )
        ).hex()
    )


class UniswapV4Pool(UniswapV3Pool):
    """
    A concentrated liquidity pool held by the V4 singleton pool manager, identified by the hash of
    its pool key instead of a contract address.

    Swaps through pools with a hook that can change the swap result are rejected, since the hook
    logic cannot be simulated.
    """

    pool_version: ClassVar[PoolVersion] = PoolVersion.V4

    def __init__(
        self,
        *,
        chain_id: ChainId,
        token0: Erc20Token,
        token1: Erc20Token,
        fee: int = FeeAmount.MEDIUM,
        tick_spacing: int,
        hooks: str = ZERO_ADDRESS,
        dex: DexKind = DexKind.UNISWAP_V4,
        state: UniswapV3PoolState | None = None,
    ) -> None:
        self.hooks: ChecksumAddress = get_checksum_address(hooks)
        self.active_hooks = get_active_hooks(self.hooks)

        currency0, currency1 = sorted((token0, token1))
        self.pool_id = generate_pool_id(
            currency0=currency0.address,
            currency1=currency1.address,
            fee=fee,
            tick_spacing=tick_spacing,
            hooks=self.hooks,
        )

        super().__init__(
            chain_id=chain_id,
            address=self.pool_id,
            token0=token0,
            token1=token1,
            fee=fee,
            dex=dex,
            tick_spacing=tick_spacing,
            state=state,
        )

    @property
    def key(self) -> PoolKey:
        return (*super().key, self.hooks, self.tick_spacing)

    @property
    def has_dynamic_fee(self) -> bool:
        return self.fee == DYNAMIC_FEE_FLAG

    def _before_swap(self) -> None:
        if swap_hooks := self.active_hooks & SWAP_ALTERING_HOOKS:
            raise UnsupportedHooks(hooks=swap_hooks)
