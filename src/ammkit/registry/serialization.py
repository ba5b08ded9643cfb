"""
Conversion of pools and their state to and from plain JSON-compatible values.

Integers wider than 64 bits cannot be stored as JSON numbers by every encoder, so amounts, prices,
liquidity and accumulators are written as decimal strings.
"""

from typing import Any

from ammkit.erc20 import Erc20Token
from ammkit.exceptions import AmmValueError
from ammkit.uniswap import (
    AnyUniswapPool,
    DexKind,
    UniswapV2Pool,
    UniswapV2PoolState,
    UniswapV3LiquidityAtTick,
    UniswapV3Pool,
    UniswapV3PoolState,
    UniswapV4Pool,
)
from ammkit.uniswap.abstract_pool import PoolKey


def key_to_str(key: PoolKey) -> str:
    """
    Stringify a registry key, e.g. '1:UniswapV3:500:0xA0b8...:0xC02a...'
    """

    return ":".join(
        element.value if isinstance(element, DexKind) else str(element) for element in key
    )


def token_to_dict(token: Erc20Token) -> dict[str, Any]:
    return {
        "chain_id": token.chain_id,
        "address": token.address,
        "decimals": token.decimals,
        "symbol": token.symbol,
        "name": token.name,
        "total_supply": str(token.total_supply),
    }


def token_from_dict(data: dict[str, Any]) -> Erc20Token:
    return Erc20Token(
        chain_id=data["chain_id"],
        address=data["address"],
        decimals=data["decimals"],
        symbol=data["symbol"],
        name=data.get("name", ""),
        total_supply=int(data.get("total_supply", 0)),
    )


def state_to_dict(state: UniswapV2PoolState | UniswapV3PoolState) -> dict[str, Any]:
    match state:
        case UniswapV2PoolState():
            return {
                "address": state.address,
                "block": state.block,
                "reserves_token0": str(state.reserves_token0),
                "reserves_token1": str(state.reserves_token1),
                "timestamp": state.timestamp,
            }
        case UniswapV3PoolState():
            return {
                "address": state.address,
                "block": state.block,
                "liquidity": str(state.liquidity),
                "sqrt_price_x96": str(state.sqrt_price_x96),
                "tick": state.tick,
                "tick_spacing": state.tick_spacing,
                "tick_bitmap": {
                    str(word): str(bitmap) for word, bitmap in state.tick_bitmap.items()
                },
                "tick_data": {
                    str(tick): {
                        "liquidity_net": str(info.liquidity_net),
                        "liquidity_gross": str(info.liquidity_gross),
                        "fee_growth_outside0_x128": str(info.fee_growth_outside0_x128),
                        "fee_growth_outside1_x128": str(info.fee_growth_outside1_x128),
                        "initialized": info.initialized,
                    }
                    for tick, info in state.tick_data.items()
                },
                "fee_growth_global0_x128": str(state.fee_growth_global0_x128),
                "fee_growth_global1_x128": str(state.fee_growth_global1_x128),
                "balance0": str(state.balance0),
                "balance1": str(state.balance1),
            }
        case _:
            raise AmmValueError(message=f"Cannot serialize state of type {type(state).__name__}.")


def v2_state_from_dict(data: dict[str, Any]) -> UniswapV2PoolState:
    return UniswapV2PoolState(
        address=data["address"],
        block=data["block"],
        reserves_token0=int(data["reserves_token0"]),
        reserves_token1=int(data["reserves_token1"]),
        timestamp=data.get("timestamp", 0),
    )


def v3_state_from_dict(data: dict[str, Any]) -> UniswapV3PoolState:
    return UniswapV3PoolState(
        address=data["address"],
        block=data["block"],
        liquidity=int(data["liquidity"]),
        sqrt_price_x96=int(data["sqrt_price_x96"]),
        tick=data["tick"],
        tick_spacing=data["tick_spacing"],
        tick_bitmap={int(word): int(bitmap) for word, bitmap in data["tick_bitmap"].items()},
        tick_data={
            int(tick): UniswapV3LiquidityAtTick(
                liquidity_net=int(info["liquidity_net"]),
                liquidity_gross=int(info["liquidity_gross"]),
                fee_growth_outside0_x128=int(info["fee_growth_outside0_x128"]),
                fee_growth_outside1_x128=int(info["fee_growth_outside1_x128"]),
                initialized=info["initialized"],
            )
            for tick, info in data["tick_data"].items()
        },
        fee_growth_global0_x128=int(data["fee_growth_global0_x128"]),
        fee_growth_global1_x128=int(data["fee_growth_global1_x128"]),
        balance0=int(data["balance0"]),
        balance1=int(data["balance1"]),
    )


def pool_to_dict(pool: AnyUniswapPool) -> dict[str, Any]:
    data: dict[str, Any] = {
        "chain_id": pool.chain_id,
        "address": pool.address,
        "dex": pool.dex.value,
        "fee": pool.fee,
        "token0": token_to_dict(pool.token0),
        "token1": token_to_dict(pool.token1),
        "state": None if pool.state is None else state_to_dict(pool.state),
    }

    match pool:
        case UniswapV4Pool():
            data["tick_spacing"] = pool.tick_spacing
            data["hooks"] = pool.hooks
        case UniswapV3Pool():
            data["tick_spacing"] = pool.tick_spacing

    return data


def pool_from_dict(data: dict[str, Any]) -> AnyUniswapPool:
    dex = DexKind(data["dex"])
    token0 = token_from_dict(data["token0"])
    token1 = token_from_dict(data["token1"])
    state_data = data.get("state")

    if dex.is_v2:
        return UniswapV2Pool(
            chain_id=data["chain_id"],
            address=data["address"],
            token0=token0,
            token1=token1,
            fee=data["fee"],
            dex=dex,
            state=None if state_data is None else v2_state_from_dict(state_data),
        )

    v3_state = None if state_data is None else v3_state_from_dict(state_data)

    if dex.is_v4:
        pool = UniswapV4Pool(
            chain_id=data["chain_id"],
            token0=token0,
            token1=token1,
            fee=data["fee"],
            tick_spacing=data["tick_spacing"],
            hooks=data["hooks"],
            dex=dex,
            state=v3_state,
        )
        if pool.address.lower() != data["address"].lower():
            raise AmmValueError(
                message=f"Pool ID {data['address']} does not match the pool key, expected "
                f"{pool.address}."
            )
        return pool

    return UniswapV3Pool(
        chain_id=data["chain_id"],
        address=data["address"],
        token0=token0,
        token1=token1,
        fee=data["fee"],
        dex=dex,
        tick_spacing=data["tick_spacing"],
        state=v3_state,
    )
