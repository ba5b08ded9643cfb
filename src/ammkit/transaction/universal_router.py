"""
Encoding of multi-hop swaps into call data for the Uniswap Universal Router.

ref: https://docs.uniswap.org/contracts/universal-router/technical-reference
"""

import dataclasses
from collections.abc import Sequence
from enum import IntEnum
from typing import Any, Protocol

import eth_abi.abi
from eth_typing import ChecksumAddress

from ammkit.constants import PERMIT2_ADDRESS, UNIVERSAL_ROUTER_ADDRESSES, ZERO_ADDRESS
from ammkit.erc20 import Erc20Token, wrapped_native_token
from ammkit.exceptions import InvalidRoute
from ammkit.functions import encode_function_calldata, get_checksum_address
from ammkit.logging import logger
from ammkit.types.aliases import ChainId, Timestamp
from ammkit.uniswap import AnyUniswapPool, UniswapV2Pool, UniswapV3Pool, UniswapV4Pool
from ammkit.uniswap.v3_functions import encode_v3_path

PERMIT2_EXPIRATION = 30 * 24 * 60 * 60
PERMIT2_SIGNATURE_DEADLINE = 30 * 60


class RouterCommand(IntEnum):
    # ref: https://github.com/Uniswap/universal-router/blob/main/contracts/libraries/Commands.sol
    V3_SWAP_EXACT_IN = 0x00
    V3_SWAP_EXACT_OUT = 0x01
    PERMIT2_TRANSFER_FROM = 0x02
    PERMIT2_PERMIT_BATCH = 0x03
    SWEEP = 0x04
    TRANSFER = 0x05
    PAY_PORTION = 0x06
    V2_SWAP_EXACT_IN = 0x08
    V2_SWAP_EXACT_OUT = 0x09
    PERMIT2_PERMIT = 0x0A
    WRAP_ETH = 0x0B
    UNWRAP_WETH = 0x0C
    PERMIT2_TRANSFER_FROM_BATCH = 0x0D
    BALANCE_CHECK_ERC20 = 0x0E
    V4_SWAP = 0x10
    V3_POSITION_MANAGER_PERMIT = 0x11
    V3_POSITION_MANAGER_CALL = 0x12
    V4_INITIALIZE_POOL = 0x13
    V4_POSITION_MANAGER_CALL = 0x14
    EXECUTE_SUB_PLAN = 0x21


class V4Action(IntEnum):
    # ref: https://github.com/Uniswap/v4-periphery/blob/main/src/libraries/Actions.sol
    INCREASE_LIQUIDITY = 0x00
    DECREASE_LIQUIDITY = 0x01
    MINT_POSITION = 0x02
    BURN_POSITION = 0x03
    SWAP_EXACT_IN_SINGLE = 0x06
    SWAP_EXACT_IN = 0x07
    SWAP_EXACT_OUT_SINGLE = 0x08
    SWAP_EXACT_OUT = 0x09
    SETTLE = 0x0B
    SETTLE_ALL = 0x0C
    SETTLE_PAIR = 0x0D
    TAKE = 0x0E
    TAKE_ALL = 0x0F
    TAKE_PORTION = 0x10
    TAKE_PAIR = 0x11
    CLOSE_CURRENCY = 0x12
    SWEEP = 0x14


class UniversalRouterSpecialAddress:
    # ref: https://github.com/Uniswap/universal-router/blob/main/contracts/libraries/Constants.sol
    ETH = ZERO_ADDRESS
    MSG_SENDER = get_checksum_address("0x0000000000000000000000000000000000000001")
    ROUTER = get_checksum_address("0x0000000000000000000000000000000000000002")


@dataclasses.dataclass(slots=True, frozen=True)
class SwapStep:
    """
    A single hop of a route, with the output simulated by the route planner.
    """

    pool: AnyUniswapPool
    token_in: Erc20Token
    token_out: Erc20Token
    amount_in: int
    amount_out: int


@dataclasses.dataclass(slots=True, frozen=True)
class Permit2Allowance:
    """
    The Permit2 allowance held by the router for an owner and token.
    """

    amount: int
    expiration: Timestamp
    nonce: int


class PermitSigner(Protocol):
    """
    An account able to sign EIP-712 typed data, e.g. an `eth_account` `LocalAccount`.
    """

    @property
    def address(self) -> ChecksumAddress: ...

    def sign_typed_data(self, *, full_message: dict[str, Any]) -> Any: ...


@dataclasses.dataclass(slots=True, frozen=True)
class SwapExecuteParams:
    call_data: bytes
    value: int
    token_needs_approval: bool = False
    message: dict[str, Any] | None = None


@dataclasses.dataclass(slots=True)
class _RouterBalance:
    eth: int = 0
    weth: int = 0

    def spend_eth(self, amount: int) -> None:
        if self.eth >= amount:
            self.eth -= amount

    def spend_weth(self, amount: int) -> None:
        if self.weth >= amount:
            self.weth -= amount


def permit2_typed_data(
    chain_id: ChainId,
    token: Erc20Token,
    amount: int,
    expiration: Timestamp,
    nonce: int,
    spender: str,
    sig_deadline: Timestamp,
) -> dict[str, Any]:
    """
    Build the EIP-712 `PermitSingle` message authorizing `spender` to transfer `token` through
    Permit2.

    ref: https://github.com/Uniswap/permit2/blob/main/src/interfaces/IAllowanceTransfer.sol
    """

    return {
        "types": {
            "EIP712Domain": [
                {"name": "name", "type": "string"},
                {"name": "chainId", "type": "uint256"},
                {"name": "verifyingContract", "type": "address"},
            ],
            "PermitDetails": [
                {"name": "token", "type": "address"},
                {"name": "amount", "type": "uint160"},
                {"name": "expiration", "type": "uint48"},
                {"name": "nonce", "type": "uint48"},
            ],
            "PermitSingle": [
                {"name": "details", "type": "PermitDetails"},
                {"name": "spender", "type": "address"},
                {"name": "sigDeadline", "type": "uint256"},
            ],
        },
        "primaryType": "PermitSingle",
        "domain": {
            "name": "Permit2",
            "chainId": chain_id,
            "verifyingContract": PERMIT2_ADDRESS,
        },
        "message": {
            "details": {
                "token": token.address,
                "amount": amount,
                "expiration": expiration,
                "nonce": nonce,
            },
            "spender": get_checksum_address(spender),
            "sigDeadline": sig_deadline,
        },
    }


def _sign(signer: PermitSigner, typed_data: dict[str, Any]) -> bytes:
    match signed := signer.sign_typed_data(full_message=typed_data):
        case bytes():
            return signed
        case _:
            # eth_account returns a SignedMessage
            return bytes(signed.signature)


def _encode_permit2_permit(typed_data: dict[str, Any], signature: bytes) -> bytes:
    message = typed_data["message"]
    details = message["details"]
    return eth_abi.abi.encode(
        types=("((address,uint160,uint48,uint48),address,uint256)", "bytes"),
        args=(
            (
                (details["token"], details["amount"], details["expiration"], details["nonce"]),
                message["spender"],
                message["sigDeadline"],
            ),
            signature,
        ),
    )


def _encode_v4_swap(
    step: SwapStep,
    pool: UniswapV4Pool,
    *,
    payer_is_user: bool,
) -> bytes:
    """
    Encode a V4_SWAP input which settles the input currency, swaps through a single pool, and
    takes the output currency to the router.
    """

    actions = bytes(
        (
            V4Action.SETTLE,
            V4Action.SWAP_EXACT_IN_SINGLE,
            V4Action.TAKE,
        )
    )
    params = [
        eth_abi.abi.encode(
            types=("address", "uint256", "bool"),
            args=(step.token_in.address, step.amount_in, payer_is_user),
        ),
        eth_abi.abi.encode(
            types=("((address,address,uint24,int24,address),bool,uint128,uint128,bytes)",),
            args=(
                (
                    (
                        pool.token0.address,
                        pool.token1.address,
                        pool.fee,
                        pool.tick_spacing,
                        pool.hooks,
                    ),
                    pool.zero_for_one(step.token_in),
                    step.amount_in,
                    0,
                    b"",
                ),
            ),
        ),
        eth_abi.abi.encode(
            types=("address", "address", "uint256"),
            args=(step.token_out.address, UniversalRouterSpecialAddress.ROUTER, 0),
        ),
    ]
    return eth_abi.abi.encode(types=("bytes", "bytes[]"), args=(actions, params))


def _step_tokens(chain_id: ChainId, step: SwapStep) -> tuple[Erc20Token, Erc20Token]:
    """
    Return the tokens actually exchanged by the step's pool. Pools outside the V4 pool manager
    cannot hold the native currency, so it is exchanged as the wrapped token.
    """

    def pool_token(token: Erc20Token) -> Erc20Token:
        address = token.address
        if token.is_native and not isinstance(step.pool, UniswapV4Pool):
            address = wrapped_native_token(chain_id)
        for candidate in step.pool.tokens:
            if candidate.address == address:
                return candidate
        raise InvalidRoute(message=f"Pool {step.pool.address} does not hold {token}.")

    return pool_token(step.token_in), pool_token(step.token_out)


def _native_wrap_amount(
    swap_steps: Sequence[SwapStep],
    step_tokens: Sequence[tuple[Erc20Token, Erc20Token]],
    weth_address: ChecksumAddress,
) -> int:
    """
    Return the amount of a native input that must be wrapped before the route executes.

    Hops outside the V4 pool manager spend WETH, whether the route lists their input as the native
    currency or as WETH. WETH delivered to the router by an earlier hop is spent first.
    """

    wrap_amount = 0
    produced_weth = 0
    for step, (step_token_in, step_token_out) in zip(swap_steps, step_tokens, strict=True):
        if step_token_in.address == weth_address and not isinstance(step.pool, UniswapV4Pool):
            from_router = min(produced_weth, step.amount_in)
            produced_weth -= from_router
            wrap_amount += step.amount_in - from_router
        if step_token_out.address == weth_address:
            produced_weth += step.amount_out
    return wrap_amount


def encode_swap(
    chain_id: ChainId,
    swap_steps: Sequence[SwapStep],
    amount_in: int,
    amount_out_min: int,
    token_in: Erc20Token,
    token_out: Erc20Token,
    signer: PermitSigner,
    recipient: str,
    *,
    now: Timestamp,
    permit2_allowance: Permit2Allowance | None = None,
    token_allowance: int = 0,
    deadline: Timestamp | None = None,
    exact_input: bool = True,
) -> SwapExecuteParams:
    """
    Encode an exact input swap through an ordered list of hops into a call to the Universal Router
    `execute` function.

    A native input is wrapped by the router for every hop that cannot settle the native currency
    directly, and sent as the transaction value. A token input is pulled through Permit2, and a
    signed permit is included when the existing Permit2 allowance is too small or has expired. In
    that case `message` holds the signed typed data, and `token_needs_approval` is set if the
    token's own allowance for Permit2 is also insufficient.

    Every hop sends its output to the router, and the final output is swept (or unwrapped) to the
    recipient, checked against `amount_out_min`.
    """

    if not swap_steps:
        raise InvalidRoute(message="The route is empty.")
    if not exact_input:
        raise InvalidRoute(message="Only exact input swaps are supported.")

    try:
        router_address = UNIVERSAL_ROUTER_ADDRESSES[chain_id]
    except KeyError:
        raise InvalidRoute(message=f"No Universal Router is known for chain {chain_id}.") from None

    weth_address = wrapped_native_token(chain_id)
    recipient = get_checksum_address(recipient)

    commands = bytearray()
    inputs: list[bytes] = []
    value = 0
    token_needs_approval = False
    message: dict[str, Any] | None = None
    balance = _RouterBalance()

    step_tokens = [_step_tokens(chain_id, step) for step in swap_steps]

    if token_in.is_native:
        value = amount_in
        balance.eth = amount_in
        wrap_amount = _native_wrap_amount(swap_steps, step_tokens, weth_address)
        if wrap_amount > 0:
            commands.append(RouterCommand.WRAP_ETH)
            inputs.append(
                eth_abi.abi.encode(
                    types=("address", "uint256"),
                    args=(UniversalRouterSpecialAddress.ROUTER, wrap_amount),
                )
            )
            balance.spend_eth(wrap_amount)
            balance.weth += wrap_amount
    else:
        if permit2_allowance is None:
            raise InvalidRoute(message=f"A Permit2 allowance is required to spend {token_in}.")

        if permit2_allowance.amount < amount_in or permit2_allowance.expiration < now:
            message = permit2_typed_data(
                chain_id=chain_id,
                token=token_in,
                amount=amount_in,
                expiration=now + PERMIT2_EXPIRATION,
                nonce=permit2_allowance.nonce,
                spender=router_address,
                sig_deadline=now + PERMIT2_SIGNATURE_DEADLINE,
            )
            commands.append(RouterCommand.PERMIT2_PERMIT)
            inputs.append(_encode_permit2_permit(message, _sign(signer, message)))
            token_needs_approval = token_allowance < amount_in

    for step, (step_token_in, step_token_out) in zip(swap_steps, step_tokens, strict=True):
        # Initial token funds are pulled from the sender through Permit2, native funds are held
        # by the router
        payer_is_user = step.token_in == token_in and not token_in.is_native

        if step_token_in.is_native:
            balance.spend_eth(step.amount_in)
        elif step_token_in.address == weth_address:
            balance.spend_weth(step.amount_in)

        match step.pool:
            case UniswapV4Pool():
                commands.append(RouterCommand.V4_SWAP)
                inputs.append(
                    _encode_v4_swap(
                        dataclasses.replace(step, token_in=step_token_in, token_out=step_token_out),
                        step.pool,
                        payer_is_user=payer_is_user,
                    )
                )
            case UniswapV3Pool():
                commands.append(RouterCommand.V3_SWAP_EXACT_IN)
                inputs.append(
                    eth_abi.abi.encode(
                        types=("address", "uint256", "uint256", "bytes", "bool"),
                        args=(
                            UniversalRouterSpecialAddress.ROUTER,
                            step.amount_in,
                            0,
                            encode_v3_path(
                                [step_token_in.address, step.pool.fee, step_token_out.address]
                            ),
                            payer_is_user,
                        ),
                    )
                )
            case UniswapV2Pool():
                commands.append(RouterCommand.V2_SWAP_EXACT_IN)
                inputs.append(
                    eth_abi.abi.encode(
                        types=("address", "uint256", "uint256", "address[]", "bool"),
                        args=(
                            UniversalRouterSpecialAddress.ROUTER,
                            step.amount_in,
                            0,
                            [step_token_in.address, step_token_out.address],
                            payer_is_user,
                        ),
                    )
                )
            case _:
                raise InvalidRoute(message=f"Cannot encode a swap through {step.pool}.")

        if step_token_out.is_native:
            balance.eth += step.amount_out
        elif step_token_out.address == weth_address:
            balance.weth += step.amount_out

    if token_out.is_native and balance.weth > 0 and balance.eth == 0:
        commands.append(RouterCommand.UNWRAP_WETH)
        inputs.append(
            eth_abi.abi.encode(types=("address", "uint256"), args=(recipient, amount_out_min))
        )
    else:
        if token_out.is_native and balance.weth > 0:
            # Unwrap into the router, then sweep the combined native balance
            commands.append(RouterCommand.UNWRAP_WETH)
            inputs.append(
                eth_abi.abi.encode(
                    types=("address", "uint256"),
                    args=(UniversalRouterSpecialAddress.ROUTER, 0),
                )
            )
        commands.append(RouterCommand.SWEEP)
        inputs.append(
            eth_abi.abi.encode(
                types=("address", "address", "uint256"),
                args=(
                    UniversalRouterSpecialAddress.ETH if token_out.is_native else token_out.address,
                    recipient,
                    amount_out_min,
                ),
            )
        )

    logger.debug(f"Universal Router commands: {bytes(commands).hex()}")

    if deadline is None:
        call_data = encode_function_calldata(
            "execute(bytes,bytes[])",
            [bytes(commands), inputs],
        )
    else:
        call_data = encode_function_calldata(
            "execute(bytes,bytes[],uint256)",
            [bytes(commands), inputs, deadline],
        )

    return SwapExecuteParams(
        call_data=call_data,
        value=value,
        token_needs_approval=token_needs_approval,
        message=message,
    )
