from typing import Any

import eth_abi.abi
import pytest
from eth_account import Account
from eth_account.messages import encode_typed_data

from ammkit.constants import PERMIT2_ADDRESS, UNIVERSAL_ROUTER_ADDRESSES, ZERO_ADDRESS, Chain
from ammkit.erc20 import Erc20Token
from ammkit.exceptions import InvalidRoute
from ammkit.functions import function_selector, get_checksum_address
from ammkit.transaction import (
    Permit2Allowance,
    RouterCommand,
    SwapStep,
    UniversalRouterSpecialAddress,
    V4Action,
    encode_swap,
)
from ammkit.transaction.universal_router import PERMIT2_EXPIRATION, PERMIT2_SIGNATURE_DEADLINE
from ammkit.uniswap import UniswapV2Pool, UniswapV3Pool, UniswapV4Pool
from ammkit.uniswap.v3_functions import encode_v3_path

NOW = 1_700_000_000
RECIPIENT = get_checksum_address("0xabababababababababababababababababababab")
TEST_PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
FAKE_SIGNATURE = b"\x01" * 65

SUFFICIENT_ALLOWANCE = Permit2Allowance(amount=2**160 - 1, expiration=NOW + 3600, nonce=0)


class FakeSigner:
    address = RECIPIENT

    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []

    def sign_typed_data(self, *, full_message: dict[str, Any]) -> bytes:
        self.messages.append(full_message)
        return FAKE_SIGNATURE


def decode_execute(call_data: bytes) -> tuple[bytes, list[bytes]]:
    assert call_data[:4] == function_selector("execute(bytes,bytes[])")
    commands, inputs = eth_abi.abi.decode(["bytes", "bytes[]"], call_data[4:])
    return commands, list(inputs)


def decode_address(address: str) -> str:
    return get_checksum_address(address)


@pytest.fixture
def signer() -> FakeSigner:
    return FakeSigner()


@pytest.fixture
def weth_usdc_v3_pool(usdc: Erc20Token, weth: Erc20Token) -> UniswapV3Pool:
    return UniswapV3Pool(
        chain_id=Chain.ETHEREUM,
        address="0x88e6A0c2dDD26FEEb64F039a2c41296FcB3f5640",
        token0=usdc,
        token1=weth,
        fee=500,
    )


@pytest.fixture
def eth_usdc_v4_pool(ether: Erc20Token, usdc: Erc20Token) -> UniswapV4Pool:
    return UniswapV4Pool(
        chain_id=Chain.ETHEREUM,
        token0=ether,
        token1=usdc,
        fee=500,
        tick_spacing=10,
    )


def test_token_input_with_existing_allowance(
    tkn_weth_v2_pool: UniswapV2Pool, token: Erc20Token, weth: Erc20Token, signer: FakeSigner
):
    params = encode_swap(
        Chain.ETHEREUM,
        [SwapStep(tkn_weth_v2_pool, token, weth, 10**21, 4 * 10**17)],
        amount_in=10**21,
        amount_out_min=39 * 10**16,
        token_in=token,
        token_out=weth,
        signer=signer,
        recipient=RECIPIENT,
        now=NOW,
        permit2_allowance=SUFFICIENT_ALLOWANCE,
    )
    assert params.value == 0
    assert params.message is None
    assert params.token_needs_approval is False
    assert signer.messages == []

    commands, inputs = decode_execute(params.call_data)
    assert commands == bytes([RouterCommand.V2_SWAP_EXACT_IN, RouterCommand.SWEEP])

    recipient, amount_in, amount_out_min, path, payer_is_user = eth_abi.abi.decode(
        ["address", "uint256", "uint256", "address[]", "bool"], inputs[0]
    )
    assert decode_address(recipient) == UniversalRouterSpecialAddress.ROUTER
    assert amount_in == 10**21
    assert amount_out_min == 0
    assert [decode_address(address) for address in path] == [token.address, weth.address]
    assert payer_is_user is True

    sweep_token, sweep_recipient, sweep_min = eth_abi.abi.decode(
        ["address", "address", "uint256"], inputs[1]
    )
    assert decode_address(sweep_token) == weth.address
    assert decode_address(sweep_recipient) == RECIPIENT
    assert sweep_min == 39 * 10**16


def test_native_input_is_wrapped(
    weth_usdc_v3_pool: UniswapV3Pool,
    ether: Erc20Token,
    weth: Erc20Token,
    usdc: Erc20Token,
    signer: FakeSigner,
):
    params = encode_swap(
        Chain.ETHEREUM,
        [SwapStep(weth_usdc_v3_pool, ether, usdc, 10**18, 2_000 * 10**6)],
        amount_in=10**18,
        amount_out_min=1_990 * 10**6,
        token_in=ether,
        token_out=usdc,
        signer=signer,
        recipient=RECIPIENT,
        now=NOW,
    )
    assert params.value == 10**18
    assert params.message is None

    commands, inputs = decode_execute(params.call_data)
    assert commands == bytes(
        [RouterCommand.WRAP_ETH, RouterCommand.V3_SWAP_EXACT_IN, RouterCommand.SWEEP]
    )

    wrap_recipient, wrap_amount = eth_abi.abi.decode(["address", "uint256"], inputs[0])
    assert decode_address(wrap_recipient) == UniversalRouterSpecialAddress.ROUTER
    assert wrap_amount == 10**18

    recipient, amount_in, amount_out_min, path, payer_is_user = eth_abi.abi.decode(
        ["address", "uint256", "uint256", "bytes", "bool"], inputs[1]
    )
    assert decode_address(recipient) == UniversalRouterSpecialAddress.ROUTER
    assert amount_in == 10**18
    assert amount_out_min == 0
    assert path == encode_v3_path([weth.address, 500, usdc.address])
    # the wrapped input is held by the router
    assert payer_is_user is False

    sweep_token, sweep_recipient, sweep_min = eth_abi.abi.decode(
        ["address", "address", "uint256"], inputs[2]
    )
    assert decode_address(sweep_token) == usdc.address
    assert decode_address(sweep_recipient) == RECIPIENT
    assert sweep_min == 1_990 * 10**6


def test_native_input_through_weth_step_is_wrapped(
    weth_usdc_v3_pool: UniswapV3Pool,
    ether: Erc20Token,
    weth: Erc20Token,
    usdc: Erc20Token,
    signer: FakeSigner,
):
    params = encode_swap(
        Chain.ETHEREUM,
        [SwapStep(weth_usdc_v3_pool, weth, usdc, 10**18, 2_000 * 10**6)],
        amount_in=10**18,
        amount_out_min=1_990 * 10**6,
        token_in=ether,
        token_out=usdc,
        signer=signer,
        recipient=RECIPIENT,
        now=NOW,
    )
    assert params.value == 10**18

    commands, inputs = decode_execute(params.call_data)
    assert commands == bytes(
        [RouterCommand.WRAP_ETH, RouterCommand.V3_SWAP_EXACT_IN, RouterCommand.SWEEP]
    )
    _, wrap_amount = eth_abi.abi.decode(["address", "uint256"], inputs[0])
    assert wrap_amount == 10**18

    *_, payer_is_user = eth_abi.abi.decode(
        ["address", "uint256", "uint256", "bytes", "bool"], inputs[1]
    )
    assert payer_is_user is False


def test_weth_from_earlier_hop_is_not_wrapped(
    weth_usdc_v3_pool: UniswapV3Pool,
    tkn_weth_v2_pool: UniswapV2Pool,
    ether: Erc20Token,
    weth: Erc20Token,
    usdc: Erc20Token,
    token: Erc20Token,
    signer: FakeSigner,
):
    params = encode_swap(
        Chain.ETHEREUM,
        [
            SwapStep(weth_usdc_v3_pool, ether, usdc, 10**18, 2_000 * 10**6),
            SwapStep(weth_usdc_v3_pool, usdc, weth, 2_000 * 10**6, 10**18),
            SwapStep(tkn_weth_v2_pool, weth, token, 10**18, 1_990 * 10**18),
        ],
        amount_in=10**18,
        amount_out_min=1_900 * 10**18,
        token_in=ether,
        token_out=token,
        signer=signer,
        recipient=RECIPIENT,
        now=NOW,
    )
    commands, inputs = decode_execute(params.call_data)
    assert commands == bytes(
        [
            RouterCommand.WRAP_ETH,
            RouterCommand.V3_SWAP_EXACT_IN,
            RouterCommand.V3_SWAP_EXACT_IN,
            RouterCommand.V2_SWAP_EXACT_IN,
            RouterCommand.SWEEP,
        ]
    )
    _, wrap_amount = eth_abi.abi.decode(["address", "uint256"], inputs[0])
    assert wrap_amount == 10**18


def test_native_output_is_unwrapped(
    tkn_weth_v2_pool: UniswapV2Pool, token: Erc20Token, ether: Erc20Token, signer: FakeSigner
):
    params = encode_swap(
        Chain.ETHEREUM,
        [SwapStep(tkn_weth_v2_pool, token, ether, 10**21, 4 * 10**17)],
        amount_in=10**21,
        amount_out_min=39 * 10**16,
        token_in=token,
        token_out=ether,
        signer=signer,
        recipient=RECIPIENT,
        now=NOW,
        permit2_allowance=SUFFICIENT_ALLOWANCE,
    )
    commands, inputs = decode_execute(params.call_data)
    assert commands == bytes([RouterCommand.V2_SWAP_EXACT_IN, RouterCommand.UNWRAP_WETH])

    unwrap_recipient, unwrap_min = eth_abi.abi.decode(["address", "uint256"], inputs[1])
    assert decode_address(unwrap_recipient) == RECIPIENT
    assert unwrap_min == 39 * 10**16


def test_native_input_through_v4_pool(
    eth_usdc_v4_pool: UniswapV4Pool, ether: Erc20Token, usdc: Erc20Token, signer: FakeSigner
):
    params = encode_swap(
        Chain.ETHEREUM,
        [SwapStep(eth_usdc_v4_pool, ether, usdc, 10**18, 2_000 * 10**6)],
        amount_in=10**18,
        amount_out_min=1_990 * 10**6,
        token_in=ether,
        token_out=usdc,
        signer=signer,
        recipient=RECIPIENT,
        now=NOW,
    )
    assert params.value == 10**18

    # the pool manager settles the native currency directly, so nothing is wrapped
    commands, inputs = decode_execute(params.call_data)
    assert commands == bytes([RouterCommand.V4_SWAP, RouterCommand.SWEEP])

    actions, action_params = eth_abi.abi.decode(["bytes", "bytes[]"], inputs[0])
    assert actions == bytes([V4Action.SETTLE, V4Action.SWAP_EXACT_IN_SINGLE, V4Action.TAKE])

    settle_currency, settle_amount, settle_payer_is_user = eth_abi.abi.decode(
        ["address", "uint256", "bool"], action_params[0]
    )
    assert decode_address(settle_currency) == ZERO_ADDRESS
    assert settle_amount == 10**18
    assert settle_payer_is_user is False

    ((pool_key, zero_for_one, amount_in, amount_out_min, hook_data),) = eth_abi.abi.decode(
        ["((address,address,uint24,int24,address),bool,uint128,uint128,bytes)"],
        action_params[1],
    )
    currency0, currency1, fee, tick_spacing, hooks = pool_key
    assert decode_address(currency0) == ZERO_ADDRESS
    assert decode_address(currency1) == usdc.address
    assert (fee, tick_spacing) == (500, 10)
    assert decode_address(hooks) == ZERO_ADDRESS
    assert zero_for_one is True
    assert amount_in == 10**18
    assert amount_out_min == 0
    assert hook_data == b""

    take_currency, take_recipient, take_amount = eth_abi.abi.decode(
        ["address", "address", "uint256"], action_params[2]
    )
    assert decode_address(take_currency) == usdc.address
    assert decode_address(take_recipient) == UniversalRouterSpecialAddress.ROUTER
    assert take_amount == 0


def test_multihop_route(
    tkn_weth_v2_pool: UniswapV2Pool,
    weth_usdc_v3_pool: UniswapV3Pool,
    token: Erc20Token,
    weth: Erc20Token,
    usdc: Erc20Token,
    signer: FakeSigner,
):
    params = encode_swap(
        Chain.ETHEREUM,
        [
            SwapStep(tkn_weth_v2_pool, token, weth, 10**21, 4 * 10**17),
            SwapStep(weth_usdc_v3_pool, weth, usdc, 4 * 10**17, 800 * 10**6),
        ],
        amount_in=10**21,
        amount_out_min=790 * 10**6,
        token_in=token,
        token_out=usdc,
        signer=signer,
        recipient=RECIPIENT,
        now=NOW,
        permit2_allowance=SUFFICIENT_ALLOWANCE,
    )
    commands, inputs = decode_execute(params.call_data)
    assert commands == bytes(
        [RouterCommand.V2_SWAP_EXACT_IN, RouterCommand.V3_SWAP_EXACT_IN, RouterCommand.SWEEP]
    )

    *_, first_payer_is_user = eth_abi.abi.decode(
        ["address", "uint256", "uint256", "address[]", "bool"], inputs[0]
    )
    _, second_amount_in, _, _, second_payer_is_user = eth_abi.abi.decode(
        ["address", "uint256", "uint256", "bytes", "bool"], inputs[1]
    )
    assert first_payer_is_user is True
    # the intermediate output is already held by the router
    assert second_payer_is_user is False
    assert second_amount_in == 4 * 10**17


def test_native_output_from_mixed_route_is_swept(
    tkn_weth_v2_pool: UniswapV2Pool,
    eth_usdc_v4_pool: UniswapV4Pool,
    weth_usdc_v3_pool: UniswapV3Pool,
    token: Erc20Token,
    ether: Erc20Token,
    usdc: Erc20Token,
    signer: FakeSigner,
):
    # half of the output arrives as WETH and half as native ETH
    params = encode_swap(
        Chain.ETHEREUM,
        [
            SwapStep(tkn_weth_v2_pool, token, ether, 10**21, 4 * 10**17),
            SwapStep(weth_usdc_v3_pool, ether, usdc, 2 * 10**17, 400 * 10**6),
            SwapStep(eth_usdc_v4_pool, usdc, ether, 400 * 10**6, 2 * 10**17),
        ],
        amount_in=10**21,
        amount_out_min=39 * 10**16,
        token_in=token,
        token_out=ether,
        signer=signer,
        recipient=RECIPIENT,
        now=NOW,
        permit2_allowance=SUFFICIENT_ALLOWANCE,
    )
    commands, inputs = decode_execute(params.call_data)
    assert commands[-2:] == bytes([RouterCommand.UNWRAP_WETH, RouterCommand.SWEEP])

    unwrap_recipient, unwrap_min = eth_abi.abi.decode(["address", "uint256"], inputs[-2])
    assert decode_address(unwrap_recipient) == UniversalRouterSpecialAddress.ROUTER
    assert unwrap_min == 0

    sweep_token, sweep_recipient, sweep_min = eth_abi.abi.decode(
        ["address", "address", "uint256"], inputs[-1]
    )
    assert decode_address(sweep_token) == UniversalRouterSpecialAddress.ETH
    assert decode_address(sweep_recipient) == RECIPIENT
    assert sweep_min == 39 * 10**16


@pytest.mark.parametrize(
    "allowance",
    [
        Permit2Allowance(amount=0, expiration=NOW + 3600, nonce=3),
        Permit2Allowance(amount=2**160 - 1, expiration=NOW - 1, nonce=3),
    ],
)
def test_permit_is_signed_when_allowance_is_insufficient(
    tkn_weth_v2_pool: UniswapV2Pool,
    token: Erc20Token,
    weth: Erc20Token,
    signer: FakeSigner,
    allowance: Permit2Allowance,
):
    params = encode_swap(
        Chain.ETHEREUM,
        [SwapStep(tkn_weth_v2_pool, token, weth, 10**21, 4 * 10**17)],
        amount_in=10**21,
        amount_out_min=39 * 10**16,
        token_in=token,
        token_out=weth,
        signer=signer,
        recipient=RECIPIENT,
        now=NOW,
        permit2_allowance=allowance,
        token_allowance=0,
    )
    assert params.token_needs_approval is True
    assert params.message is not None
    assert signer.messages == [params.message]

    assert params.message["primaryType"] == "PermitSingle"
    assert params.message["domain"] == {
        "name": "Permit2",
        "chainId": Chain.ETHEREUM,
        "verifyingContract": PERMIT2_ADDRESS,
    }
    assert params.message["message"] == {
        "details": {
            "token": token.address,
            "amount": 10**21,
            "expiration": NOW + PERMIT2_EXPIRATION,
            "nonce": 3,
        },
        "spender": UNIVERSAL_ROUTER_ADDRESSES[Chain.ETHEREUM],
        "sigDeadline": NOW + PERMIT2_SIGNATURE_DEADLINE,
    }

    commands, inputs = decode_execute(params.call_data)
    assert commands == bytes(
        [RouterCommand.PERMIT2_PERMIT, RouterCommand.V2_SWAP_EXACT_IN, RouterCommand.SWEEP]
    )

    permit_single, signature = eth_abi.abi.decode(
        ["((address,uint160,uint48,uint48),address,uint256)", "bytes"], inputs[0]
    )
    (permit_token, permit_amount, permit_expiration, permit_nonce), spender, sig_deadline = (
        permit_single
    )
    assert decode_address(permit_token) == token.address
    assert permit_amount == 10**21
    assert permit_expiration == NOW + PERMIT2_EXPIRATION
    assert permit_nonce == 3
    assert decode_address(spender) == UNIVERSAL_ROUTER_ADDRESSES[Chain.ETHEREUM]
    assert sig_deadline == NOW + PERMIT2_SIGNATURE_DEADLINE
    assert signature == FAKE_SIGNATURE

    # the swap pulls the input from the sender
    *_, payer_is_user = eth_abi.abi.decode(
        ["address", "uint256", "uint256", "address[]", "bool"], inputs[1]
    )
    assert payer_is_user is True


def test_permit_without_token_approval(
    tkn_weth_v2_pool: UniswapV2Pool, token: Erc20Token, weth: Erc20Token, signer: FakeSigner
):
    params = encode_swap(
        Chain.ETHEREUM,
        [SwapStep(tkn_weth_v2_pool, token, weth, 10**21, 4 * 10**17)],
        amount_in=10**21,
        amount_out_min=39 * 10**16,
        token_in=token,
        token_out=weth,
        signer=signer,
        recipient=RECIPIENT,
        now=NOW,
        permit2_allowance=Permit2Allowance(amount=0, expiration=0, nonce=0),
        token_allowance=10**21,
    )
    assert params.message is not None
    assert params.token_needs_approval is False


def test_permit_signed_by_local_account(
    tkn_weth_v2_pool: UniswapV2Pool, token: Erc20Token, weth: Erc20Token
):
    account = Account.from_key(TEST_PRIVATE_KEY)
    params = encode_swap(
        Chain.ETHEREUM,
        [SwapStep(tkn_weth_v2_pool, token, weth, 10**21, 4 * 10**17)],
        amount_in=10**21,
        amount_out_min=39 * 10**16,
        token_in=token,
        token_out=weth,
        signer=account,
        recipient=account.address,
        now=NOW,
        permit2_allowance=Permit2Allowance(amount=0, expiration=0, nonce=0),
    )
    assert params.message is not None

    _, inputs = decode_execute(params.call_data)
    _, signature = eth_abi.abi.decode(
        ["((address,uint160,uint48,uint48),address,uint256)", "bytes"], inputs[0]
    )
    assert len(signature) == 65
    assert (
        Account.recover_message(encode_typed_data(full_message=params.message), signature=signature)
        == account.address
    )


def test_deadline(tkn_weth_v2_pool: UniswapV2Pool, token: Erc20Token, weth: Erc20Token, signer):
    params = encode_swap(
        Chain.ETHEREUM,
        [SwapStep(tkn_weth_v2_pool, token, weth, 10**21, 4 * 10**17)],
        amount_in=10**21,
        amount_out_min=39 * 10**16,
        token_in=token,
        token_out=weth,
        signer=signer,
        recipient=RECIPIENT,
        now=NOW,
        permit2_allowance=SUFFICIENT_ALLOWANCE,
        deadline=NOW + 60,
    )
    assert params.call_data[:4] == function_selector("execute(bytes,bytes[],uint256)")
    commands, _, deadline = eth_abi.abi.decode(
        ["bytes", "bytes[]", "uint256"], params.call_data[4:]
    )
    assert commands == bytes([RouterCommand.V2_SWAP_EXACT_IN, RouterCommand.SWEEP])
    assert deadline == NOW + 60


def test_invalid_routes(
    tkn_weth_v2_pool: UniswapV2Pool,
    token: Erc20Token,
    weth: Erc20Token,
    usdc: Erc20Token,
    signer: FakeSigner,
):
    step = SwapStep(tkn_weth_v2_pool, token, weth, 10**21, 4 * 10**17)
    arguments: dict[str, Any] = {
        "amount_in": 10**21,
        "amount_out_min": 0,
        "token_in": token,
        "token_out": weth,
        "signer": signer,
        "recipient": RECIPIENT,
        "now": NOW,
        "permit2_allowance": SUFFICIENT_ALLOWANCE,
    }

    with pytest.raises(InvalidRoute, match="empty"):
        encode_swap(Chain.ETHEREUM, [], **arguments)
    with pytest.raises(InvalidRoute, match="exact input"):
        encode_swap(Chain.ETHEREUM, [step], exact_input=False, **arguments)
    with pytest.raises(InvalidRoute, match="chain"):
        encode_swap(999, [step], **arguments)
    with pytest.raises(InvalidRoute, match="does not hold"):
        encode_swap(
            Chain.ETHEREUM,
            [SwapStep(tkn_weth_v2_pool, usdc, weth, 10**6, 10**15)],
            **arguments,
        )

    arguments["permit2_allowance"] = None
    with pytest.raises(InvalidRoute, match="Permit2"):
        encode_swap(Chain.ETHEREUM, [step], **arguments)
