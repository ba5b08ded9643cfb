import logging

import pytest

from ammkit.constants import BASE_TOKENS, Chain
from ammkit.erc20 import Erc20Token, NativeCurrency
from ammkit.logging import logger
from ammkit.uniswap import UniswapV2Pool, UniswapV2PoolState

WETH_ADDRESS = BASE_TOKENS[Chain.ETHEREUM]["WETH"]
USDC_ADDRESS = BASE_TOKENS[Chain.ETHEREUM]["USDC"]
TOKEN_ADDRESS = "0x1111111111111111111111111111111111111111"
OTHER_TOKEN_ADDRESS = "0x2222222222222222222222222222222222222222"


@pytest.fixture(scope="session", autouse=True)
def _set_ammkit_logging():
    """
    Set the logging level to DEBUG for the test run
    """
    logger.setLevel(logging.DEBUG)


@pytest.fixture
def weth() -> Erc20Token:
    return Erc20Token(
        chain_id=Chain.ETHEREUM,
        address=WETH_ADDRESS,
        decimals=18,
        symbol="WETH",
        name="Wrapped Ether",
    )


@pytest.fixture
def usdc() -> Erc20Token:
    return Erc20Token(
        chain_id=Chain.ETHEREUM,
        address=USDC_ADDRESS,
        decimals=6,
        symbol="USDC",
        name="USD Coin",
    )


@pytest.fixture
def ether() -> Erc20Token:
    return NativeCurrency(Chain.ETHEREUM)


@pytest.fixture
def token() -> Erc20Token:
    return Erc20Token(
        chain_id=Chain.ETHEREUM,
        address=TOKEN_ADDRESS,
        decimals=18,
        symbol="TKN",
    )


@pytest.fixture
def other_token() -> Erc20Token:
    return Erc20Token(
        chain_id=Chain.ETHEREUM,
        address=OTHER_TOKEN_ADDRESS,
        decimals=18,
        symbol="OTHER",
    )


TKN_WETH_V2_POOL_ADDRESS = "0x3333333333333333333333333333333333333333"
WETH_USDC_V2_POOL_ADDRESS = "0x4444444444444444444444444444444444444444"


@pytest.fixture
def tkn_weth_v2_pool(token: Erc20Token, weth: Erc20Token) -> UniswapV2Pool:
    # 2,000,000 TKN and 1,000 WETH
    return UniswapV2Pool(
        chain_id=Chain.ETHEREUM,
        address=TKN_WETH_V2_POOL_ADDRESS,
        token0=token,
        token1=weth,
        state=UniswapV2PoolState(
            address=TKN_WETH_V2_POOL_ADDRESS,
            block=1,
            reserves_token0=2_000_000 * 10**18,
            reserves_token1=1_000 * 10**18,
        ),
    )


@pytest.fixture
def weth_usdc_v2_pool(weth: Erc20Token, usdc: Erc20Token) -> UniswapV2Pool:
    # 2,000,000 USDC and 1,000 WETH
    return UniswapV2Pool(
        chain_id=Chain.ETHEREUM,
        address=WETH_USDC_V2_POOL_ADDRESS,
        token0=usdc,
        token1=weth,
        state=UniswapV2PoolState(
            address=WETH_USDC_V2_POOL_ADDRESS,
            block=1,
            reserves_token0=2_000_000 * 10**6,
            reserves_token1=1_000 * 10**18,
        ),
    )
