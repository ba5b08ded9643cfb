__all__ = (
    "BASE_TOKENS",
    "MAX_INT128",
    "MAX_INT256",
    "MAX_UINT8",
    "MAX_UINT24",
    "MAX_UINT48",
    "MAX_UINT128",
    "MAX_UINT160",
    "MAX_UINT256",
    "MIN_INT128",
    "MIN_INT256",
    "MIN_UINT128",
    "MIN_UINT160",
    "MIN_UINT256",
    "NATIVE_CURRENCY_SYMBOLS",
    "PERMIT2_ADDRESS",
    "UNIVERSAL_ROUTER_ADDRESSES",
    "WRAPPED_NATIVE_TOKENS",
    "ZERO_ADDRESS",
    "Chain",
)

import typing
from enum import IntEnum

from eth_typing import ChecksumAddress

from ammkit.functions import get_checksum_address


def _min_uint(_: int) -> int:
    return 0


def _max_uint(bits: int) -> int:
    return typing.cast("int", 2**bits - 1)


def _min_int(bits: int) -> int:
    return typing.cast("int", -(2 ** (bits - 1)))


def _max_int(bits: int) -> int:
    return typing.cast("int", (2 ** (bits - 1)) - 1)


MIN_INT128 = _min_int(128)
MAX_INT128 = _max_int(128)

MIN_INT256 = _min_int(256)
MAX_INT256 = _max_int(256)

MAX_UINT8 = _max_uint(8)
MAX_UINT24 = _max_uint(24)
MAX_UINT48 = _max_uint(48)

MIN_UINT128 = _min_uint(128)
MAX_UINT128 = _max_uint(128)

MIN_UINT160 = _min_uint(160)
MAX_UINT160 = _max_uint(160)

MIN_UINT256 = _min_uint(256)
MAX_UINT256 = _max_uint(256)

ZERO_ADDRESS: ChecksumAddress = get_checksum_address("0x0000000000000000000000000000000000000000")


class Chain(IntEnum):
    ETHEREUM = 1
    OPTIMISM = 10
    BSC = 56
    BASE = 8453
    ARBITRUM = 42161


NATIVE_CURRENCY_SYMBOLS: dict[int, str] = {
    Chain.ETHEREUM: "ETH",
    Chain.OPTIMISM: "ETH",
    Chain.BSC: "BNB",
    Chain.BASE: "ETH",
    Chain.ARBITRUM: "ETH",
}

# Contract addresses for the wrapped native token, keyed by chain ID
WRAPPED_NATIVE_TOKENS: dict[int, ChecksumAddress] = {
    Chain.ETHEREUM: get_checksum_address("0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"),
    Chain.OPTIMISM: get_checksum_address("0x4200000000000000000000000000000000000006"),
    Chain.BSC: get_checksum_address("0xbb4CdB9CBd36B01bD1cBaEBF2De08d9173bc095c"),
    Chain.BASE: get_checksum_address("0x4200000000000000000000000000000000000006"),
    Chain.ARBITRUM: get_checksum_address("0x82aF49447D8a07e3bd95BD0d56f35241523fBab1"),
}

# Tokens used as pricing anchors, keyed by chain ID and symbol
BASE_TOKENS: dict[int, dict[str, ChecksumAddress]] = {
    Chain.ETHEREUM: {
        "WETH": WRAPPED_NATIVE_TOKENS[Chain.ETHEREUM],
        "USDC": get_checksum_address("0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"),
        "USDT": get_checksum_address("0xdAC17F958D2ee523a2206206994597C13D831ec7"),
        "DAI": get_checksum_address("0x6B175474E89094C44Da98b954EedeAC495271d0F"),
    },
    Chain.OPTIMISM: {
        "WETH": WRAPPED_NATIVE_TOKENS[Chain.OPTIMISM],
        "USDC": get_checksum_address("0x7F5c764cBc14f9669B88837ca1490cCa17c31607"),
        "USDT": get_checksum_address("0x94b008aA00579c1307B0EF2c499aD98a8ce58e58"),
        "DAI": get_checksum_address("0xDA10009cBd5D07dd0CeCc66161FC93D7c9000da1"),
    },
    Chain.BSC: {
        "WBNB": WRAPPED_NATIVE_TOKENS[Chain.BSC],
        "WETH": get_checksum_address("0x2170Ed0880ac9A755fd29B2688956BD959F933F8"),
        "USDC": get_checksum_address("0x8AC76a51cc950d9822D68b83fE1Ad97B32Cd580d"),
        "USDT": get_checksum_address("0x55d398326f99059fF775485246999027B3197955"),
        "DAI": get_checksum_address("0x1AF3F329e8BE154074D8769D1FFa4eE058B1DBc3"),
    },
    Chain.BASE: {
        "WETH": WRAPPED_NATIVE_TOKENS[Chain.BASE],
        "USDC": get_checksum_address("0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"),
        "DAI": get_checksum_address("0x50c5725949A6F0c72E6C4a641F24049A917DB0Cb"),
    },
    Chain.ARBITRUM: {
        "WETH": WRAPPED_NATIVE_TOKENS[Chain.ARBITRUM],
        "USDC": get_checksum_address("0xaf88d065e77c8cC2239327C5EDb3A432268e5831"),
        "USDT": get_checksum_address("0xFd086bC7CD5C481DCC9C85ebE478A1C0b69FCbb9"),
        "DAI": get_checksum_address("0xDA10009cBd5D07dd0CeCc66161FC93D7c9000da1"),
    },
}

# Permit2 is deployed to the same address on every supported chain
PERMIT2_ADDRESS: ChecksumAddress = get_checksum_address(
    "0x000000000022D473030F116dDEE9F6B43aC78BA3"
)

UNIVERSAL_ROUTER_ADDRESSES: dict[int, ChecksumAddress] = {
    Chain.ETHEREUM: get_checksum_address("0x66a9893cC07D91D95644AEDD05D03f95e1dBA8Af"),
    Chain.OPTIMISM: get_checksum_address("0x851116D9223fabED8E56C0E6b8Ad0c31d98B3507"),
    Chain.BSC: get_checksum_address("0x1906c1d672b88cD1B9aC7593301cA990F94Eae07"),
    Chain.BASE: get_checksum_address("0x6fF5693b99212Da76ad316178A184AB56D299b43"),
    Chain.ARBITRUM: get_checksum_address("0xA51afAFe0263b40EdaEf0Df8781eA9aa03E381a3"),
}
