from eth_typing import ChecksumAddress

from ammkit.constants import (
    BASE_TOKENS,
    NATIVE_CURRENCY_SYMBOLS,
    WRAPPED_NATIVE_TOKENS,
    ZERO_ADDRESS,
)
from ammkit.erc20.erc20 import Erc20Token
from ammkit.exceptions import AmmValueError
from ammkit.types.aliases import ChainId

_NATIVE_CURRENCY_NAMES = {
    "ETH": "Ether",
    "BNB": "BNB",
}


def NativeCurrency(chain_id: ChainId) -> Erc20Token:  # noqa: N802
    """
    Build the native currency for a chain, represented by the zero address.
    """

    try:
        symbol = NATIVE_CURRENCY_SYMBOLS[chain_id]
    except KeyError:
        raise AmmValueError(message=f"Chain {chain_id} is not supported.") from None

    return Erc20Token(
        chain_id=chain_id,
        address=ZERO_ADDRESS,
        decimals=18,
        symbol=symbol,
        name=_NATIVE_CURRENCY_NAMES[symbol],
    )


def wrapped_native_token(chain_id: ChainId) -> ChecksumAddress:
    try:
        return WRAPPED_NATIVE_TOKENS[chain_id]
    except KeyError:
        raise AmmValueError(message=f"Chain {chain_id} is not supported.") from None


def base_currency_symbol(token: Erc20Token) -> str | None:
    """
    Return the canonical symbol of a base currency, or None if the token is not one.

    The lookup is by address, so bridged variants with a different on-chain symbol still resolve.
    """

    if token.is_native:
        return NATIVE_CURRENCY_SYMBOLS.get(token.chain_id)

    for symbol, address in BASE_TOKENS.get(token.chain_id, {}).items():
        if address == token.address:
            return symbol
    return None


def is_base_currency(token: Erc20Token) -> bool:
    return base_currency_symbol(token) is not None
