from .erc20 import Erc20Token
from .native import NativeCurrency, base_currency_symbol, is_base_currency, wrapped_native_token

__all__ = (
    "Erc20Token",
    "NativeCurrency",
    "base_currency_symbol",
    "is_base_currency",
    "wrapped_native_token",
)
