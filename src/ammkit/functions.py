import functools
from collections.abc import Sequence
from typing import Any

import eth_abi.abi
from cchecksum import to_checksum_address
from eth_typing import ChecksumAddress, HexStr
from eth_utils.crypto import keccak


@functools.lru_cache(maxsize=512)
def get_checksum_address(address: HexStr | bytes) -> ChecksumAddress:
    return to_checksum_address(address)


def function_selector(function_prototype: str) -> bytes:
    """
    Return the 4-byte selector for a function prototype, e.g. 'execute(bytes,bytes[])'.
    """

    return keccak(text=function_prototype)[:4]


def encode_function_calldata(
    function_prototype: str, function_arguments: Sequence[Any] | None
) -> bytes:
    """
    Encode the calldata to execute a call to the given function prototype, with ordered arguments.
    The resulting bytes array will include the 4-byte function selector, followed by the
    ABI-encoded arguments.
    """

    if function_arguments is None:
        function_arguments = ()

    return function_selector(function_prototype) + eth_abi.abi.encode(
        types=extract_argument_types_from_function_prototype(function_prototype),
        args=function_arguments,
    )


def extract_argument_types_from_function_prototype(function_prototype: str) -> list[str]:
    """
    Extract the argument types from the function prototype.

    e.g. the argument types for the prototype 'function(address,uint256)' are ['address','uint256']
    """

    arguments = function_prototype[function_prototype.find("(") + 1 : function_prototype.rfind(")")]
    if not arguments:
        return []

    # Split on top-level commas only, so tuple arguments stay intact
    types: list[str] = []
    depth = 0
    current = ""
    for char in arguments:
        match char:
            case "(":
                depth += 1
            case ")":
                depth -= 1
            case "," if depth == 0:
                types.append(current)
                current = ""
                continue
        current += char
    types.append(current)
    return types


def evm_divide(numerator: int, denominator: int) -> int:
    """
    Perform integer division, rounding towards zero to match the EVM behavior.
    """
    return -(-numerator // denominator) if numerator < 0 else numerator // denominator
