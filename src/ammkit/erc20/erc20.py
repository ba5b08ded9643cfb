import dataclasses

from eth_typing import ChecksumAddress

from ammkit.constants import ZERO_ADDRESS
from ammkit.functions import get_checksum_address
from ammkit.types.aliases import ChainId


@dataclasses.dataclass(slots=True, frozen=True, eq=False)
class Erc20Token:
    """
    An ERC-20 token, or the native currency when the address is the zero address.

    Tokens compare equal when they share a chain and address. Ordering follows the numeric value
    of the address, which places the native currency first.
    """

    chain_id: ChainId
    address: ChecksumAddress
    decimals: int
    symbol: str
    name: str = ""
    total_supply: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", get_checksum_address(self.address))
        if self.decimals < 0:
            raise ValueError(f"Invalid decimals {self.decimals} for token {self.address}")

    def __eq__(self, other: object) -> bool:
        match other:
            case Erc20Token():
                return self.chain_id == other.chain_id and self.address == other.address
            case str():
                return self.address.lower() == other.lower()
            case _:
                return NotImplemented

    def __lt__(self, other: object) -> bool:
        match other:
            case Erc20Token():
                return int(self.address, 16) < int(other.address, 16)
            case str():
                return int(self.address, 16) < int(other, 16)
            case _:
                return NotImplemented

    def __gt__(self, other: object) -> bool:
        match other:
            case Erc20Token():
                return int(self.address, 16) > int(other.address, 16)
            case str():
                return int(self.address, 16) > int(other, 16)
            case _:
                return NotImplemented

    def __hash__(self) -> int:
        return hash((self.chain_id, self.address))

    def __str__(self) -> str:
        return self.symbol

    @property
    def is_native(self) -> bool:
        return self.address == ZERO_ADDRESS
