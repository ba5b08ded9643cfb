from dataclasses import dataclass

from hexbytes import HexBytes

from ammkit.types.aliases import Address, BlockNumber, ChainId


@dataclass(slots=True, frozen=True, kw_only=True)
class AbstractPoolState:
    address: Address
    block: BlockNumber | None


class AbstractLiquidityPool:
    """
    Identity and ordering shared by all pool helpers. Pools compare by chain and address, and may
    also be compared directly against an address given as a string or bytes.
    """

    address: Address
    chain_id: ChainId
    name: str

    def __eq__(self, other: object) -> bool:
        match other:
            case AbstractLiquidityPool():
                return (self.chain_id, self.address.lower()) == (
                    other.chain_id,
                    other.address.lower(),
                )
            case HexBytes():
                return self.address.lower() == other.to_0x_hex().lower()
            case bytes():
                return self.address.lower() == "0x" + other.hex().lower()
            case str():
                return self.address.lower() == other.lower()
            case _:
                return NotImplemented

    def __lt__(self, other: object) -> bool:
        match other:
            case AbstractLiquidityPool():
                return self.address.lower() < other.address.lower()
            case HexBytes():
                return self.address.lower() < other.to_0x_hex().lower()
            case bytes():
                return self.address.lower() < "0x" + other.hex().lower()
            case str():
                return self.address.lower() < other.lower()
            case _:
                return NotImplemented

    def __gt__(self, other: object) -> bool:
        match other:
            case AbstractLiquidityPool():
                return self.address.lower() > other.address.lower()
            case HexBytes():
                return self.address.lower() > other.to_0x_hex().lower()
            case bytes():
                return self.address.lower() > "0x" + other.hex().lower()
            case str():
                return self.address.lower() > other.lower()
            case _:
                return NotImplemented

    def __hash__(self) -> int:
        return hash((self.chain_id, self.address.lower()))

    def __str__(self) -> str:
        return self.name
