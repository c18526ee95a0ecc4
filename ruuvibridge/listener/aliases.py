"""Human-readable names for sensor addresses."""

from types import MappingProxyType
from typing import Mapping, Tuple


def normalize_address(address: str, keep_mac_colons: bool = False) -> str:
    """Upper-case an address and strip its colons unless asked to keep them.

    RuuviCollector databases store the MAC without colons, which is the
    default here too.
    """
    address = address.upper()
    if not keep_mac_colons:
        address = address.replace(":", "")
    return address


def parse_alias(src: str) -> Tuple[str, str]:
    """Parse "DE:AD:BE:EF:00:00=Sauna" into (address, name)."""
    address, sep, name = src.partition("=")
    if not sep:
        raise ValueError("invalid alias")
    return address.strip(), name.strip()


class AliasResolver:
    """Maps device addresses to configured names.

    Keys are normalized once with the same rule used for the mac tag, so a
    lookup matches whether the alias was written with or without colons.
    """

    def __init__(self, aliases: Mapping[str, str], keep_mac_colons: bool = False):
        self.keep_mac_colons = keep_mac_colons
        self._aliases = MappingProxyType({
            normalize_address(address, keep_mac_colons): name
            for address, name in aliases.items()
        })

    @property
    def aliases(self) -> Mapping[str, str]:
        return self._aliases

    def normalize(self, address: str) -> str:
        return normalize_address(address, self.keep_mac_colons)

    def resolve(self, address: str) -> str:
        """Configured name for the address, or the normalized address itself."""
        normalized = self.normalize(address)
        return self._aliases.get(normalized, normalized)
