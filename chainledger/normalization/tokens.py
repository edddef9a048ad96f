"""Allow-list of token contracts."""

from chainledger.models.account import TokenInfo
from chainledger.normalization.accounts import normalize_address


class TokenRegistry:
    def __init__(self) -> None:
        self._tokens: dict[str, TokenInfo] = {}

    def allow(
        self,
        address: str,
        symbol: str,
        decimals: int = 18,
        name: str | None = None,
    ) -> TokenInfo:
        info = TokenInfo(
            address=normalize_address(address),
            symbol=symbol,
            decimals=decimals,
            name=name,
        )
        self._tokens[info.address] = info
        return info

    def is_allowed_contract(self, address: str) -> TokenInfo | None:
        if not address:
            return None
        return self._tokens.get(normalize_address(address))

    def contracts_for_symbol(self, symbol: str) -> list[str]:
        """Allow-listed contracts sharing ``symbol``, in registration order."""
        return [info.address for info in self._tokens.values() if info.symbol == symbol]

    def tokens(self) -> list[TokenInfo]:
        return list(self._tokens.values())

    def __len__(self) -> int:
        return len(self._tokens)
